"""
File: routers/health.py
Purpose: Liveness probe for the Graph connector.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Return service health status for liveness probes."""
    return {"status": "Healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

"""
File: schemas/ingest.py
Purpose: Pydantic models for the ingest API.
"""

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class IngestRequest(BaseModel):
    """Batch of arbitrary JSON documents to push into the connection."""
    model_config = ConfigDict(extra="ignore")

    documents: Optional[List[Any]] = Field(
        None,
        validation_alias=AliasChoices("documents", "Documents"),
        description="Arbitrary JSON values; objects become item properties",
    )


class IngestResponse(BaseModel):
    """Aggregate ingestion outcome (200 on full success, 400 otherwise)."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    processed_count: int = Field(..., alias="processedCount")
    errors: List[str] = Field(default_factory=list)


class ProblemDetails(BaseModel):
    """Generic error body for unexpected failures; internal detail is never included."""
    title: str
    status: int
    detail: str

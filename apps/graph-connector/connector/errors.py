"""
File: errors.py
Purpose: Error kinds carried by result values across service boundaries.
"""

from enum import Enum

VALIDATION_EMPTY = "Request must contain at least one document"


class ErrorKind(str, Enum):
    """Failure categories; each maps to one HTTP outcome at the endpoint."""
    FORMAT = "format"          # malformed auth header -> 400
    AUTH = "auth"              # missing/invalid credential, token exchange failed -> 401
    VALIDATION = "validation"  # empty/missing documents -> 400
    ITEM = "item"              # single document rejected by Graph -> aggregated
    TRANSPORT = "transport"    # composite request failed -> ITEM for the whole chunk
    TIMEOUT = "timeout"        # ingestion deadline elapsed -> ITEM for unfinished docs
    UNHANDLED = "unhandled"    # anything else -> 500


def item_error(index: int, status: int, body: str) -> str:
    return f"Failed to ingest document {index}: {status} - {body}"


def missing_response_error(index: int) -> str:
    return f"Failed to get response for document {index} from batch"


def transport_error(index: int, detail: str) -> str:
    return f"Failed to ingest document {index}: Batch processing error - {detail}"


def timeout_error(index: int) -> str:
    return f"Failed to ingest document {index}: Timed out before batch completed"

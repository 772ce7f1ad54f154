"""Error envelope returned for every failed request."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

INTERNAL_ERROR_MESSAGE = "Internal server error"
UNKNOWN_CORRELATION_ID = "unknown"


class ErrorEnvelope(BaseModel):
    """Canonical error response body.

    Serialized with camelCase keys:
        {"statusCode", "message", "error", "details"?, "timestamp", "path", "correlationId"}
    """
    status_code: int = Field(..., alias="statusCode")
    message: Union[str, List[str]]
    error: str
    details: Optional[Any] = None
    timestamp: str
    path: str
    correlation_id: str = Field(UNKNOWN_CORRELATION_ID, alias="correlationId")

    class Config:
        frozen = True
        populate_by_name = True

    def to_response_body(self) -> Dict[str, Any]:
        body = self.model_dump(by_alias=True)
        if body["details"] is None:
            body.pop("details")
        return body


def minimal_internal_envelope(timestamp: str, path: str = "", correlation_id: str = UNKNOWN_CORRELATION_ID) -> Dict[str, Any]:
    """Hardcoded 500 body used when building the real envelope fails."""
    return {
        "statusCode": 500,
        "message": INTERNAL_ERROR_MESSAGE,
        "error": "Internal Server Error",
        "timestamp": timestamp,
        "path": path,
        "correlationId": correlation_id,
    }

"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Invoke Models
# ============================================================================

class InvokeRequest(BaseModel):
    """Request to run a named ledger operation."""
    function: str = Field(
        ...,
        min_length=1,
        description="Operation name, e.g. makeApplication or acceptApplication"
    )
    args: List[str] = Field(
        default_factory=list,
        description="Positional string arguments for the operation"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "function": "makeApplication",
                "args": [
                    "{\"applicationId\": \"LEP0000001\", \"price\": \"30000.00\"}"
                ]
            }
        }


class InvokeResponse(BaseModel):
    """Response of a successful ledger operation."""
    status: int
    payload: Optional[Any] = None  # decoded JSON payload, None when empty
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "status": 200,
                "payload": {
                    "applicationId": "LEP0000001",
                    "price": "30000.00",
                    "status": "waiting"
                },
                "message": None
            }
        }


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int

    class Config:
        json_schema_extra = {
            "example": {
                "error": "NOT_FOUND",
                "detail": "Application LEP0000001 not found",
                "status_code": 404
            }
        }

"""Error body shared by every non-200 webhook and health answer."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body produced by the exception handlers."""

    error_code: str = Field(description="Machine-readable code, e.g. FORBIDDEN")
    message: str = Field(description="Short human-readable reason")
    details: Any | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"error_code": "IDENTITY_ERROR", "message": "Auth error", "details": None},
            ]
        }
    }

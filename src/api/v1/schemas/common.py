"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error envelope rendered by the exception handlers."""

    error_code: str
    message: str
    details: Any | None = None

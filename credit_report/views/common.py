"""Common response schemas."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    detail: str
    provider: Optional[str] = None
    code: Optional[str] = None

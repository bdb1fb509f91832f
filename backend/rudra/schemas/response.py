"""Generic API response schemas"""

from pydantic import BaseModel
from typing import Optional, Any


class MessageResponse(BaseModel):
    """Success envelope shared by the auth endpoints"""
    message: str
    result: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Error envelope. ``error`` is only set for validation failures."""
    message: str
    error: Optional[str] = None


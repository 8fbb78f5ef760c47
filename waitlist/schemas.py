"""Pydantic schemas for request/response validation and serialization."""

from pydantic import BaseModel, ConfigDict
from datetime import datetime


# ==================== Error Schemas ====================

class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""
    error: str


# ==================== Signup Schemas ====================

class UserPost(BaseModel):
    """Signup request body. A missing email is treated as empty."""
    email: str | None = None


class MessageResponse(BaseModel):
    message: str


class UserOut(BaseModel):
    """Stored signup as returned by the admin listing."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    created_at: datetime

"""
Chat API schemas.

Request/response contracts for the chat endpoint.

Dependencies: pydantic
System role: Chat API contracts
"""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request schema for chat messages."""

    message: str | None = Field(default=None, description="User question or message")


class ChatResponse(BaseModel):
    """Response schema for chat messages."""

    message: str = Field(description="HTML-flavored answer")


class ErrorResponse(BaseModel):
    """Error body returned on failures."""

    error: str = Field(description="Short user-facing error message")

"""Pydantic schemas for the chat endpoint."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000, description="User question")


class ChatResponse(BaseModel):
    id: str = Field(..., description="Message identifier")
    content: str = Field(..., description="Markdown answer")
    role: Literal["user", "assistant"] = "assistant"
    timestamp: datetime

    class Config:
        from_attributes = True

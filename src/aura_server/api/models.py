"""
API Models for the AURA Server

Pydantic request/response schemas for the chat and health endpoints.

Design Goals
------------
- Strict validation at the edge (unknown fields rejected)
- Bounded input sizes before any retrieval work starts
- Accept both snake_case and the camelCase names used by browser clients
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..chat.models import ConversationMessage
from ..config import settings


# ---------------------------------------------------------------------
# Chat Models
# ---------------------------------------------------------------------

class ChatRequest(BaseModel):
    """
    Chat request payload.
    """
    message: str = Field(..., min_length=1)
    conversation_history: List[ConversationMessage] = Field(
        default_factory=list,
        validation_alias=AliasChoices("conversation_history", "conversationHistory"),
    )
    stream: bool = False
    user_location: Optional[str] = Field(
        default=None,
        max_length=200,
        validation_alias=AliasChoices("user_location", "userLocation"),
    )
    latitude: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("message")
    @classmethod
    def _check_message(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message cannot be empty")
        if len(value) > settings.max_message_chars:
            raise ValueError(f"Message too long (max {settings.max_message_chars} chars)")
        return value


class ChatResponse(BaseModel):
    """
    Non-streaming chat response.
    """
    response: str
    sources: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Health Models
# ---------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "ok"
    documents: int = Field(default=0, ge=0)
    chunks: int = Field(default=0, ge=0)

    model_config = ConfigDict(extra="forbid")

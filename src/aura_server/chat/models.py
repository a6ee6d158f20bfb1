"""
Conversation Models

Message and reply types shared by the orchestrator, the service facade and
the HTTP layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterator, List, Literal

from pydantic import BaseModel, ConfigDict, Field


class ConversationMessage(BaseModel):
    """One prior turn of the conversation."""

    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=20000)

    model_config = ConfigDict(extra="forbid", frozen=True)


@dataclass
class ChatReply:
    text: str
    sources: List[str] = field(default_factory=list)


@dataclass
class StreamingReply:
    """
    Sources are known before the first token; ``tokens`` is single-pass.
    """
    sources: List[str]
    tokens: AsyncIterator[str]

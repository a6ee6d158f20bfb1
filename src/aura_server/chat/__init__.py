"""
Chat Package

Conversation message types and the prompt-building orchestrator.
"""

from .models import ChatReply, ConversationMessage, StreamingReply
from .orchestrator import ConversationOrchestrator

__all__ = [
    "ChatReply",
    "ConversationMessage",
    "StreamingReply",
    "ConversationOrchestrator",
]

"""
Conversation Orchestrator

Assembles context for a question, builds the prompt and dispatches it to the
completion service.

Message layout
--------------
1. system prompt (varies with whether the caller's dorm is known)
2. prior history, original order, user/assistant turns only
3. final user turn: the quoted question plus the assembled context

Completion failures surface as ``CompletionError`` and are not retried.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .models import ChatReply, ConversationMessage, StreamingReply
from ..llm.client import LLMClient
from ..prompts import build_system_prompt, build_user_turn
from ..retrieval.assembler import ContextAssembler

logger = logging.getLogger("aura.orchestrator")

ALLOWED_HISTORY_ROLES = ("user", "assistant")


class ConversationOrchestrator:
    def __init__(self, assembler: ContextAssembler, llm: LLMClient) -> None:
        self._assembler = assembler
        self._llm = llm

    def build_messages(
        self,
        query: str,
        history: Sequence[ConversationMessage],
        location: Optional[str],
        context: str,
    ) -> List[Dict[str, str]]:
        """
        Build the chat-completions message list.

        Parameters
        ----------
        query : str
            The caller's current question.

        history : Sequence[ConversationMessage]
            Earlier turns, oldest first.

        location : Optional[str]
            Resolved building or community label, if known.

        context : str
            Assembled retrieval context (never empty).

        Returns
        -------
        List[Dict[str, str]]
            ``{"role", "content"}`` dicts ready for the completion endpoint.
        """
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": build_system_prompt(location)},
        ]

        for msg in history:
            if msg.role not in ALLOWED_HISTORY_ROLES:
                continue
            messages.append({"role": msg.role, "content": msg.content})

        messages.append({"role": "user", "content": build_user_turn(query, context)})
        return messages

    async def respond(
        self,
        query: str,
        history: Sequence[ConversationMessage] = (),
        location: Optional[str] = None,
    ) -> ChatReply:
        context = await self._assembler.assemble(query, location)
        messages = self.build_messages(query, history, location, context.text)

        logger.info(
            "Requesting completion: %d messages, %d context chars, %d sources",
            len(messages),
            len(context.text),
            len(context.sources),
        )
        text = await self._llm.complete(messages)
        return ChatReply(text=text, sources=context.sources)

    async def respond_stream(
        self,
        query: str,
        history: Sequence[ConversationMessage] = (),
        location: Optional[str] = None,
    ) -> StreamingReply:
        context = await self._assembler.assemble(query, location)
        messages = self.build_messages(query, history, location, context.text)

        logger.info(
            "Requesting streamed completion: %d messages, %d context chars",
            len(messages),
            len(context.text),
        )
        return StreamingReply(sources=context.sources, tokens=self._llm.stream(messages))

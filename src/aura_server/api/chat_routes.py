"""
Chat Routes: Residence-Hall Assistant Endpoint

This module exposes the assistant over HTTP. It provides:
- Per-client sliding-window admission control (429 + Retry-After)
- Request validation (non-blank message, bounded sizes)
- A JSON response, or a Server-Sent-Events token stream

Streaming protocol
------------------
Each token is sent as ``data: {"token": "..."}``. A successful stream ends
with ``data: {"done": true, "sources": [...]}``; a completion failure after
the stream has started ends it with ``data: {"error": "..."}``.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Annotated, Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from .dependencies import get_client_key, get_service
from .models import ChatRequest, ChatResponse
from ..chat.models import StreamingReply
from ..core.errors import CompletionError
from ..service import AuraService

logger = logging.getLogger("aura.chat")

router = APIRouter(prefix="/chat", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def _sse(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


async def _event_stream(reply: StreamingReply) -> AsyncIterator[str]:
    tokens = reply.tokens
    try:
        async for token in tokens:
            yield _sse({"token": token})
    except CompletionError as exc:
        logger.error("Completion stream aborted: %s", exc)
        yield _sse({"error": "Failed to generate response"})
        return
    finally:
        aclose = getattr(tokens, "aclose", None)
        if aclose is not None:
            await aclose()

    yield _sse({"done": True, "sources": reply.sources})


def enforce_rate_limit(
    client_key: Annotated[str, Depends(get_client_key)],
    service: Annotated[AuraService, Depends(get_service)],
) -> str:
    """
    Admit or reject the caller before the request body is processed.
    """
    decision = service.check_rate_limit(client_key)
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please wait a moment and try again.",
            headers={"Retry-After": str(max(1, math.ceil(decision.retry_after_ms / 1000)))},
        )
    return client_key


# ---------------------------------------------------------------------
# Chat Route
# ---------------------------------------------------------------------

@router.post(
    "",
    response_model=ChatResponse,
    summary="Ask the residence-hall assistant a question",
    status_code=status.HTTP_200_OK,
)
async def chat(
    req: ChatRequest,
    client_key: Annotated[str, Depends(enforce_rate_limit)],
    service: Annotated[AuraService, Depends(get_service)],
):
    """
    Answer one question using retrieved housing policy context.

    Parameters
    ----------
    req : ChatRequest
        Message, optional history, optional location hints and stream flag.

    Returns
    -------
    ChatResponse | StreamingResponse
        JSON ``{response, sources}``, or an SSE stream when ``stream`` is set.
    """
    logger.info(
        "Chat request from %s (stream=%s, history=%d, location=%s, coords=%s)",
        client_key,
        req.stream,
        len(req.conversation_history),
        bool(req.user_location),
        req.latitude is not None and req.longitude is not None,
    )

    if req.stream:
        reply = await service.stream_response(
            req.message,
            req.conversation_history,
            location=req.user_location,
            latitude=req.latitude,
            longitude=req.longitude,
        )
        return StreamingResponse(
            _event_stream(reply),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    reply = await service.generate_response(
        req.message,
        req.conversation_history,
        location=req.user_location,
        latitude=req.latitude,
        longitude=req.longitude,
    )
    return ChatResponse(response=reply.text, sources=reply.sources)

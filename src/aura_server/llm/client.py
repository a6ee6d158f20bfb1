"""
Completion Client

Thin async client for an OpenAI-compatible ``/chat/completions`` endpoint.

- ``complete`` returns the assistant text of one blocking completion.
- ``stream`` yields content tokens from a server-sent-events response.

Every transport, status or payload failure is raised as ``CompletionError``.
Completions are never retried.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ..config import settings
from ..core.errors import CompletionError

logger = logging.getLogger("aura.llm")

SSE_DATA_PREFIX = "data:"
SSE_DONE = "[DONE]"

# Returned by _parse_sse_line for the terminal event.
END_OF_STREAM = object()


class LLMClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.model = model or settings.llm_model
        self.base_url = (base_url or settings.llm_base_url).rstrip("/")
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.timeout = timeout or settings.llm_timeout
        self._transport = transport

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _payload(self, messages: List[Dict[str, Any]], stream: bool) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if stream:
            payload["stream"] = True
        return payload

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    # ------------------------------------------------------------------
    # Blocking completion
    # ------------------------------------------------------------------

    async def complete(self, messages: List[Dict[str, Any]]) -> str:
        """
        Run one completion and return the assistant message content.

        Raises
        ------
        CompletionError
            On transport errors, timeouts, non-2xx status or a malformed body.
        """
        try:
            async with self._client() as client:
                resp = await client.post(
                    self.completions_url,
                    json=self._payload(messages, stream=False),
                    headers=self._headers(),
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            logger.error("Completion request failed (%s): %s", type(exc).__name__, exc)
            raise CompletionError(f"Completion request failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            raise CompletionError("Completion response was not valid JSON") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise CompletionError("Completion response missing choices[0].message.content") from exc

        if not isinstance(content, str):
            raise CompletionError("Completion content must be a string")
        return content

    # ------------------------------------------------------------------
    # Streaming completion
    # ------------------------------------------------------------------

    async def stream(self, messages: List[Dict[str, Any]]) -> AsyncIterator[str]:
        """
        Yield content tokens as they arrive.

        Closing the generator early closes the underlying HTTP response.
        """
        try:
            async with self._client() as client:
                async with client.stream(
                    "POST",
                    self.completions_url,
                    json=self._payload(messages, stream=True),
                    headers=self._headers(),
                ) as resp:
                    resp.raise_for_status()
                    async for line in resp.aiter_lines():
                        token = self._parse_sse_line(line)
                        if token is None:
                            continue
                        if token is END_OF_STREAM:
                            return
                        yield token
        except httpx.HTTPError as exc:
            logger.error("Completion stream failed (%s): %s", type(exc).__name__, exc)
            raise CompletionError(f"Completion stream failed: {type(exc).__name__}") from exc

    @staticmethod
    def _parse_sse_line(line: str) -> Any:
        """
        Extract the content delta from one SSE line.

        Returns ``END_OF_STREAM`` for the terminal event and ``None`` for comments,
        blank lines and events without content.
        """
        line = line.strip()
        if not line.startswith(SSE_DATA_PREFIX):
            return None

        data = line[len(SSE_DATA_PREFIX):].strip()
        if data == SSE_DONE:
            return END_OF_STREAM

        try:
            event = json.loads(data)
        except ValueError as exc:
            raise CompletionError("Malformed completion stream event") from exc

        if isinstance(event, dict) and "error" in event:
            raise CompletionError(f"Completion stream error: {event['error']}")

        try:
            delta = event["choices"][0].get("delta") or {}
        except (KeyError, IndexError, TypeError, AttributeError):
            return None

        if not isinstance(delta, dict):
            raise CompletionError("Malformed completion stream delta")

        content = delta.get("content")
        if content is not None and not isinstance(content, str):
            raise CompletionError("Completion stream content must be a string")
        return content if content else None

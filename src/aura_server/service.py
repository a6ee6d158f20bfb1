"""
AURA Service Facade

Wires the retrieval, admission-control and completion components together and
exposes the operations used by the HTTP layer:

- ``check_rate_limit(client_key)``
- ``generate_response(query, history, location, latitude, longitude)``
- ``stream_response(query, history, location, latitude, longitude)``

All long-lived state (document store, vector index, rate-limit table, lazy
population guard) is owned by one ``AuraService`` instance.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from .chat.models import ChatReply, ConversationMessage, StreamingReply
from .chat.orchestrator import ConversationOrchestrator
from .config import Settings, settings as default_settings
from .embeddings.embedder import Embedder
from .embeddings.ingest import TextDirectoryIngestor
from .embeddings.vector_index import FaissVectorIndex, SemanticIndex
from .geo.directions import DirectionsResolver
from .geo.reference import ReferenceData
from .geo.resolver import GeoResolver
from .knowledge.router import StructuredKnowledgeRouter
from .knowledge.store import DocumentStore
from .llm.client import LLMClient
from .ratelimit.rate_limiter import RateLimitDecision, RateLimiter
from .retrieval.assembler import ContextAssembler
from .retrieval.semantic import SemanticRetriever

logger = logging.getLogger("aura.service")


class AuraService:
    def __init__(
        self,
        orchestrator: ConversationOrchestrator,
        geo: GeoResolver,
        limiter: RateLimiter,
        store: DocumentStore,
        index: SemanticIndex,
        rate_limit_requests: int = 25,
        rate_limit_window_ms: int = 60_000,
        max_history_messages: int = 30,
    ) -> None:
        self.orchestrator = orchestrator
        self.geo = geo
        self.limiter = limiter
        self.store = store
        self.index = index
        self._limit = rate_limit_requests
        self._window_ms = rate_limit_window_ms
        self._max_history = max_history_messages

    # ------------------------------------------------------------------
    # Admission control
    # ------------------------------------------------------------------

    def check_rate_limit(self, client_key: str) -> RateLimitDecision:
        decision = self.limiter.admit(client_key, self._limit, self._window_ms)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded for %s; retry in %d ms",
                client_key,
                decision.retry_after_ms,
            )
        return decision

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    async def generate_response(
        self,
        query: str,
        history: Sequence[ConversationMessage] = (),
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> ChatReply:
        return await self.orchestrator.respond(
            query,
            self._trim_history(history),
            self.resolve_location(location, latitude, longitude),
        )

    async def stream_response(
        self,
        query: str,
        history: Sequence[ConversationMessage] = (),
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> StreamingReply:
        return await self.orchestrator.respond_stream(
            query,
            self._trim_history(history),
            self.resolve_location(location, latitude, longitude),
        )

    def resolve_location(
        self,
        location: Optional[str],
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> Optional[str]:
        """
        Turn caller-supplied hints into the label used for retrieval and the
        prompt. An unresolvable name is passed through unchanged.
        """
        resolved = self.geo.locate(location, latitude, longitude)
        if resolved is not None:
            logger.debug(
                "Location resolved via %s: %s -> %s",
                resolved.via,
                resolved.label,
                resolved.community.community_name,
            )
            return resolved.label

        if location and location.strip():
            return location.strip()
        return None

    def _trim_history(self, history: Sequence[ConversationMessage]) -> Sequence[ConversationMessage]:
        if self._max_history <= 0:
            return ()
        return list(history)[-self._max_history:]

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def stats(self) -> Dict[str, int]:
        return {
            "documents": len(self.store),
            "chunks": self.index.count(),
            "rate_limited_clients": len(self.limiter),
        }


def build_service(cfg: Optional[Settings] = None) -> AuraService:
    """
    Build a fully wired ``AuraService`` from settings.
    """
    cfg = cfg or default_settings

    reference = ReferenceData.load(cfg.reference_data_dir)
    geo = GeoResolver(reference)
    directions = DirectionsResolver(reference, geo)

    store = DocumentStore(cfg.policy_docs_dir)
    router = StructuredKnowledgeRouter(
        store,
        guide_document_id=cfg.guide_document_id,
        max_chars=cfg.max_document_chars,
    )

    embedder = Embedder(
        api_key=(cfg.embedding_api_key or cfg.openai_api_key).get_secret_value(),
        model=cfg.embedding_model,
        base_url=cfg.embedding_base_url,
    )
    index = FaissVectorIndex.open(
        embedder,
        index_path=cfg.vector_index_path,
        meta_path=cfg.vector_meta_path,
    )
    ingestor = TextDirectoryIngestor(index, cfg.knowledge_text_dir)

    semantic = SemanticRetriever(
        index,
        populator=ingestor.populate,
        min_score=cfg.semantic_min_score,
        fallback_limit=cfg.keyword_fallback_limit,
        timeout=cfg.retrieval_timeout,
        max_chunk_chars=cfg.max_chunk_chars,
    )

    assembler = ContextAssembler(
        router,
        semantic,
        geo,
        directions,
        top_k=cfg.semantic_top_k,
    )

    llm = LLMClient(
        api_key=cfg.openai_api_key.get_secret_value(),
        model=cfg.llm_model,
        base_url=cfg.llm_base_url,
        temperature=cfg.llm_temperature,
        timeout=cfg.llm_timeout,
    )

    return AuraService(
        orchestrator=ConversationOrchestrator(assembler, llm),
        geo=geo,
        limiter=RateLimiter(),
        store=store,
        index=index,
        rate_limit_requests=cfg.rate_limit_requests,
        rate_limit_window_ms=cfg.rate_limit_window_ms,
        max_history_messages=cfg.max_history_messages,
    )

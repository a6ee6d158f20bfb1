"""
Retrieval Package

Semantic chunk retrieval and multi-source context assembly.
"""

from .semantic import SemanticResult, SemanticRetriever, query_tokens, source_label
from .assembler import (
    AssembledContext,
    ContextAssembler,
    NO_CONTEXT_FOUND,
    community_info_label,
    render_community_info,
)

__all__ = [
    "SemanticResult",
    "SemanticRetriever",
    "query_tokens",
    "source_label",
    "AssembledContext",
    "ContextAssembler",
    "NO_CONTEXT_FOUND",
    "community_info_label",
    "render_community_info",
]

"""
Structured Knowledge Package

Load-once policy document store, tagged document tree, flattening and
keyword routing.
"""

from .models import ListNode, MapNode, Node, PolicyDocument, ScalarNode, to_node
from .flatten import flatten, path_label
from .store import DocumentStore
from .router import RoutedKnowledge, StructuredKnowledgeRouter, match_targets

__all__ = [
    "ListNode",
    "MapNode",
    "Node",
    "PolicyDocument",
    "ScalarNode",
    "to_node",
    "flatten",
    "path_label",
    "DocumentStore",
    "RoutedKnowledge",
    "StructuredKnowledgeRouter",
    "match_targets",
]

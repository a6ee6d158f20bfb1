"""
Document flattening.

Renders a node tree as ``path: value`` lines a language model can read:

- scalars render as ``prefix: value``
- lists of scalars render as one comma-joined line
- other lists recurse with ``prefix[i]``
- maps recurse with ``prefix > key label`` (underscores become spaces)

Rendering is a pure function of the tree, so repeated calls yield identical
text.
"""

from __future__ import annotations

from .models import ListNode, MapNode, Node, ScalarNode, ScalarValue


def key_label(key: str) -> str:
    return key.replace("_", " ")


def path_label(dot_path: str) -> str:
    """``policies.noise_courtesy`` -> ``policies > noise courtesy``."""
    return " > ".join(key_label(part) for part in dot_path.split("."))


def _render_scalar(value: ScalarValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten(node: Node, prefix: str = "") -> str:
    if isinstance(node, ScalarNode):
        text = _render_scalar(node.value)
        return f"{prefix}: {text}" if prefix else text

    if isinstance(node, ListNode):
        if not node.items:
            return ""
        if node.is_scalar_list():
            joined = ", ".join(_render_scalar(i.value) for i in node.items)
            return f"{prefix}: {joined}" if prefix else joined
        lines = (flatten(item, f"{prefix}[{i}]") for i, item in enumerate(node.items))
        return "\n".join(line for line in lines if line)

    if isinstance(node, MapNode):
        lines = []
        for key, value in node.entries:
            label = key_label(key)
            child_prefix = f"{prefix} > {label}" if prefix else label
            line = flatten(value, child_prefix)
            if line:
                lines.append(line)
        return "\n".join(lines)

    raise TypeError(f"Unknown node type: {type(node).__name__}")

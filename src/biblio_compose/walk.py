"""Helpers for querying pandoc AST values."""
from __future__ import annotations

from typing import Any, Callable, Iterable, List

from .models import Document


def is_cite(node: Any) -> bool:
    return isinstance(node, dict) and node.get("t") == "Cite"


def query(node: Any, fn: Callable[[Any], List[Any]]) -> List[Any]:
    """Apply ``fn`` to every AST element in document order and concatenate the results."""

    if isinstance(node, Document):
        return query(node.blocks, fn)
    results: List[Any] = []
    if isinstance(node, dict):
        results.extend(fn(node) or [])
        for value in node.values():
            results.extend(query(value, fn))
    elif isinstance(node, list):
        for item in node:
            results.extend(query(item, fn))
    return results


def collect_cites(node: Any) -> List[Any]:
    return query(node, lambda item: [item] if is_cite(item) else [])


def citation_keys(nodes: Iterable[Any]) -> List[str]:
    """Return citation ids, in order, for every citation inside ``nodes``."""

    keys: List[str] = []
    for cite in collect_cites(list(nodes)):
        citations = cite.get("c", [[]])[0]
        keys.extend(citation.get("citationId", "") for citation in citations)
    return keys

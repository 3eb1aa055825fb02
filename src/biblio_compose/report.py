"""Composition reporting utilities."""
from __future__ import annotations

from .models import CompositionResult, Document
from .nocite import NOCITE_KEY
from .overlay import STYLE_PATH, Overlay
from .walk import citation_keys


def summarize(document: Document, overlay: Overlay) -> CompositionResult:
    nocite = document.lookup_meta(NOCITE_KEY)
    nocite_keys = citation_keys([nocite]) if nocite is not None else []
    return CompositionResult(
        style_path=STYLE_PATH,
        bibliography_paths=overlay.bibliography_paths,
        nocite_keys=nocite_keys,
        cited_keys=citation_keys(document.blocks),
        metadata={"files": len(overlay.files)},
    )


def render_report(result: CompositionResult) -> str:
    """Return a human-readable summary of a composition."""

    lines = ["Citation Composition Report"]
    lines.append(f"Style: {result.style_path}")
    if result.bibliography_paths:
        lines.append("Bibliographies:")
        lines.extend(f"  {path}" for path in result.bibliography_paths)
    else:
        lines.append("Bibliographies: none")

    unique_cited = list(dict.fromkeys(result.cited_keys))
    lines.append(f"Citations rendered: {len(result.cited_keys)} ({len(unique_cited)} unique)")
    if result.nocite_keys:
        lines.append("Included without citation: " + ", ".join(result.nocite_keys))
    return "\n".join(lines)

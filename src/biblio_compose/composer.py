"""High-level orchestrator for citation composition."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .engine import PandocCiteprocEngine, ResolutionEngine
from .exceptions import CitationResolutionError, EngineError
from .models import (
    BibliographyArtifact,
    CompositionResult,
    Document,
    StyleArtifact,
)
from .nocite import install_nocite, normalize_nocite
from .overlay import Overlay, build_overlay
from .reader import DEFAULT_READER_OPTIONS, PandocReader, Reader, ReaderOptions
from .report import summarize
from .store import ArtifactStore
from .writer import PandocWriter, Writer

logger = logging.getLogger(__name__)


class CitationComposer:
    """Coordinates nocite normalization, overlay construction and resolution."""

    def __init__(
        self,
        reader: Reader | None = None,
        engine: ResolutionEngine | None = None,
        writer: Writer | None = None,
    ):
        self.reader = reader or PandocReader()
        self.engine = engine or PandocCiteprocEngine()
        self.writer = writer or PandocWriter()

    def prepare(
        self,
        style: StyleArtifact,
        bibliographies: Sequence[BibliographyArtifact],
        document: Document,
        nocite: Optional[str] = None,
    ) -> Tuple[Document, Overlay]:
        """Return the document as handed to the engine, plus the overlay it reads."""

        document = normalize_nocite(install_nocite(document, nocite), self.reader)
        overlay = build_overlay(style, bibliographies)
        return document.with_meta(overlay.metadata), overlay

    def compose_with_overlay(
        self,
        style: StyleArtifact,
        bibliographies: Sequence[BibliographyArtifact],
        document: Document,
        nocite: Optional[str] = None,
    ) -> Tuple[Document, Overlay]:
        prepared, overlay = self.prepare(style, bibliographies, document, nocite=nocite)
        logger.debug(
            "Resolving citations with %s against %d bibliographies",
            self.engine.name,
            len(bibliographies),
        )
        try:
            with self.engine.execution_context(overlay.files) as context:
                resolved = self.engine.resolve(prepared, overlay.files, context)
        except EngineError as exc:
            raise CitationResolutionError(
                f"Error during citation processing: {exc.message}", exc
            ) from exc
        return resolved, overlay

    def compose(
        self,
        style: StyleArtifact,
        bibliographies: Sequence[BibliographyArtifact],
        document: Document,
        nocite: Optional[str] = None,
    ) -> Document:
        resolved, _ = self.compose_with_overlay(style, bibliographies, document, nocite=nocite)
        return resolved

    def compose_one(
        self,
        style: StyleArtifact,
        bibliography: BibliographyArtifact,
        document: Document,
        nocite: Optional[str] = None,
    ) -> Document:
        return self.compose(style, [bibliography], document, nocite=nocite)

    def read_and_compose(
        self,
        text: str,
        style: StyleArtifact,
        bibliographies: Sequence[BibliographyArtifact],
        options: ReaderOptions = DEFAULT_READER_OPTIONS,
        nocite: Optional[str] = None,
    ) -> Document:
        document = self.reader.read(text, options)
        return self.compose(style, bibliographies, document, nocite=nocite)

    def render(
        self,
        text: str,
        style: StyleArtifact,
        bibliographies: Sequence[BibliographyArtifact],
        options: ReaderOptions = DEFAULT_READER_OPTIONS,
        nocite: Optional[str] = None,
    ) -> Tuple[str, CompositionResult]:
        """Read, compose and write ``text``; citation syntax is always enabled."""

        document = self.reader.read(text, options.with_citations())
        resolved, overlay = self.compose_with_overlay(
            style, bibliographies, document, nocite=nocite
        )
        result = summarize(resolved, overlay)
        return self.writer.write(resolved), result

    def compile_with_bibliography(
        self,
        store: ArtifactStore,
        style_name: str,
        bibliography_name: str,
        text: str,
        options: ReaderOptions = DEFAULT_READER_OPTIONS,
        nocite: Optional[str] = None,
    ) -> str:
        style = store.load_style(style_name)
        bibliography = store.load_bibliography(bibliography_name)
        output, _ = self.render(text, style, [bibliography], options, nocite=nocite)
        return output

    def compile_with_bibliographies(
        self,
        store: ArtifactStore,
        style_name: str,
        pattern: str,
        text: str,
        options: ReaderOptions = DEFAULT_READER_OPTIONS,
        nocite: Optional[str] = None,
    ) -> str:
        style = store.load_style(style_name)
        bibliographies: List[BibliographyArtifact] = store.load_bibliographies(pattern)
        output, _ = self.render(text, style, bibliographies, options, nocite=nocite)
        return output


def compose(
    style: StyleArtifact,
    bibliographies: Sequence[BibliographyArtifact],
    document: Document,
    nocite: Optional[str] = None,
) -> Document:
    """Compose with the pandoc-backed reader and engine."""

    return CitationComposer().compose(style, bibliographies, document, nocite=nocite)


__all__ = ["CitationComposer", "compose"]

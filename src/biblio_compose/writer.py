"""Writers rendering composed documents to their output format."""
from __future__ import annotations

import logging
from typing import Sequence

import pypandoc

from .exceptions import RenderError
from .models import Document

logger = logging.getLogger(__name__)


class Writer:
    """Base interface for document writers."""

    def write(self, document: Document) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class PandocWriter(Writer):
    """Render the pandoc AST with the pandoc binary."""

    def __init__(self, to: str = "html", extra_args: Sequence[str] = ()):
        self.to = to
        self.extra_args = list(extra_args)

    def write(self, document: Document) -> str:
        logger.debug("Rendering document to %s", self.to)
        try:
            return pypandoc.convert_text(
                document.to_json(), self.to, format="json", extra_args=self.extra_args
            )
        except (RuntimeError, OSError) as exc:
            raise RenderError(f"Could not render document as {self.to}: {exc}", exc) from exc

"""Readers turning raw source text into pandoc documents."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Tuple

import pypandoc

from .exceptions import ParseError
from .models import Document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReaderOptions:
    """Input format plus pandoc extensions toggled on top of it."""

    format: str = "markdown"
    extensions: Tuple[str, ...] = ()
    extra_args: Tuple[str, ...] = ()

    def enable_extension(self, name: str) -> "ReaderOptions":
        if name in self.extensions:
            return self
        return replace(self, extensions=self.extensions + (name,))

    def with_citations(self) -> "ReaderOptions":
        return self.enable_extension("citations")

    def format_string(self) -> str:
        return self.format + "".join(f"+{name}" for name in self.extensions)


DEFAULT_READER_OPTIONS = ReaderOptions()


class Reader:
    """Base interface for source readers."""

    def read(self, text: str, options: ReaderOptions = DEFAULT_READER_OPTIONS) -> Document:  # pragma: no cover - interface
        raise NotImplementedError


class PandocReader(Reader):
    """Parse text with the pandoc binary and return its JSON AST."""

    def read(self, text: str, options: ReaderOptions = DEFAULT_READER_OPTIONS) -> Document:
        fmt = options.format_string()
        logger.debug("Reading %d characters as %s", len(text), fmt)
        try:
            payload = pypandoc.convert_text(
                text, "json", format=fmt, extra_args=list(options.extra_args)
            )
        except (RuntimeError, OSError) as exc:
            raise ParseError(f"Could not parse {fmt} input: {exc}", exc) from exc
        return Document.from_json(payload)

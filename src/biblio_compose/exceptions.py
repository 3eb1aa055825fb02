"""Exception hierarchy for citation composition."""
from __future__ import annotations


class BiblioComposeError(Exception):
    """Base exception for composition errors.

    Attributes:
        message: Human-readable error description.
        cause: Original exception that caused this error (optional).
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class ParseError(BiblioComposeError):
    """Raised by a reader when raw text cannot be parsed into a document."""


class EngineError(BiblioComposeError):
    """Raised by a resolution engine on malformed styles, bibliographies or keys."""


class CitationResolutionError(BiblioComposeError):
    """Raised by the composer when the resolution engine fails."""


class RenderError(BiblioComposeError):
    """Raised by a writer when a document cannot be rendered."""


class ArtifactNotFoundError(BiblioComposeError):
    """Raised when a named style or bibliography artifact cannot be loaded."""

    def __init__(self, name: str, cause: Exception | None = None) -> None:
        super().__init__(f"Artifact not found: {name}", cause)
        self.name = name

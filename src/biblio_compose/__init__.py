"""Citation composition stage for pandoc document pipelines."""

from .composer import CitationComposer, compose
from .engine import EngineContext, PandocCiteprocEngine, ResolutionEngine
from .exceptions import (
    ArtifactNotFoundError,
    BiblioComposeError,
    CitationResolutionError,
    EngineError,
    ParseError,
    RenderError,
)
from .models import (
    BibliographyArtifact,
    Document,
    StyleArtifact,
    VirtualFile,
    VirtualFileSet,
)
from .nocite import normalize_nocite
from .overlay import Overlay, build_overlay
from .reader import PandocReader, Reader, ReaderOptions
from .store import ArtifactStore
from .writer import PandocWriter, Writer

__all__ = [
    "CitationComposer",
    "compose",
    "EngineContext",
    "PandocCiteprocEngine",
    "ResolutionEngine",
    "ArtifactNotFoundError",
    "BiblioComposeError",
    "CitationResolutionError",
    "EngineError",
    "ParseError",
    "RenderError",
    "BibliographyArtifact",
    "Document",
    "StyleArtifact",
    "VirtualFile",
    "VirtualFileSet",
    "normalize_nocite",
    "Overlay",
    "build_overlay",
    "PandocReader",
    "Reader",
    "ReaderOptions",
    "ArtifactStore",
    "PandocWriter",
    "Writer",
]

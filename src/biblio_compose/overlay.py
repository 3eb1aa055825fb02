"""Virtual filesystem overlay handed to the resolution engine."""
from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from .models import (
    EPOCH,
    BibliographyArtifact,
    StyleArtifact,
    VirtualFile,
    VirtualFileSet,
    meta_list,
    meta_string,
)

logger = logging.getLogger(__name__)

OVERLAY_PREFIX = "_biblio"
STYLE_PATH = posixpath.join(OVERLAY_PREFIX, "style.csl")
STYLE_KEY = "csl"
BIBLIOGRAPHY_KEY = "bibliography"


@dataclass(frozen=True)
class Overlay:
    files: VirtualFileSet
    metadata: Dict[str, Any]

    @property
    def bibliography_paths(self) -> List[str]:
        return [item["c"] for item in self.metadata[BIBLIOGRAPHY_KEY]["c"]]


def bibliography_path(index: int, identifier: str) -> str:
    """Virtual path for the bibliography at ``index``, keeping the origin's suffix.

    The suffix runs from the last dot of the base name, so ``refs/.bib``
    keeps ``.bib``.
    """

    basename = posixpath.basename(identifier)
    dot = basename.rfind(".")
    suffix = basename[dot:] if dot >= 0 else ""
    return posixpath.join(OVERLAY_PREFIX, f"bibliography-{index}{suffix}")


def build_overlay(
    style: StyleArtifact, bibliographies: Sequence[BibliographyArtifact]
) -> Overlay:
    files = [VirtualFile(STYLE_PATH, style.content, EPOCH)]
    paths: List[str] = []
    for index, biblio in enumerate(bibliographies):
        path = bibliography_path(index, biblio.identifier)
        files.append(VirtualFile(path, biblio.content, EPOCH))
        paths.append(path)

    logger.debug("Built overlay with style %s and bibliographies %s", STYLE_PATH, paths)
    metadata = {
        STYLE_KEY: meta_string(STYLE_PATH),
        BIBLIOGRAPHY_KEY: meta_list([meta_string(path) for path in paths]),
    }
    return Overlay(files=VirtualFileSet(files), metadata=metadata)

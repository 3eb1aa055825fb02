"""Citation resolution engines.

An engine is a black box over ``(document, virtual files)``: it reads the
style and bibliographies named by the ``csl``/``bibliography`` metadata out of
the virtual file set and returns the document with citations rendered and the
bibliography appended.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import pypandoc

from .exceptions import EngineError
from .models import Document, VirtualFileSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineContext:
    """Per-call engine state, valid only inside ``execution_context``."""

    files: VirtualFileSet
    workdir: Optional[Path] = None


class ResolutionEngine:
    """Base interface for citation resolution engines."""

    name: str = "base"

    @contextmanager
    def execution_context(self, files: VirtualFileSet) -> Iterator[EngineContext]:
        yield EngineContext(files=files)

    def resolve(
        self,
        document: Document,
        files: VirtualFileSet,
        context: EngineContext | None = None,
    ) -> Document:  # pragma: no cover - interface
        raise NotImplementedError


def mount_overlay(files: VirtualFileSet, root: Path) -> List[Path]:
    """Write the overlay under ``root`` with every file stamped at its overlay time."""

    written: List[Path] = []
    for path, item in files.items():
        target = root.joinpath(*path.split("/"))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(item.content)
        stamp = item.timestamp.timestamp()
        os.utime(target, (stamp, stamp))
        written.append(target)
    return written


class PandocCiteprocEngine(ResolutionEngine):
    """Run ``pandoc --citeproc`` over the JSON AST.

    pandoc only reads styles and bibliographies from disk, so the execution
    context mounts the overlay into a private directory that lives for exactly
    one call and is removed on exit.
    """

    name = "pandoc-citeproc"

    def __init__(self, extra_args: Sequence[str] = ()):
        self.extra_args = list(extra_args)

    @contextmanager
    def execution_context(self, files: VirtualFileSet) -> Iterator[EngineContext]:
        workdir = Path(tempfile.mkdtemp(prefix="biblio-compose-"))
        try:
            mount_overlay(files, workdir)
            yield EngineContext(files=files, workdir=workdir)
        finally:
            shutil.rmtree(workdir, ignore_errors=True)

    def resolve(
        self,
        document: Document,
        files: VirtualFileSet,
        context: EngineContext | None = None,
    ) -> Document:
        if context is None or context.workdir is None:
            with self.execution_context(files) as scoped:
                return self.resolve(document, files, scoped)

        logger.debug("Running citeproc in %s over %d overlay files", context.workdir, len(files))
        try:
            payload = pypandoc.convert_text(
                document.to_json(),
                "json",
                format="json",
                extra_args=["--citeproc", *self.extra_args],
                cworkdir=str(context.workdir),
            )
        except (RuntimeError, OSError) as exc:
            raise EngineError(str(exc), exc) from exc
        return Document.from_json(payload)

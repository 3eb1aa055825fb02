"""Loading style and bibliography artifacts by name."""
from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Callable, List, Optional

import httpx

from .exceptions import ArtifactNotFoundError
from .models import BibliographyArtifact, StyleArtifact

logger = logging.getLogger(__name__)


def is_remote(name: str) -> bool:
    return name.startswith(("http://", "https://"))


class StyleFetcher:
    """Download CSL styles addressed by URL."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self._sleep = sleep
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": "biblio-compose/0.1"},
        )

    def fetch(self, url: str) -> bytes:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self._client.get(url)
                response.raise_for_status()
                return response.content
            except httpx.RequestError as exc:
                last_error = exc
            except httpx.HTTPStatusError as exc:
                last_error = exc
                if exc.response.status_code in {401, 403, 404, 410}:
                    break
            if attempt < self.max_retries:
                self._sleep(self.backoff_factor * (2 ** (attempt - 1)))
        logger.warning("Could not fetch style %s: %s", url, last_error)
        raise ArtifactNotFoundError(url, last_error)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "StyleFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ArtifactStore:
    """Artifacts laid out under a directory, addressed by relative POSIX names."""

    def __init__(self, root: str | Path = ".", fetcher: Optional[StyleFetcher] = None):
        self.root = Path(root)
        self.fetcher = fetcher
        self._owns_fetcher = False

    def __enter__(self) -> "ArtifactStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close a fetcher the store created itself; injected fetchers stay open."""

        if self._owns_fetcher and self.fetcher is not None:
            self.fetcher.close()
            self.fetcher = None
            self._owns_fetcher = False

    def _read(self, name: str) -> bytes:
        path = self.root / name
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ArtifactNotFoundError(name, exc) from exc

    def load_style(self, name: str) -> StyleArtifact:
        if is_remote(name):
            if self.fetcher is None:
                self.fetcher = StyleFetcher()
                self._owns_fetcher = True
            return StyleArtifact(content=self.fetcher.fetch(name), identifier=name)
        return StyleArtifact(content=self._read(name), identifier=name)

    def load_bibliography(self, name: str) -> BibliographyArtifact:
        return BibliographyArtifact(content=self._read(name), identifier=name)

    def names(self) -> List[str]:
        return sorted(
            path.relative_to(self.root).as_posix()
            for path in self.root.rglob("*")
            if path.is_file()
        )

    def match(self, pattern: str) -> List[str]:
        """Return artifact names matching a glob, ``**`` spanning directories."""

        regex = _glob_regex(pattern)
        return [name for name in self.names() if regex.fullmatch(name)]

    def load_bibliographies(self, pattern: str) -> List[BibliographyArtifact]:
        names = self.match(pattern)
        logger.debug("Pattern %s matched bibliographies %s", pattern, names)
        return [self.load_bibliography(name) for name in names]


def _glob_regex(pattern: str) -> re.Pattern[str]:
    """Translate a glob where ``*`` stays within one path segment and ``**`` spans any."""

    parts = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif pattern[index] == "*":
            parts.append("[^/]*")
            index += 1
        else:
            parts.append(re.escape(pattern[index]))
            index += 1
    return re.compile("".join(parts))

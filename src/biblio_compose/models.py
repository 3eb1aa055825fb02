"""Data models for citation composition workflows."""
from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
PANDOC_API_VERSION = [1, 23, 1]


@dataclass(frozen=True)
class StyleArtifact:
    """Raw bytes of a citation style (CSL)."""

    content: bytes
    identifier: str = "style.csl"


@dataclass(frozen=True)
class BibliographyArtifact:
    """Raw bytes of a bibliography source plus its origin identifier."""

    content: bytes
    identifier: str


@dataclass(frozen=True)
class VirtualFile:
    path: str
    content: bytes
    timestamp: datetime = EPOCH


class VirtualFileSet(Mapping[str, VirtualFile]):
    """Read-only path -> file mapping handed to the resolution engine."""

    def __init__(self, files: Optional[List[VirtualFile]] = None):
        entries: Dict[str, VirtualFile] = {}
        for item in files or []:
            if item.path in entries:
                raise ValueError(f"Duplicate virtual path: {item.path}")
            entries[item.path] = item
        self._files = entries

    def __getitem__(self, path: str) -> VirtualFile:
        return self._files[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"VirtualFileSet({sorted(self._files)!r})"


def meta_string(value: str) -> Dict[str, Any]:
    return {"t": "MetaString", "c": value}


def meta_list(values: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"t": "MetaList", "c": list(values)}


def meta_inlines(inlines: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"t": "MetaInlines", "c": list(inlines)}


def meta_to_python(value: Any) -> Any:
    """Flatten a MetaValue into plain Python values (strings, lists, dicts)."""

    if not isinstance(value, dict) or "t" not in value:
        return value
    kind = value["t"]
    content = value.get("c")
    if kind in ("MetaString", "MetaBool"):
        return content
    if kind == "MetaList":
        return [meta_to_python(item) for item in content]
    if kind == "MetaMap":
        return {key: meta_to_python(item) for key, item in content.items()}
    # MetaInlines / MetaBlocks stay as AST
    return content


@dataclass
class Document:
    """A pandoc document: metadata map plus block-level content."""

    meta: Dict[str, Any] = field(default_factory=dict)
    blocks: List[Any] = field(default_factory=list)
    api_version: List[int] = field(default_factory=lambda: list(PANDOC_API_VERSION))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        return cls(
            meta=dict(data.get("meta") or {}),
            blocks=list(data.get("blocks") or []),
            api_version=list(data.get("pandoc-api-version") or PANDOC_API_VERSION),
        )

    @classmethod
    def from_json(cls, payload: str) -> "Document":
        return cls.from_dict(json.loads(payload))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pandoc-api-version": list(self.api_version),
            "meta": self.meta,
            "blocks": self.blocks,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def lookup_meta(self, key: str) -> Optional[Any]:
        return self.meta.get(key)

    def with_meta(self, updates: Mapping[str, Any]) -> "Document":
        """Return a copy whose metadata has ``updates`` written over it."""

        merged = dict(self.meta)
        merged.update(copy.deepcopy(dict(updates)))
        return Document(meta=merged, blocks=self.blocks, api_version=list(self.api_version))


@dataclass
class CompositionResult:
    """Summary of a single composition, used for reporting."""

    style_path: str
    bibliography_paths: List[str]
    nocite_keys: List[str] = field(default_factory=list)
    cited_keys: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

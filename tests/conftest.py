import re
import sys
from contextlib import contextmanager
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

import pytest

from biblio_compose.engine import EngineContext, ResolutionEngine
from biblio_compose.exceptions import EngineError
from biblio_compose.models import (
    BibliographyArtifact,
    Document,
    StyleArtifact,
    meta_to_python,
)
from biblio_compose.reader import DEFAULT_READER_OPTIONS, Reader
from biblio_compose.walk import citation_keys

CITE_TOKEN = re.compile(r"@([\w:.-]*\w)")

SAMPLE_CSL = b"""<?xml version="1.0" encoding="utf-8"?>
<style xmlns="http://purl.org/net/xbiblio/csl" class="in-text" version="1.0">
  <info><title>Minimal</title><id>minimal</id><updated>1970-01-01T00:00:00+00:00</updated></info>
  <citation><layout prefix="(" suffix=")" delimiter="; "><text variable="title"/></layout></citation>
  <bibliography><layout><text variable="title"/></layout></bibliography>
</style>
"""

SAMPLE_BIB = b"""@article{doe2020,
  title = {Findings on Testing},
  author = {Doe, Jane},
  year = {2020}
}
"""

SAMPLE_BIB_EXTRA = b"""@book{roe2021,
  title = {Reference Handbook},
  author = {Roe, Richard},
  year = {2021}
}
"""


def make_cite(key: str) -> dict:
    return {
        "t": "Cite",
        "c": [
            [
                {
                    "citationId": key,
                    "citationPrefix": [],
                    "citationSuffix": [],
                    "citationMode": {"t": "AuthorInText"},
                    "citationNoteNum": 1,
                    "citationHash": 0,
                }
            ],
            [{"t": "Str", "c": f"@{key}"}],
        ],
    }


class FakeReader(Reader):
    """Turns each line into a paragraph, recognising ``@key`` tokens as citations."""

    def __init__(self):
        self.calls = []

    def read(self, text, options=DEFAULT_READER_OPTIONS):
        self.calls.append((text, options))
        blocks = []
        for line in text.splitlines():
            if not line.strip():
                continue
            inlines = []
            for token in line.split():
                match = CITE_TOKEN.fullmatch(token.rstrip(",;."))
                inlines.append(make_cite(match.group(1)) if match else {"t": "Str", "c": token})
            blocks.append({"t": "Para", "c": inlines})
        return Document(blocks=blocks)


class FakeEngine(ResolutionEngine):
    """Appends a ``refs`` div listing every cited and nocited key it can find."""

    name = "fake"

    def __init__(self, error: str | None = None):
        self.error = error
        self.calls = []
        self.contexts_entered = 0
        self.contexts_exited = 0

    @contextmanager
    def execution_context(self, files):
        self.contexts_entered += 1
        try:
            yield EngineContext(files=files)
        finally:
            self.contexts_exited += 1

    def resolve(self, document, files, context=None):
        self.calls.append((document, files, context))
        if self.error:
            raise EngineError(self.error)
        style_path = meta_to_python(document.meta["csl"])
        if style_path not in files:
            raise EngineError(f"Could not find {style_path}")
        for path in meta_to_python(document.meta["bibliography"]):
            if path not in files:
                raise EngineError(f"Could not find {path}")
        keys = citation_keys(document.blocks)
        nocite = document.meta.get("nocite")
        if nocite is not None:
            keys += citation_keys([nocite])
        entries = [{"t": "Para", "c": [{"t": "Str", "c": key}]} for key in dict.fromkeys(keys)]
        refs = {"t": "Div", "c": [["refs", ["references"], []], entries]}
        return Document(
            meta=dict(document.meta),
            blocks=list(document.blocks) + [refs],
            api_version=list(document.api_version),
        )


@pytest.fixture()
def fake_reader() -> FakeReader:
    return FakeReader()


@pytest.fixture()
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def style() -> StyleArtifact:
    return StyleArtifact(content=SAMPLE_CSL, identifier="styles/minimal.csl")


@pytest.fixture()
def bibliographies() -> list:
    return [
        BibliographyArtifact(content=SAMPLE_BIB, identifier="bib/main.bib"),
        BibliographyArtifact(content=SAMPLE_BIB_EXTRA, identifier="bib/extra.bib"),
    ]


@pytest.fixture()
def artifact_root(tmp_path: Path) -> Path:
    """Lay out a style and two bibliographies the way a site repository would."""

    (tmp_path / "styles").mkdir()
    (tmp_path / "bib").mkdir()
    (tmp_path / "styles" / "minimal.csl").write_bytes(SAMPLE_CSL)
    (tmp_path / "bib" / "main.bib").write_bytes(SAMPLE_BIB)
    (tmp_path / "bib" / "extra.bib").write_bytes(SAMPLE_BIB_EXTRA)
    (tmp_path / "notes.md").write_text("Body citing @doe2020.\n")
    return tmp_path


@pytest.fixture()
def require_pandoc():
    pypandoc = pytest.importorskip("pypandoc")
    try:
        version = pypandoc.get_pandoc_version()
    except OSError:
        pytest.skip("pandoc binary not available")
    major, minor = (int(part) for part in version.split(".")[:2])
    if (major, minor) < (2, 11):
        pytest.skip("pandoc >= 2.11 is required for --citeproc")

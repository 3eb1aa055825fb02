import pytest

fastapi = pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from conftest import SAMPLE_BIB, SAMPLE_CSL, FakeEngine, FakeReader
from biblio_compose import web
from biblio_compose.composer import CitationComposer
from biblio_compose.writer import Writer


class ParagraphWriter(Writer):
    def write(self, document):
        return "".join(f"<p>{block['t']}</p>" for block in document.blocks)


client = TestClient(web.app)


@pytest.fixture()
def engine(monkeypatch):
    engine = FakeEngine()
    monkeypatch.setattr(
        web,
        "_build_composer",
        lambda: CitationComposer(reader=FakeReader(), engine=engine, writer=ParagraphWriter()),
    )
    return engine


def test_homepage_renders_form():
    response = client.get("/")

    assert response.status_code == 200
    assert "Biblio Compose" in response.text
    assert "tailwind" in response.text.lower()
    assert "name=\"csl\"" in response.text
    assert "name=\"bibliography\"" in response.text


def test_compose_renders_document_and_report(engine):
    response = client.post(
        "/compose",
        data={"text": "Shown by @doe2020.", "nocite": "@roe2021"},
        files=[
            ("csl", ("apa.csl", SAMPLE_CSL, "application/xml")),
            ("bibliography", ("main.bib", SAMPLE_BIB, "text/plain")),
            ("bibliography", ("extra.json", b"[]", "application/json")),
        ],
    )

    assert response.status_code == 200
    assert "<p>Para</p><p>Div</p>" in response.text
    assert "Citation Composition Report" in response.text
    assert "_biblio/bibliography-1.json" in response.text
    _, files, _ = engine.calls[0]
    assert files["_biblio/bibliography-0.bib"].content == SAMPLE_BIB


def test_compose_failure_returns_bad_request(monkeypatch):
    monkeypatch.setattr(
        web,
        "_build_composer",
        lambda: CitationComposer(
            reader=FakeReader(), engine=FakeEngine(error="unknown key"), writer=ParagraphWriter()
        ),
    )

    response = client.post(
        "/compose",
        data={"text": "Shown by @nobody."},
        files=[("csl", ("apa.csl", SAMPLE_CSL, "application/xml"))],
    )

    assert response.status_code == 400
    assert "unknown key" in response.json()["detail"]

"""FastAPI interface for composing citations from the browser.

Run with:
    uvicorn biblio_compose.web:app --reload
"""
from __future__ import annotations

from html import escape
from typing import List

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse

from .composer import CitationComposer
from .exceptions import BiblioComposeError
from .models import BibliographyArtifact, StyleArtifact
from .report import render_report

app = FastAPI(title="Biblio Compose", description="Resolve citations from the browser")


def _build_composer() -> CitationComposer:
    return CitationComposer()


def _layout(content: str) -> str:
    """Wrap provided content in a Tailwind-powered HTML page."""

    return f"""
    <!doctype html>
    <html lang=\"en\" class=\"h-full bg-gray-50\">
    <head>
        <meta charset=\"utf-8\" />
        <title>Biblio Compose</title>
        <link href=\"https://cdn.jsdelivr.net/npm/tailwindcss@3.4.4/dist/tailwind.min.css\" rel=\"stylesheet\" />
    </head>
    <body class=\"min-h-full py-10\">
        <div class=\"max-w-5xl mx-auto px-4\">
            <div class=\"bg-white shadow rounded-lg p-6\">
                <h1 class=\"text-3xl font-semibold text-gray-900\">Biblio Compose</h1>
                <p class=\"text-gray-600 mt-2\">Paste Markdown with citations, upload a CSL style and bibliographies, and get the rendered document back.</p>
                {content}
            </div>
        </div>
    </body>
    </html>
    """


def _form_page(rendered: str | None = None, report: str | None = None) -> str:
    form = """
    <form action=\"/compose\" method=\"post\" enctype=\"multipart/form-data\" class=\"bg-gray-50 border border-gray-200 rounded-lg p-4 mt-6\">
        <label class=\"block text-sm font-medium text-gray-700 mb-2\" for=\"text\">Markdown source</label>
        <textarea name=\"text\" required placeholder=\"As shown by @doe2020...\" class=\"w-full h-44 border border-gray-300 rounded-md p-3 text-sm\"></textarea>
        <label class=\"block text-sm font-medium text-gray-700 mt-3 mb-2\" for=\"csl\">CSL style</label>
        <input type=\"file\" name=\"csl\" accept=\".csl\" required class=\"block w-full text-sm text-gray-800\" />
        <label class=\"block text-sm font-medium text-gray-700 mt-3 mb-2\" for=\"bibliography\">Bibliographies</label>
        <input type=\"file\" name=\"bibliography\" multiple class=\"block w-full text-sm text-gray-800\" />
        <label class=\"block text-sm font-medium text-gray-700 mt-3 mb-2\" for=\"nocite\">Include without citing</label>
        <input type=\"text\" name=\"nocite\" placeholder=\"@roe2021, @*\" class=\"w-full border border-gray-300 rounded-md p-2 text-sm\" />
        <button type=\"submit\" class=\"mt-4 inline-flex items-center px-4 py-2 bg-indigo-600 text-white rounded-md shadow hover:bg-indigo-700\">Compose</button>
    </form>
    """

    report_block = ""
    if report:
        report_block = f"""
        <div class=\"mt-8\">
            <h2 class=\"text-xl font-semibold text-gray-800\">Composition Report</h2>
            <pre class=\"mt-3 bg-gray-900 text-green-100 p-4 rounded-lg whitespace-pre-wrap text-sm\">{escape(report)}</pre>
        </div>
        """

    rendered_block = ""
    if rendered is not None:
        rendered_block = f"""
        <div class=\"mt-8\">
            <h2 class=\"text-xl font-semibold text-gray-800\">Document</h2>
            <article class=\"prose mt-3\">{rendered}</article>
        </div>
        """

    return _layout(form + report_block + rendered_block)


@app.get("/", response_class=HTMLResponse)
async def home() -> HTMLResponse:
    """Serve the composition form."""

    return HTMLResponse(_form_page())


@app.post("/compose", response_class=HTMLResponse)
async def compose_document(
    text: str = Form(...),
    csl: UploadFile = File(...),
    bibliography: List[UploadFile] = File(default=[]),
    nocite: str = Form(""),
) -> HTMLResponse:
    """Compose uploaded artifacts with the submitted text and render it as HTML."""

    style = StyleArtifact(content=await csl.read(), identifier=csl.filename or "style.csl")
    bibliographies = [
        BibliographyArtifact(content=await upload.read(), identifier=upload.filename or "")
        for upload in bibliography
    ]

    composer = _build_composer()
    try:
        rendered, result = composer.render(
            text, style, bibliographies, nocite=nocite.strip() or None
        )
    except BiblioComposeError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc

    return HTMLResponse(_form_page(rendered, render_report(result)))


def main() -> None:
    """Run the FastAPI app using uvicorn."""

    import uvicorn

    uvicorn.run("biblio_compose.web:app", host="0.0.0.0", port=8000, reload=False)


__all__ = ["app", "main"]

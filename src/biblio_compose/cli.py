"""Command line interface for composing citations into documents."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from pydantic import ValidationError

from .composer import CitationComposer
from .config import load_config
from .engine import PandocCiteprocEngine
from .exceptions import BiblioComposeError
from .reader import PandocReader, ReaderOptions
from .report import render_report
from .store import ArtifactStore, StyleFetcher, is_remote
from .writer import PandocWriter

logger = logging.getLogger(__name__)


def main(argv: List[str] | None = None) -> int:
    try:
        config = load_config()
    except ValidationError as exc:
        print(f"error: invalid configuration: {exc}", file=sys.stderr)
        return 1

    parser = argparse.ArgumentParser(
        description="Resolve citations and append a bibliography to a document"
    )
    parser.add_argument("input", help="Path to the source document")
    parser.add_argument("--csl", required=True, help="CSL style name (relative to --root) or URL")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--bibliography",
        action="append",
        help="Bibliography name relative to --root (can be repeated)",
    )
    group.add_argument(
        "--bibliography-glob",
        help="Glob pattern selecting bibliographies under --root",
    )
    parser.add_argument(
        "--root",
        default=config.artifact_root,
        help="Directory holding styles and bibliographies",
    )
    parser.add_argument("--from", dest="from_format", default=config.reader_format)
    parser.add_argument("--to", default=config.output_format, help="pandoc output format")
    parser.add_argument("--nocite", help="References to include without citing, e.g. '@a, @b'")
    parser.add_argument("--output", type=Path, help="Write the rendered document here")
    parser.add_argument(
        "--report",
        action="store_true",
        help="Print a composition summary to stderr",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    composer = CitationComposer(
        reader=PandocReader(),
        engine=PandocCiteprocEngine(extra_args=config.pandoc_extra_args),
        writer=PandocWriter(to=args.to),
    )
    fetcher = None
    if is_remote(args.csl):
        fetcher = StyleFetcher(timeout=config.http_timeout, max_retries=config.http_retries)
    store = ArtifactStore(args.root, fetcher=fetcher)
    options = ReaderOptions(format=args.from_format)

    try:
        text = Path(args.input).read_text(encoding="utf-8")
        style = store.load_style(args.csl)
        if args.bibliography_glob:
            bibliographies = store.load_bibliographies(args.bibliography_glob)
        else:
            bibliographies = [store.load_bibliography(name) for name in args.bibliography]
        output, result = composer.render(text, style, bibliographies, options, nocite=args.nocite)
    except (BiblioComposeError, OSError) as exc:
        logger.debug("Composition failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        if fetcher is not None:
            fetcher.close()

    if args.output:
        args.output.write_text(output, encoding="utf-8")
    else:
        print(output)

    if args.report:
        print(render_report(result), file=sys.stderr)

    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())

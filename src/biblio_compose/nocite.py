"""Normalization of the ``nocite`` metadata directive."""
from __future__ import annotations

import logging
from typing import Optional

from .models import Document, meta_inlines, meta_string
from .reader import DEFAULT_READER_OPTIONS, Reader
from .walk import citation_keys, collect_cites

logger = logging.getLogger(__name__)

NOCITE_KEY = "nocite"


def install_nocite(document: Document, raw: Optional[str]) -> Document:
    """Overwrite the document's nocite value with host-supplied raw text."""

    if raw is None:
        return document
    return document.with_meta({NOCITE_KEY: meta_string(raw)})


def normalize_nocite(document: Document, reader: Reader) -> Document:
    """Replace a raw-text ``nocite`` value by the citations it contains.

    The raw text is parsed as a standalone fragment and only its ``Cite``
    nodes are kept, in document order. A fragment without citations leaves
    an empty inline list under the key. Values that are already structured
    are left alone.
    """

    value = document.lookup_meta(NOCITE_KEY)
    if not isinstance(value, dict) or value.get("t") != "MetaString":
        return document

    fragment = reader.read(value["c"], DEFAULT_READER_OPTIONS.with_citations())
    cites = collect_cites(fragment)
    logger.debug("Normalized nocite directive to keys %s", citation_keys(cites))
    return document.with_meta({NOCITE_KEY: meta_inlines(cites)})

"""Plain-text extraction for the file kinds DocRank can index.

Each supported extension maps onto a :class:`ContentKind`; every kind has
exactly one reader. Failures are raised as :class:`ExtractionError`
subclasses so the indexer can skip the file and keep going.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterator

import fitz  # PyMuPDF
from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, PreformattedString

from docrank.errors import (
    MalformedMarkup,
    NoExtension,
    UnreadableFile,
    UnsupportedExtension,
)
from docrank.utils.text import normalize_whitespace

LOGGER = logging.getLogger(__name__)


class ContentKind(Enum):
    TEXT = "text"
    HTML = "html"
    XML = "xml"
    PDF = "pdf"


EXTENSION_KINDS: Dict[str, ContentKind] = {
    "txt": ContentKind.TEXT,
    "text": ContentKind.TEXT,
    "md": ContentKind.TEXT,
    "markdown": ContentKind.TEXT,
    "rst": ContentKind.TEXT,
    "html": ContentKind.HTML,
    "htm": ContentKind.HTML,
    "xml": ContentKind.XML,
    "xhtml": ContentKind.XML,
    "pdf": ContentKind.PDF,
}


def content_kind(path: Path) -> ContentKind:
    """Resolve the content kind of ``path`` from its extension."""
    path = Path(path)
    extension = path.suffix[1:].lower()
    if not extension:
        raise NoExtension(path)
    try:
        return EXTENSION_KINDS[extension]
    except KeyError:
        raise UnsupportedExtension(path, extension) from None


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableFile(path, exc) from exc


def read_text_file(path: Path) -> str:
    return _read_text(path)


def read_html_file(path: Path) -> str:
    """Return the text and comment content of an HTML page, tags stripped."""
    content = _read_text(path)
    try:
        soup = BeautifulSoup(content, "html.parser")
    except Exception as exc:
        raise MalformedMarkup(path, exc) from exc

    fragments = []
    for node in soup.descendants:
        if not isinstance(node, NavigableString):
            continue
        # Doctype, CDATA and processing instructions carry no prose.
        if isinstance(node, PreformattedString) and not isinstance(node, Comment):
            continue
        fragments.append(str(node))
    return " ".join(fragments)


def _iter_xml_fragments(element: ET.Element) -> Iterator[str]:
    if element.text:
        yield element.text
    for child in element:
        yield from _iter_xml_fragments(child)
        if child.tail:
            yield child.tail


def read_xml_file(path: Path) -> str:
    """Return the text, comment and tail content of an XML document."""
    content = _read_text(path)
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        parser.feed(content)
        root = parser.close()
    except ET.ParseError as exc:
        raise MalformedMarkup(path, exc) from exc
    return " ".join(_iter_xml_fragments(root))


def iter_pdf_pages(path: Path) -> Iterator[str]:
    """Yield the text of each page of a PDF file, whitespace normalized."""
    path = Path(path)
    # PyMuPDF reports a missing file as a RuntimeError, not an OSError.
    if not path.is_file():
        raise UnreadableFile(path, f"no such file: {path}")
    try:
        doc = fitz.open(path)
    except OSError as exc:
        raise UnreadableFile(path, exc) from exc
    except Exception as exc:
        raise MalformedMarkup(path, exc) from exc

    try:
        for index in range(len(doc)):
            try:
                text = doc[index].get_text() or ""
            except Exception as exc:  # pragma: no cover
                LOGGER.warning("Failed to read page %s in %s: %s", index, path, exc)
                continue
            normalized = normalize_whitespace(text.splitlines())
            if normalized:
                yield normalized
    finally:
        doc.close()


def read_pdf_file(path: Path) -> str:
    return "\n".join(iter_pdf_pages(path))


READERS: Dict[ContentKind, Callable[[Path], str]] = {
    ContentKind.TEXT: read_text_file,
    ContentKind.HTML: read_html_file,
    ContentKind.XML: read_xml_file,
    ContentKind.PDF: read_pdf_file,
}


def read_document(path: Path) -> str:
    """Return the plain-text content of ``path``.

    Raises:
        NoExtension: the file name has no extension.
        UnsupportedExtension: the extension is not one DocRank reads.
        UnreadableFile: the file cannot be opened or decoded.
        MalformedMarkup: HTML, XML or PDF content cannot be parsed.
    """
    path = Path(path)
    kind = content_kind(path)
    LOGGER.debug("Reading %s as %s", path, kind.value)
    return READERS[kind](path)

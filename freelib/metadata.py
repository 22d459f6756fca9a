"""Extraction of book metadata from FB2 documents and EPUB containers."""

from __future__ import annotations

import io
import posixpath
import xml.etree.ElementTree as ET
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass, field

from freelib.books import open_zip_member
from freelib.models import Author


@dataclass
class BookMetadata:
    """Descriptive data read from a book file."""

    title: str = ""
    language: str = ""
    series: str = ""
    num_in_series: int = 0
    authors: list[Author] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    isbn: str = ""


def _local(tag: object) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _parse_tree(data: bytes | None) -> ET.Element | None:
    """Parse as much of a document as is well formed; truncated input is tolerated."""
    if not data:
        return None
    parser = ET.XMLPullParser(events=("start",))
    try:
        parser.feed(data)
        parser.close()
    except ET.ParseError:
        pass
    root = None
    try:
        for _event, element in parser.read_events():
            if root is None:
                root = element
    except ET.ParseError:
        pass
    return root


def _descendants(element: ET.Element | None, name: str, include_self: bool = False) -> Iterator[ET.Element]:
    if element is None:
        return
    for node in element.iter():
        if node is element and not include_self:
            continue
        if _local(node.tag) == name:
            yield node


def _first(element: ET.Element | None, name: str, include_self: bool = False) -> ET.Element | None:
    return next(_descendants(element, name, include_self), None)


def _text(element: ET.Element | None) -> str:
    return "" if element is None else "".join(element.itertext())


def _attr(element: ET.Element | None, name: str) -> str:
    if element is None:
        return ""
    for key, value in element.attrib.items():
        if _local(key) == name:
            return value
    return ""


def _to_uint(text: str) -> int:
    return int(text) if text.isdigit() else 0


def _fb2_authors(title_info: ET.Element | None, strip: bool) -> list[Author]:
    def part(node: ET.Element, name: str) -> str:
        value = _text(_first(node, name))
        return value.strip() if strip else value

    return [
        Author(
            first_name=part(node, "first-name"),
            last_name=part(node, "last-name"),
            middle_name=part(node, "middle-name"),
        )
        for node in _descendants(title_info, "author")
    ]


def parse_fb2(data: bytes) -> BookMetadata:
    """Read title, language, series, authors, genres and ISBN from an FB2 document."""
    root = _parse_tree(data)
    title_info = _first(root, "title-info", include_self=True)
    sequence = _first(title_info, "sequence")
    publish_info = _first(root, "publish-info", include_self=True)
    return BookMetadata(
        title=_text(_first(title_info, "book-title")),
        language=_text(_first(title_info, "lang"))[:2],
        series=_attr(sequence, "name").strip(),
        num_in_series=_to_uint(_attr(sequence, "number").strip()),
        authors=_fb2_authors(title_info, strip=True),
        genres=[_text(node).strip() for node in _descendants(title_info, "genre")],
        isbn=_text(_first(publish_info, "isbn")),
    )


def parse_fb2_authors(data: bytes) -> list[Author]:
    """Return the authors of an FB2 document with their names exactly as written."""
    root = _parse_tree(data)
    return _fb2_authors(_first(root, "title-info", include_self=True), strip=False)


def _opf_path(container: ET.Element) -> str | None:
    for rootfiles in container:
        if _local(rootfiles.tag).lower() != "rootfiles":
            continue
        for rootfile in rootfiles:
            if _local(rootfile.tag).lower() == "rootfile":
                return _attr(rootfile, "full-path")
    return None


def _creator(text: str) -> Author:
    names = text.strip().split(" ")
    author = Author(first_name=names[0])
    if len(names) > 1:
        author.middle_name = names[1]
    if len(names) > 2:
        author.last_name = names[2]
    return author


def parse_epub(data: bytes) -> BookMetadata:
    """Read title, language, authors and subjects from an EPUB container."""
    meta = BookMetadata()
    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile:
        return meta
    with zf:
        container = _parse_tree(open_zip_member(zf, "META-INF/container.xml"))
        if container is None:
            return meta
        opf_path = _opf_path(container)
        if opf_path is None:
            return meta
        opf = _parse_tree(open_zip_member(zf, posixpath.normpath(opf_path)))
    if opf is None:
        return meta
    metadata = next((child for child in opf if _local(child.tag) == "metadata"), None)
    for node in metadata if metadata is not None else ():
        name = _local(node.tag)
        if name.endswith("title"):
            meta.title = _text(node).strip()
        elif name.endswith("language"):
            meta.language = _text(node).strip()[:2]
        elif name.endswith("creator"):
            meta.authors.append(_creator(_text(node)))
        elif name.endswith("subject"):
            meta.genres.append(_text(node).strip())
    return meta
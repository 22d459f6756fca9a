"""Access to book files on disk or inside archives, and their annotations."""

from __future__ import annotations

import base64
import binascii
import io
import os
import posixpath
import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from freelib.models import Book, Library


@dataclass
class BookFile:
    """Contents of a book file together with its location and date."""

    data: bytes
    path: str
    info: bytes | None = None
    modified: datetime | None = None


def open_zip_member(archive: zipfile.ZipFile, name: str) -> bytes | None:
    """Read a member of an archive, matching the name case-insensitively as a fallback."""
    names = archive.namelist()
    if name not in names:
        lowered = name.lower()
        name = next((n for n in names if n.lower() == lowered), "")
        if not name:
            return None
    return archive.read(name)


def _complete_base_name(file_name: str) -> str:
    base = posixpath.basename(file_name)
    return base.rsplit(".", 1)[0] if "." in base else base


def _info_name(file_name: str) -> str:
    directory = posixpath.dirname(file_name)
    fbd = _complete_base_name(file_name) + ".fbd"
    return posixpath.join(directory, fbd) if directory else fbd


def _library_root(library: Library) -> str:
    return os.path.abspath(os.path.expanduser(library.path))


def read_book_file(library: Library, book_id: int, with_info: bool = False) -> BookFile:
    """Read a book's file, from the library folder or from its archive."""
    book = library.books[book_id]
    root = _library_root(library)

    if not book.archive:
        file_path = f"{root}/{book.file}.{book.format}"
        data = Path(file_path).read_bytes()
        stat = os.stat(file_path)
        modified = datetime.fromtimestamp(getattr(stat, "st_birthtime", stat.st_mtime))
        info = None
        if with_info:
            fbd = Path(file_path).with_name(_complete_base_name(file_path) + ".fbd")
            if fbd.exists():
                info = fbd.read_bytes()
        return BookFile(data=data, path=os.path.abspath(file_path), info=info, modified=modified)

    member = f"{book.file}.{book.format}"
    archive_path = f"{root}/{book.archive.replace('.inp', '.zip')}".replace("\\", "/")
    try:
        zf = zipfile.ZipFile(archive_path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise FileNotFoundError(f"cannot open archive {archive_path}") from exc
    with zf:
        try:
            modified = datetime(*zf.getinfo(member).date_time)
        except KeyError:
            modified = None
        data = open_zip_member(zf, member)
        if data is None:
            raise FileNotFoundError(f"{member} not found in {archive_path}")
        info = open_zip_member(zf, _info_name(member)) if with_info else None
    return BookFile(data=data, path=f"{archive_path}/{member}", info=info, modified=modified)


def _local(name: str) -> str:
    return name.rsplit("}", 1)[-1]


def _attr(element: ET.Element, name: str) -> str:
    for key, value in element.attrib.items():
        if _local(key) == name:
            return value
    return ""


def _text(element: ET.Element | None) -> str:
    return "" if element is None else "".join(element.itertext())


def _parse(data: bytes | None) -> ET.Element | None:
    if not data:
        return None
    try:
        return ET.fromstring(data)
    except ET.ParseError:
        return None


def _descendants(element: ET.Element, name: str, include_self: bool = False):
    for node in element.iter():
        if node is element and not include_self:
            continue
        if isinstance(node.tag, str) and _local(node.tag) == name:
            yield node


def _first(element: ET.Element | None, name: str, include_self: bool = False) -> ET.Element | None:
    if element is None:
        return None
    return next(_descendants(element, name, include_self), None)


def _epub_annotation(book: Book, data: bytes, image_path: Path) -> None:
    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile:
        return
    with zf:
        container = _parse(open_zip_member(zf, "META-INF/container.xml"))
        if container is None:
            return
        opf_path = next(
            (
                _attr(rootfile, "full-path")
                for rootfiles in container
                if _local(rootfiles.tag).lower() == "rootfiles"
                for rootfile in rootfiles
                if _local(rootfile.tag).lower() == "rootfile"
            ),
            None,
        )
        if opf_path is None:
            return
        opf = _parse(open_zip_member(zf, opf_path))
        if opf is None:
            return
        rel_path = posixpath.dirname(opf_path)
        metadata = next((c for c in opf if _local(c.tag) == "metadata"), None)
        manifest = next((c for c in opf if _local(c.tag) == "manifest"), None)
        for node in metadata if metadata is not None else ():
            name = _local(node.tag)
            if name.endswith("description"):
                book.annotation = _text(node)
            elif name.endswith("meta") and _attr(node, "name") == "cover":
                cover_id = _attr(node, "content")
                item = next(
                    (i for i in (manifest if manifest is not None else ()) if _attr(i, "id") == cover_id),
                    None,
                )
                if item is None:
                    continue
                href = _attr(item, "href")
                cover = posixpath.join(rel_path, href) if rel_path else href
                image = open_zip_member(zf, cover)
                if image is not None:
                    image_path.parent.mkdir(parents=True, exist_ok=True)
                    image_path.write_bytes(image)
                    book.image = str(image_path)


def _fb2_annotation(book: Book, data: bytes, image_path: Path) -> None:
    root = _parse(data)
    title_info = _first(root, "title-info", include_self=True)
    image = _first(_first(title_info, "coverpage"), "image")
    cover = _attr(image, "href") if image is not None else ""
    if cover.startswith("#"):
        for binary in _descendants(root, "binary", include_self=True):
            if _attr(binary, "id") != cover[1:]:
                continue
            try:
                content = base64.b64decode(_text(binary).encode("latin-1", "ignore"))
            except (binascii.Error, ValueError):
                break
            image_path.parent.mkdir(parents=True, exist_ok=True)
            image_path.write_bytes(content)
            book.image = str(image_path)
            break
    book.annotation = _text(_first(title_info, "annotation"))


def load_annotation(library: Library, book_id: int, image_dir: str | os.PathLike) -> Book:
    """Fill a book's annotation and extract its cover image into image_dir."""
    book = library.books[book_id]
    data = read_book_file(library, book_id).data
    image_path = Path(image_dir) / f"{book_id}.jpg"
    if book.format == "epub":
        _epub_annotation(book, data, image_path)
    elif book.format == "fb2":
        _fb2_annotation(book, data, image_path)
    return book


def name_from_inpx(path: str) -> str:
    """Return the collection name stored in an INPX index, or an empty string."""
    if not path:
        return ""
    try:
        with zipfile.ZipFile(path) as zf:
            data = open_zip_member(zf, "COLLECTION.INFO")
    except (OSError, zipfile.BadZipFile):
        return ""
    if data is None:
        return ""
    return data.split(b"\n", 1)[0].decode("utf-8", errors="replace")
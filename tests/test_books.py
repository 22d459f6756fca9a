import base64
import zipfile

import pytest

from freelib.books import (
    BookFile,
    load_annotation,
    name_from_inpx,
    open_zip_member,
    read_book_file,
)
from freelib.models import Book, Library

FB2 = """<?xml version="1.0" encoding="utf-8"?>
<FictionBook xmlns="http://www.gribuser.ru/xml/fictionbook/2.0" xmlns:l="http://www.w3.org/1999/xlink">
<description><title-info>
<book-title>Title</book-title>
<coverpage><image l:href="#cover.jpg"/></coverpage>
<annotation><p>Short story</p></annotation>
</title-info></description>
<binary id="cover.jpg" content-type="image/jpeg">{img}</binary>
</FictionBook>
"""

CONTAINER = """<?xml version="1.0"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
<rootfiles><rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/></rootfiles>
</container>
"""

OPF = """<?xml version="1.0"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0">
<metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
<dc:title>Epub title</dc:title>
<dc:description>Epub annotation</dc:description>
<meta name="cover" content="cov"/>
</metadata>
<manifest><item id="cov" href="images/c.jpg" media-type="image/jpeg"/></manifest>
</package>
"""


def make_fb2(image: bytes) -> bytes:
    return FB2.format(img=base64.b64encode(image).decode()).encode()


def test_open_zip_member_case_insensitive(tmp_path):
    path = tmp_path / "a.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("Dir/Book.FB2", b"data")
    with zipfile.ZipFile(path) as zf:
        assert open_zip_member(zf, "Dir/Book.FB2") == b"data"
        assert open_zip_member(zf, "dir/book.fb2") == b"data"
        assert open_zip_member(zf, "missing") is None


def test_read_plain_file_with_info(tmp_path):
    (tmp_path / "book.fb2").write_bytes(b"content")
    (tmp_path / "book.fbd").write_bytes(b"info")
    lib = Library(path=str(tmp_path))
    lib.books[1] = Book(file="book", format="fb2")
    result = read_book_file(lib, 1, True)
    assert isinstance(result, BookFile)
    assert result.data == b"content"
    assert result.info == b"info"
    assert result.path.endswith("book.fb2")


def test_read_plain_file_missing(tmp_path):
    lib = Library(path=str(tmp_path))
    lib.books[1] = Book(file="nothing", format="fb2")
    with pytest.raises(FileNotFoundError):
        read_book_file(lib, 1)


def test_read_from_archive(tmp_path):
    with zipfile.ZipFile(tmp_path / "part.zip", "w") as zf:
        zf.writestr("42.fb2", b"zipped")
        zf.writestr("42.fbd", b"zipinfo")
    lib = Library(path=str(tmp_path))
    lib.books[1] = Book(file="42", format="fb2", archive="part.inp")
    result = read_book_file(lib, 1, with_info=True)
    assert result.data == b"zipped"
    assert result.info == b"zipinfo"
    assert result.path.endswith("part.zip/42.fb2")
    assert result.modified is not None


def test_read_from_archive_without_info(tmp_path):
    with zipfile.ZipFile(tmp_path / "part.zip", "w") as zf:
        zf.writestr("42.fb2", b"zipped")
    lib = Library(path=str(tmp_path))
    lib.books[1] = Book(file="42", format="fb2", archive="part.inp")
    assert read_book_file(lib, 1).info is None


def test_read_missing_archive(tmp_path):
    lib = Library(path=str(tmp_path))
    lib.books[1] = Book(file="42", format="fb2", archive="none.inp")
    with pytest.raises(FileNotFoundError):
        read_book_file(lib, 1)


def test_fb2_annotation_and_cover(tmp_path):
    (tmp_path / "b.fb2").write_bytes(make_fb2(b"\xff\xd8IMAGE"))
    lib = Library(path=str(tmp_path))
    lib.books[7] = Book(file="b", format="fb2")
    images = tmp_path / "img"
    book = load_annotation(lib, 7, images)
    assert book.annotation.strip() == "Short story"
    assert (images / "7.jpg").read_bytes() == b"\xff\xd8IMAGE"
    assert book.image == str(images / "7.jpg")


def test_epub_annotation_and_cover(tmp_path):
    with zipfile.ZipFile(tmp_path / "e.epub", "w") as zf:
        zf.writestr("META-INF/container.xml", CONTAINER)
        zf.writestr("OEBPS/content.opf", OPF)
        zf.writestr("OEBPS/images/c.jpg", b"COVER")
    lib = Library(path=str(tmp_path))
    lib.books[3] = Book(file="e", format="epub")
    book = load_annotation(lib, 3, tmp_path / "out")
    assert book.annotation == "Epub annotation"
    assert (tmp_path / "out" / "3.jpg").read_bytes() == b"COVER"


def test_annotation_of_broken_fb2(tmp_path):
    (tmp_path / "x.fb2").write_bytes(b"not xml at all")
    lib = Library(path=str(tmp_path))
    lib.books[1] = Book(file="x", format="fb2")
    book = load_annotation(lib, 1, tmp_path)
    assert book.annotation == ""
    assert book.image == ""


def test_name_from_inpx(tmp_path):
    path = tmp_path / "lib.inpx"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("COLLECTION.INFO", "My Collection\nsecond line\n".encode())
    assert name_from_inpx(str(path)) == "My Collection"


def test_name_from_inpx_without_info(tmp_path):
    path = tmp_path / "lib.inpx"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("other.inp", b"x")
    assert name_from_inpx(str(path)) == ""
    assert name_from_inpx("") == ""
    assert name_from_inpx(str(tmp_path / "missing.inpx")) == ""
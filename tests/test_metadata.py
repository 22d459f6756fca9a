import io
import zipfile

from freelib.metadata import BookMetadata, parse_epub, parse_fb2, parse_fb2_authors
from freelib.models import Author

FB2 = """<?xml version="1.0" encoding="utf-8"?>
<FictionBook xmlns="urn:example:fb2" xmlns:l="urn:example:xlink">
 <description>
  <title-info>
   <genre> sf_fantasy </genre>
   <genre>adventure</genre>
   <author><first-name> Ivan </first-name><last-name>Petrov</last-name><middle-name>Ilyich</middle-name></author>
   <author><first-name>Anna</first-name><last-name>Sidorova</last-name></author>
   <book-title>The Road</book-title>
   <lang>en-GB</lang>
   <sequence name=" Long Saga " number="3"/>
  </title-info>
  <publish-info><isbn>978-0-00-000000-0</isbn></publish-info>
 </description>
 <body><p>Text</p></body>
</FictionBook>
""".encode("utf-8")


def test_fb2_title_and_language():
    meta = parse_fb2(FB2)
    assert meta.title == "The Road"
    assert meta.language == "en"


def test_fb2_series():
    meta = parse_fb2(FB2)
    assert meta.series == "Long Saga"
    assert meta.num_in_series == 3


def test_fb2_authors_are_trimmed():
    meta = parse_fb2(FB2)
    assert [a.key() for a in meta.authors] == [
        ("Ivan", "Ilyich", "Petrov"),
        ("Anna", "", "Sidorova"),
    ]


def test_fb2_genres_and_isbn():
    meta = parse_fb2(FB2)
    assert meta.genres == ["sf_fantasy", "adventure"]
    assert meta.isbn == "978-0-00-000000-0"


def test_fb2_raw_authors_keep_spacing():
    authors = parse_fb2_authors(FB2)
    assert authors[0].first_name == " Ivan "
    assert authors[1] == Author(first_name="Anna", last_name="Sidorova")


def test_fb2_invalid_number_is_zero():
    data = FB2.replace(b'number="3"', b'number="x"')
    assert parse_fb2(data).num_in_series == 0


def test_fb2_truncated_document_keeps_closed_elements():
    cut = FB2.index(b"<lang>")
    meta = parse_fb2(FB2[:cut])
    assert meta.title == "The Road"
    assert len(meta.authors) == 2
    assert meta.language == ""


def test_fb2_garbage_gives_empty_metadata():
    assert parse_fb2(b"not xml at all") == BookMetadata()
    assert parse_fb2_authors(b"") == []


def _epub(opf: str, container_path: str = "OEBPS/content.opf") -> bytes:
    container = (
        '<?xml version="1.0"?>'
        '<container xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
        f'<rootfiles><rootfile full-path="{container_path}"/></rootfiles></container>'
    )
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("META-INF/container.xml", container)
        zf.writestr("OEBPS/content.opf", opf)
    return buf.getvalue()


OPF = """<?xml version="1.0"?>
<package xmlns="urn:example:opf" xmlns:dc="urn:example:dc">
 <metadata>
  <dc:title> Epub Title </dc:title>
  <dc:language>de-AT</dc:language>
  <dc:creator>John Ronald Tolkien</dc:creator>
  <dc:creator>Solo</dc:creator>
  <dc:subject> fantasy </dc:subject>
 </metadata>
</package>
"""


def test_epub_metadata():
    meta = parse_epub(_epub(OPF))
    assert meta.title == "Epub Title"
    assert meta.language == "de"
    assert meta.genres == ["fantasy"]


def test_epub_creators_split_on_spaces():
    meta = parse_epub(_epub(OPF))
    assert meta.authors[0].key() == ("John", "Ronald", "Tolkien")
    assert meta.authors[1].key() == ("Solo", "", "")


def test_epub_missing_opf_gives_empty_metadata():
    meta = parse_epub(_epub(OPF, container_path="missing.opf"))
    assert meta.title == ""
    assert meta.authors == []


def test_epub_not_a_zip():
    assert parse_epub(b"plain bytes") == BookMetadata()
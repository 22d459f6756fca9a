"""Parsing of INPX collection indexes: the field layout and the book records."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import date, datetime

FIELD_SEPARATOR = "\x04"
LIST_SEPARATOR = ":"

_INTEGER = re.compile(r"[+-]?\d+")
_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")

_STRUCTURE_NAMES = {
    "TITLE": "name",
    "SERIES": "series",
    "SERNO": "num_in_series",
    "FILE": "file",
    "SIZE": "size",
    "LIBID": "id_in_lib",
    "DEL": "deleted",
    "EXT": "format",
    "DATE": "date",
    "LANG": "language",
    "STARS": "stars",
    "KEYWORDS": "keys",
    "AUTHOR": "authors",
    "GENRE": "genres",
    "FOLDER": "folder",
    "TAG": "tag",
    "TAGSERIES": "serial_tag",
    "TAGAUTHOR": "author_tag",
}


@dataclass
class FieldLayout:
    """Column positions of each field in an INP line; -1 marks an absent field."""

    authors: int = 0
    genres: int = 1
    name: int = 2
    series: int = 3
    num_in_series: int = 4
    file: int = 5
    size: int = 6
    id_in_lib: int = 7
    deleted: int = 8
    format: int = 9
    date: int = 10
    language: int = 11
    stars: int = 12
    keys: int = 13
    folder: int = -1
    tag: int = -1
    serial_tag: int = -1
    author_tag: int = -1


@dataclass
class InpRecord:
    """One book described by a line of an INP file."""

    name: str = ""
    series: str = ""
    num_in_series: int = 0
    file: str = ""
    size: int = 0
    id_in_lib: int = 0
    deleted: bool = False
    format: str = ""
    date: date | None = None
    language: str = ""
    stars: int = 0
    keys: str = ""
    folder: str = ""
    authors: list[str] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    book_tags: list[int] = field(default_factory=list)
    serial_tags: list[int] = field(default_factory=list)
    author_tags: list[int] = field(default_factory=list)


def parse_structure(text: str) -> FieldLayout:
    """Build a field layout from the contents of a STRUCTURE.INFO file."""
    layout = FieldLayout(**{f.name: -1 for f in fields(FieldLayout)})
    for line in text.split("\n"):
        for position, column in enumerate(line.upper().split(";")):
            attribute = _STRUCTURE_NAMES.get(column)
            if attribute is not None:
                setattr(layout, attribute, position)
    return layout


def _to_int(text: str) -> int:
    text = text.strip()
    return int(text) if _INTEGER.fullmatch(text) else 0


def _to_date(text: str) -> date | None:
    text = text.strip()
    if not _DATE.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def _split_list(text: str) -> list[str]:
    return [item for item in text.split(LIST_SEPARATOR) if item]


def split_tags(text: str, tags: Mapping[str, int]) -> list[int]:
    """Return the ids of the known tags in a colon-separated tag list."""
    return [tags[name] for name in _split_list(text.strip()) if name in tags]


def is_unknown_author(text: str) -> bool:
    """Tell whether an author entry is a placeholder for an unknown author."""
    lowered = text.lower()
    return (
        "автор" in lowered and ("неизвестен" in lowered or "неизвестный" in lowered)
    ) or lowered == "неизвестно"


def parse_record(
    line: str,
    layout: FieldLayout,
    folder: str,
    tags: Mapping[str, int] | None = None,
) -> InpRecord | None:
    """Parse one INP line; None for an empty line.

    folder is used when the layout has no folder column.
    """
    if not line:
        return None
    tags = tags or {}
    columns = line.split(FIELD_SEPARATOR)

    def column(index: int) -> str | None:
        return columns[index] if 0 <= index < len(columns) else None

    def text(index: int) -> str:
        value = column(index)
        return "" if value is None else value.strip()

    record = InpRecord(
        name=text(layout.name),
        series=text(layout.series),
        num_in_series=_to_int(text(layout.num_in_series)),
        file=text(layout.file),
        size=_to_int(text(layout.size)),
        id_in_lib=_to_int(text(layout.id_in_lib)),
        deleted=_to_int(text(layout.deleted)) > 0,
        format=text(layout.format),
        date=_to_date(text(layout.date)),
        language=text(layout.language)[:2],
        stars=_to_int(text(layout.stars)),
        keys=text(layout.keys),
        folder=text(layout.folder) if column(layout.folder) is not None else folder,
        book_tags=split_tags(text(layout.tag), tags),
        serial_tags=split_tags(text(layout.serial_tag), tags),
        author_tags=split_tags(text(layout.author_tag), tags),
    )

    authors = column(layout.authors)
    record.authors = _split_list(authors) if authors is not None else []

    genres = column(layout.genres)
    if genres is not None:
        for number, genre in enumerate(_split_list(genres)):
            genre = genre.strip()
            if number > 0 and not genre:
                continue
            record.genres.append(genre)
    return record
"""In-memory model of a book library: authors, books, series and genres."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

UNKNOWN_AUTHOR = "unknown author"


@dataclass(eq=False)
class Author:
    """A book author; identity is given by the three name parts only."""

    first_name: str = ""
    last_name: str = ""
    middle_name: str = ""
    tag_ids: list[int] = field(default_factory=list)

    def key(self) -> tuple[str, str, str]:
        """Return the (first, middle, last) name tuple that identifies the author."""
        return (self.first_name, self.middle_name, self.last_name)

    def display_name(self) -> str:
        """Return "Last First Middle", or a placeholder when all parts are empty."""
        name = f"{self.last_name} {self.first_name} {self.middle_name}".strip()
        return name or UNKNOWN_AUTHOR

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Author):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())


def parse_author(text: str) -> Author:
    """Build an author from a "Last,First,Middle" string."""
    parts = [part.strip() for part in text.split(",")]
    author = Author(last_name=parts[0])
    if len(parts) > 1:
        author.first_name = parts[1]
    if len(parts) > 2:
        author.middle_name = parts[2]
    return author


@dataclass
class Book:
    """A single book record of a library."""

    name: str = ""
    annotation: str = ""
    image: str = ""
    archive: str = ""
    isbn: str = ""
    date: date | None = None
    format: str = ""
    file: str = ""
    keywords: str = ""
    genre_ids: list[int] = field(default_factory=list)
    author_ids: list[int] = field(default_factory=list)
    tag_ids: list[int] = field(default_factory=list)
    id_in_lib: int = 0
    serial_id: int = 0
    first_author_id: int = 0
    num_in_serial: int = 0
    size: int = 0
    stars: int = 0
    language_id: int = 0
    deleted: bool = False


@dataclass
class Serial:
    """A book series."""

    name: str = ""
    tag_ids: list[int] = field(default_factory=list)


@dataclass
class Genre:
    """A genre from the genre tree."""

    name: str = ""
    keys: list[str] = field(default_factory=list)
    parent_id: int = 0
    sort: int = 0


@dataclass
class Library:
    """A library and, once loaded, its catalogue."""

    name: str = ""
    path: str = ""
    inpx: str = ""
    version: str = ""
    first_author_only: bool = False
    without_deleted: bool = False
    loaded: bool = False
    authors: dict[int, Author] = field(default_factory=dict)
    author_books: dict[int, list[int]] = field(default_factory=dict)
    books: dict[int, Book] = field(default_factory=dict)
    serials: dict[int, Serial] = field(default_factory=dict)
    languages: list[str] = field(default_factory=list)

    def find_author(self, author: Author) -> int:
        """Return the id of an author with the same names, or 0."""
        return next(
            (author_id for author_id, known in self.authors.items() if known == author),
            0,
        )

    def find_serial(self, name: str) -> int:
        """Return the id of the series with this name, or 0."""
        return next(
            (serial_id for serial_id, serial in self.serials.items() if serial.name == name),
            0,
        )

    def remove_tag(self, tag_id: int) -> None:
        """Drop one occurrence of a tag from every book, series and author."""
        holders = [*self.books.values(), *self.serials.values(), *self.authors.values()]
        for holder in holders:
            if tag_id in holder.tag_ids:
                holder.tag_ids.remove(tag_id)
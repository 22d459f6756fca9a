"""Writing of books, authors, series, genres and tags into a library catalogue."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date

from freelib.models import Author

log = logging.getLogger(__name__)


@dataclass
class BookRecord:
    """The columns of one book row as it is added to the catalogue."""

    name: str = ""
    file: str = ""
    format: str = ""
    archive: str = ""
    serial_id: int = 0
    num_in_serial: int = 0
    size: int = 0
    id_in_lib: int = 0
    deleted: bool = False
    date: date | None = None
    language: str = ""
    keys: str = ""
    stars: int = 0


def load_tags(conn: sqlite3.Connection) -> dict[str, int]:
    """Return tag ids keyed by their trimmed names."""
    return {
        ("" if name is None else str(name).strip()): int(tag_id)
        for tag_id, name in conn.execute("SELECT id, name FROM tag")
    }


def load_genre_keys(conn: sqlite3.Connection) -> dict[str, int]:
    """Return genre ids keyed by every genre key listed in the genre table."""
    keys: dict[str, int] = {}
    for genre_id, text in conn.execute("SELECT id, keys FROM genre WHERE NOT keys = ''"):
        for key in str(text or "").split(";"):
            if key:
                keys[key] = int(genre_id)
    return keys


class CatalogWriter:
    """Adds catalogue rows for one library, reusing series and authors it already knows."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        library_id: int,
        genre_keys: Mapping[str, int] | None = None,
        known_authors: Mapping[Author, int] | None = None,
    ) -> None:
        self.conn = conn
        self.library_id = library_id
        self.genre_keys = load_genre_keys(conn) if genre_keys is None else dict(genre_keys)
        self._authors = self._read_authors() if known_authors is None else dict(known_authors)

    def _read_authors(self) -> dict[Author, int]:
        rows = self.conn.execute(
            "SELECT id, name1, name2, name3 FROM author WHERE id_lib = ?", (self.library_id,)
        )
        return {
            Author(
                first_name=str(first or "").strip(),
                last_name=str(last or "").strip(),
                middle_name=str(middle or "").strip(),
            ): int(author_id)
            for author_id, last, first, middle in rows
        }

    def _link_tags(self, table: str, column: str, owner_id: int, tag_ids: Iterable[int] | None) -> None:
        pairs = [(owner_id, tag_id) for tag_id in tag_ids or ()]
        if pairs:
            self.conn.executemany(
                f"INSERT OR IGNORE INTO {table}({column}, id_tag) VALUES (?, ?)", pairs
            )

    def add_serial(self, name: str, tag_ids: Iterable[int] | None = None) -> int:
        """Return the id of the named series, creating it if needed; 0 for a blank name."""
        name = name.strip()
        if not name:
            return 0
        row = self.conn.execute(
            "SELECT id FROM seria WHERE name = ? AND id_lib = ?", (name, self.library_id)
        ).fetchone()
        if row is not None:
            return int(row[0])
        cur = self.conn.execute(
            "INSERT INTO seria(name, id_lib) VALUES (?, ?)", (name, self.library_id)
        )
        serial_id = int(cur.lastrowid)
        self._link_tags("seria_tag", "id_seria", serial_id, tag_ids)
        return serial_id

    def add_author(
        self,
        author: Author,
        book_id: int,
        first_author: bool = False,
        tag_ids: Iterable[int] | None = None,
    ) -> int:
        """Link an author to a book, creating the author if unknown; return its id."""
        author_id = self._authors.get(author, 0)
        if author_id == 0:
            cur = self.conn.execute(
                "INSERT INTO author(name1, name2, name3, id_lib) VALUES (?, ?, ?, ?)",
                (author.last_name, author.first_name, author.middle_name, self.library_id),
            )
            author_id = int(cur.lastrowid)
            self._authors[author] = author_id
        if first_author:
            self.conn.execute(
                "UPDATE book SET first_author_id = ? WHERE id = ?", (author_id, book_id)
            )
        self.conn.execute(
            "INSERT OR IGNORE INTO book_author(id_book, id_author, id_lib) VALUES (?, ?, ?)",
            (book_id, author_id, self.library_id),
        )
        self._link_tags("author_tag", "id_author", author_id, tag_ids)
        return author_id

    def add_book(self, record: BookRecord, tag_ids: Iterable[int] | None = None) -> int:
        """Insert a book row and its tags; return the new book id."""
        cur = self.conn.execute(
            "INSERT INTO book(name, star, id_seria, num_in_seria, language, file, size, deleted,"
            " date, keys, id_inlib, id_lib, format, archive)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record.name,
                record.stars,
                record.serial_id or None,
                record.num_in_serial,
                record.language,
                record.file,
                record.size,
                int(record.deleted),
                record.date.isoformat() if record.date else None,
                record.keys,
                record.id_in_lib,
                self.library_id,
                record.format,
                record.archive,
            ),
        )
        book_id = int(cur.lastrowid)
        self._link_tags("book_tag", "id_book", book_id, tag_ids)
        return book_id

    def add_genre(self, book_id: int, genre: str) -> bool:
        """Link a book to the genre with this key; False if the key is unknown."""
        key = genre.lower().replace(" ", "_")
        genre_id = self.genre_keys.get(key)
        if genre_id is None:
            log.debug("unknown genre: %s", genre)
            return False
        self.conn.execute(
            "INSERT OR IGNORE INTO book_genre(id_book, id_genre, id_lib) VALUES (?, ?, ?)",
            (book_id, genre_id, self.library_id),
        )
        return True

    def book_exists(self, file: str, archive: str) -> int | None:
        """Return the id of the library's book stored under this file and archive."""
        row = self.conn.execute(
            "SELECT id FROM book WHERE id_lib = ? AND file = ? AND archive = ?",
            (self.library_id, file, archive),
        ).fetchone()
        return None if row is None else int(row[0])

    def undelete_book(self, book_id: int) -> None:
        """Clear the deleted mark of a book."""
        self.conn.execute("UPDATE book SET deleted = 0 WHERE id = ?", (book_id,))
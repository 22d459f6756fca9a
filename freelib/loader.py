"""Loading a library catalogue and the genre tree from the database into memory."""

from __future__ import annotations

import sqlite3
from datetime import date

from freelib.models import Author, Book, Genre, Library, Serial

OTHER_GENRE_ID = 1112


def _int(value: object) -> int:
    try:
        return int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0


def _str(value: object) -> str:
    return "" if value is None else str(value)


def _flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true")
    return bool(value)


def _date(value: object) -> date | None:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10]) if value else None
    except ValueError:
        return None


def _load_serials(conn: sqlite3.Connection, library_id: int, library: Library) -> None:
    library.serials = {
        int(serial_id): Serial(name=_str(name))
        for serial_id, name in conn.execute(
            "SELECT id, name FROM seria WHERE id_lib = ?", (library_id,)
        )
    }
    for serial_id, tag_id in conn.execute(
        "SELECT seria_tag.id_seria, seria_tag.id_tag FROM seria_tag"
        " INNER JOIN seria ON seria.id = seria_tag.id_seria WHERE seria.id_lib = ?",
        (library_id,),
    ):
        serial = library.serials.get(_int(serial_id))
        if serial is not None:
            serial.tag_ids.append(_int(tag_id))


def _load_authors(conn: sqlite3.Connection, library_id: int, library: Library) -> None:
    library.authors = {0: Author()}
    for author_id, last, first, middle in conn.execute(
        "SELECT id, name1, name2, name3 FROM author WHERE id_lib = ?", (library_id,)
    ):
        library.authors[int(author_id)] = Author(
            first_name=_str(first).strip(),
            last_name=_str(last).strip(),
            middle_name=_str(middle).strip(),
        )
    for author_id, tag_id in conn.execute(
        "SELECT author_tag.id_author, author_tag.id_tag FROM author_tag"
        " INNER JOIN author ON author.id = author_tag.id_author WHERE author.id_lib = ?",
        (library_id,),
    ):
        author = library.authors.get(_int(author_id))
        if author is not None:
            author.tag_ids.append(_int(tag_id))


def _load_books(conn: sqlite3.Connection, library_id: int, library: Library) -> None:
    library.books = {}
    rows = conn.execute(
        "SELECT id, name, star, id_seria, num_in_seria, language, file, size, deleted, date,"
        " format, id_inlib, archive, first_author_id, keys FROM book WHERE id_lib = ?",
        (library_id,),
    )
    for (book_id, name, star, serial_id, num, language, file, size, deleted,
         when, fmt, id_in_lib, archive, first_author, keys) in rows:
        name = _str(name)
        if not name:
            continue
        language = _str(language).lower()
        if language not in library.languages:
            library.languages.append(language)
        library.books[int(book_id)] = Book(
            name=name,
            stars=_int(star) & 0xFF,
            serial_id=_int(serial_id),
            num_in_serial=_int(num),
            language_id=library.languages.index(language),
            file=_str(file),
            size=_int(size),
            deleted=_flag(deleted),
            date=_date(when),
            format=_str(fmt),
            id_in_lib=_int(id_in_lib),
            archive=_str(archive),
            first_author_id=_int(first_author),
            keywords=_str(keys),
        )


def _load_book_links(conn: sqlite3.Connection, library_id: int, library: Library) -> None:
    for book_id, genre_id in conn.execute(
        "SELECT id_book, id_genre FROM book_genre WHERE id_lib = ?", (library_id,)
    ):
        book = library.books.get(_int(book_id))
        if book is not None:
            book.genre_ids.append(_int(genre_id) or OTHER_GENRE_ID)
    for book_id, tag_id in conn.execute(
        "SELECT book_tag.id_book, book_tag.id_tag FROM book_tag"
        " INNER JOIN book ON book.id = book_tag.id_book WHERE book.id_lib = ?",
        (library_id,),
    ):
        book = library.books.get(_int(book_id))
        if book is not None:
            book.tag_ids.append(_int(tag_id))

    library.author_books = {}
    for book_id, author_id in conn.execute(
        "SELECT id_book, id_author FROM book_author WHERE id_lib = ?", (library_id,)
    ):
        book_id, author_id = _int(book_id), _int(author_id)
        if book_id in library.books and author_id in library.authors:
            library.author_books.setdefault(author_id, []).append(book_id)
            library.books[book_id].author_ids.append(author_id)
    for book_id, book in library.books.items():
        if not book.author_ids:
            book.author_ids.append(0)
            library.author_books.setdefault(0, []).append(book_id)


def load_library(conn: sqlite3.Connection, library_id: int, library: Library) -> Library:
    """Fill a library with its series, authors, books, genres, tags and links."""
    if library_id == 0:
        return library
    library.languages = []
    _load_serials(conn, library_id, library)
    _load_authors(conn, library_id, library)
    _load_books(conn, library_id, library)
    _load_book_links(conn, library_id, library)
    library.loaded = True
    return library


def load_genres(conn: sqlite3.Connection) -> dict[int, Genre]:
    """Return the genre tree keyed by genre id."""
    return {
        _int(genre_id): Genre(
            name=_str(name),
            parent_id=_int(parent),
            sort=_int(sort),
            keys=[key for key in _str(keys).split(";") if key],
        )
        for genre_id, name, parent, sort, keys in conn.execute(
            "SELECT id, name, id_parent, sort_index, keys FROM genre"
        )
    }


def delete_tag(conn: sqlite3.Connection, library: Library, tag_id: int) -> None:
    """Remove a tag from a loaded library and from the database."""
    library.remove_tag(tag_id)
    conn.commit()
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("DELETE FROM book_tag WHERE id_tag = ?", (tag_id,))
    conn.execute("DELETE FROM seria_tag WHERE id_tag = ?", (tag_id,))
    conn.execute("DELETE FROM author_tag WHERE id_tag = ?", (tag_id,))
    conn.execute("DELETE FROM tag WHERE id = ?", (tag_id,))
    conn.commit()
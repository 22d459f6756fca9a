"""SQLite storage of the library list and the catalogue schema."""

from __future__ import annotations

import sqlite3
import os

from freelib.models import Library

_SCHEMA = """
CREATE TABLE IF NOT EXISTS lib(
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    path TEXT,
    inpx TEXT,
    version TEXT,
    firstAuthor BOOL DEFAULT 0,
    woDeleted BOOL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS seria(
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    id_lib INTEGER REFERENCES lib(id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS seria_name ON seria(name, id_lib);
CREATE TABLE IF NOT EXISTS author(
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name1 TEXT,
    name2 TEXT,
    name3 TEXT,
    id_lib INTEGER REFERENCES lib(id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS author_lib ON author(id_lib);
CREATE TABLE IF NOT EXISTS book(
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    star INTEGER,
    id_seria INTEGER,
    num_in_seria INTEGER,
    language TEXT,
    file TEXT,
    size INTEGER,
    deleted BOOL,
    date DATE,
    keys TEXT,
    id_inlib INTEGER,
    id_lib INTEGER REFERENCES lib(id) ON DELETE CASCADE,
    format TEXT,
    archive TEXT,
    first_author_id INTEGER
);
CREATE INDEX IF NOT EXISTS book_lib ON book(id_lib);
CREATE INDEX IF NOT EXISTS book_archive ON book(archive);
CREATE TABLE IF NOT EXISTS book_author(
    id_book INTEGER REFERENCES book(id) ON DELETE CASCADE,
    id_author INTEGER REFERENCES author(id) ON DELETE CASCADE,
    id_lib INTEGER REFERENCES lib(id) ON DELETE CASCADE,
    PRIMARY KEY(id_book, id_author)
);
CREATE TABLE IF NOT EXISTS genre(
    id INTEGER PRIMARY KEY,
    name TEXT,
    id_parent INTEGER,
    sort_index INTEGER,
    keys TEXT
);
CREATE TABLE IF NOT EXISTS book_genre(
    id_book INTEGER REFERENCES book(id) ON DELETE CASCADE,
    id_genre INTEGER,
    id_lib INTEGER REFERENCES lib(id) ON DELETE CASCADE,
    PRIMARY KEY(id_book, id_genre)
);
CREATE TABLE IF NOT EXISTS tag(
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT
);
CREATE TABLE IF NOT EXISTS book_tag(
    id_book INTEGER REFERENCES book(id) ON DELETE CASCADE,
    id_tag INTEGER REFERENCES tag(id) ON DELETE CASCADE,
    PRIMARY KEY(id_book, id_tag)
);
CREATE TABLE IF NOT EXISTS seria_tag(
    id_seria INTEGER REFERENCES seria(id) ON DELETE CASCADE,
    id_tag INTEGER REFERENCES tag(id) ON DELETE CASCADE,
    PRIMARY KEY(id_seria, id_tag)
);
CREATE TABLE IF NOT EXISTS author_tag(
    id_author INTEGER REFERENCES author(id) ON DELETE CASCADE,
    id_tag INTEGER REFERENCES tag(id) ON DELETE CASCADE,
    PRIMARY KEY(id_author, id_tag)
);
"""


def open_database(path: str | os.PathLike) -> sqlite3.Connection:
    """Open (creating if needed) a catalogue database with foreign keys enabled."""
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA foreign_keys = ON")
    create_schema(conn)
    return conn


def create_schema(conn: sqlite3.Connection) -> None:
    """Create every catalogue table that does not exist yet."""
    conn.executescript(_SCHEMA)
    conn.commit()


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()


def _flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true")
    return bool(value)


def load_libraries(conn: sqlite3.Connection) -> dict[int, Library]:
    """Return every library keyed by its id, in id order."""
    rows = conn.execute(
        "SELECT id, name, path, inpx, version, firstAuthor, woDeleted FROM lib ORDER BY id"
    )
    return {
        int(row[0]): Library(
            name=_text(row[1]),
            path=_text(row[2]),
            inpx=_text(row[3]),
            version=_text(row[4]),
            first_author_only=_flag(row[5]),
            without_deleted=_flag(row[6]),
        )
        for row in rows
    }


def add_library(conn: sqlite3.Connection, library: Library) -> int:
    """Insert a library and return its new id."""
    cur = conn.execute(
        "INSERT INTO lib(name, path, inpx, firstAuthor, woDeleted) VALUES (?, ?, ?, ?, ?)",
        (library.name, library.path, library.inpx,
         int(library.first_author_only), int(library.without_deleted)),
    )
    conn.commit()
    return int(cur.lastrowid)


def _require(cur: sqlite3.Cursor, conn: sqlite3.Connection, library_id: int) -> None:
    if cur.rowcount == 0:
        conn.rollback()
        raise KeyError(library_id)
    conn.commit()


def update_library(conn: sqlite3.Connection, library_id: int, library: Library) -> None:
    """Store a library's name, paths and options; KeyError if it does not exist."""
    cur = conn.execute(
        "UPDATE lib SET name = ?, path = ?, inpx = ?, firstAuthor = ?, woDeleted = ? WHERE id = ?",
        (library.name, library.path, library.inpx,
         int(library.first_author_only), int(library.without_deleted), library_id),
    )
    _require(cur, conn, library_id)


def set_library_paths(
    conn: sqlite3.Connection,
    library_id: int,
    path: str | None = None,
    inpx: str | None = None,
) -> None:
    """Change a library's books folder and/or index file; None leaves a value as is."""
    if library_id not in {row[0] for row in conn.execute("SELECT id FROM lib WHERE id = ?", (library_id,))}:
        raise KeyError(library_id)
    if path is not None:
        conn.execute("UPDATE lib SET path = ? WHERE id = ?", (path, library_id))
    if inpx is not None:
        conn.execute("UPDATE lib SET inpx = ? WHERE id = ?", (inpx, library_id))
    conn.commit()


def delete_library(conn: sqlite3.Connection, library_id: int) -> None:
    """Delete a library with everything that belongs to it, then compact the file."""
    conn.commit()
    conn.execute("PRAGMA foreign_keys = ON")
    cur = conn.execute("DELETE FROM lib WHERE id = ?", (library_id,))
    _require(cur, conn, library_id)
    conn.execute("VACUUM")


def library_version(conn: sqlite3.Connection, library_id: int) -> str:
    """Return the collection version recorded for a library."""
    row = conn.execute("SELECT version FROM lib WHERE id = ?", (library_id,)).fetchone()
    if row is None:
        raise KeyError(library_id)
    return _text(row[0])
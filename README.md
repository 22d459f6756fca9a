# freelib

freelib is a library for keeping a catalogue of e-book libraries in an SQLite
database. A library record can name an INPX collection index and a books
folder. The package has these parts:

- parsers for INPX index lines and for FB2 and EPUB metadata;
- a writer that adds books, authors, series, genres and tags to the database;
- a loader that reads a whole library back into memory;
- helpers that read book files, extract annotations and covers, and expand
  file-name templates.

It uses only the standard library.

## Installing

```
pip install .
```

To run the tests, install the `test` extra and then run pytest:

```
pip install ".[test]"
pytest
```

## Modules

- `freelib.models`: `Author`, `Book`, `Serial`, `Genre` and `Library`.
  - `parse_author` turns `"Last,First,Middle"` into an `Author`.
  - `Author.display_name` gives `"Last First Middle"`, or `"unknown author"`
    when every name part is empty.
  - `Library.find_author`, `Library.find_serial` and `Library.remove_tag` work
    on a loaded library.
- `freelib.store`: database setup and library records.
  - `open_database` and `create_schema` set up the database.
  - `load_libraries`, `add_library`, `update_library`, `set_library_paths`,
    `delete_library` and `library_version` manage library records.
  - A library id that does not exist raises `KeyError`.
- `freelib.catalog`: writing catalogue rows.
  - `CatalogWriter` adds catalogue rows for one library: `add_book` with a
    `BookRecord`, `add_author`, `add_serial` and `add_genre`. Genres are
    matched through the keys in the `genre` table.
  - `book_exists` and `undelete_book` let you re-scan books that are already
    in the catalogue.
  - `load_tags` and `load_genre_keys` read the lookup tables.
- `freelib.inpx`: INPX index parsing.
  - `parse_structure` reads a `STRUCTURE.INFO` layout into a `FieldLayout`.
  - `parse_record` turns one INP line into an `InpRecord`.
  - `split_tags` resolves colon-separated tag names to tag ids.
  - `is_unknown_author` recognises placeholder author entries.
- `freelib.metadata`: book file metadata.
  - `parse_fb2` and `parse_epub` return a `BookMetadata` with title,
    language, series, authors, genres and ISBN.
  - `parse_fb2_authors` returns the author names exactly as they are written.
  - FB2 input may be truncated.
- `freelib.loader`: reading data back.
  - `load_library` fills a `Library` with its series, authors, books, genres,
    tags and author–book links.
  - `load_genres` returns the genre tree.
  - `delete_tag` removes a tag from memory and from the database.
- `freelib.books`: book files.
  - `read_book_file` returns a `BookFile` from the library folder or from the
    book's zip archive. Pass `with_info=True` to also get the `.fbd` side file.
  - `load_annotation` fills a book's annotation and writes its cover to
    `<image_dir>/<book_id>.jpg`.
  - `name_from_inpx` reads the collection name from `COLLECTION.INFO`.
  - `open_zip_member` reads an archive member and falls back to a
    case-insensitive name match.
- `freelib.templates`: file-name templates.
  - `fill_params` and `fill_params_with_file` expand templates such as
    `%a/[%s/][%n2 ]%b`.
  - A bracketed block is dropped when a placeholder inside it has no value.

## Example

```python
from freelib.catalog import BookRecord, CatalogWriter
from freelib.loader import load_library
from freelib.models import Library, parse_author
from freelib.store import add_library, open_database
from freelib.templates import fill_params

conn = open_database("catalog.db")
library_id = add_library(conn, Library(name="Home", path="/books"))

writer = CatalogWriter(conn, library_id)
serial_id = writer.add_serial("Saga")
book_id = writer.add_book(
    BookRecord(name="Book", file="book", format="fb2",
               serial_id=serial_id, num_in_serial=1)
)
writer.add_author(parse_author("Doe,John"), book_id, first_author=True)
conn.commit()

library = load_library(conn, library_id, Library())
print(fill_params(library, "%a/[%s/][%n2 ]%b", book_id))  # Doe John/Saga/01 Book
```

## What it does not do

- There is no command-line program.
- There is no ready-made import routine that walks an INPX file or a folder of
  books from start to finish. The calling code has to do this:
  1. Read the index or the book files.
  2. Parse them with `freelib.inpx` or `freelib.metadata`.
  3. Write the results with `CatalogWriter`.
  4. Commit the transaction.
- There is no object that manages libraries on the caller's behalf.
- There is no server and no graphical interface.
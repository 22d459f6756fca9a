"""Expansion of file-name templates with book fields.

Placeholders: %a author, %b title, %s series, %nX number in series padded
to X digits, %abbrs series abbreviation, %nl/%nm/%nf last/middle/first name,
%li/%fi/%mi their initials, %f full file path, %fn file name without
extension, %d file directory, %app_dir application directory. Text in
square brackets is dropped when a placeholder inside it has no value.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from freelib.models import Author, Library, Serial


def _default_app_dir() -> str:
    return os.path.dirname(os.path.abspath(sys.argv[0] if sys.argv and sys.argv[0] else "."))


def _matching_bracket(text: str, start: int) -> int | None:
    depth = 0
    for position, char in enumerate(text[start + 1:], start + 1):
        if char == "[":
            depth += 1
        elif char == "]":
            if depth == 0:
                return position
            depth -= 1
    return None


def _initial(name: str) -> str:
    return f"{name[0]}." if name else ""


def fill_params(
    library: Library,
    template: str,
    book_id: int,
    nested: bool = False,
    app_dir: str | None = None,
) -> str:
    """Expand the placeholders of a template for one book of the library."""
    result = template
    position = 0
    while (start := result.find("[", position, max(len(result) - 1, 0))) >= 0:
        end = _matching_bracket(result, start)
        if end is None:
            position = start + 1
            continue
        block = fill_params(library, result[start + 1:end], book_id, True, app_dir)
        result = result[:start] + block + result[end + 1:]
        position = start + len(block)

    book = library.books[book_id]
    author = library.authors.get(book.first_author_id, Author())
    serial = library.serials.get(book.serial_id, Serial())

    if "%s" in result:
        if book.serial_id == 0:
            if nested:
                return ""
            result = result.replace("%s", "")
        else:
            result = result.replace("%s", serial.name)

    found = result.find("%n")
    if found >= 0:
        digit = result[found + 2:found + 3]
        width = int(digit) if digit.isascii() and digit.isdigit() else 0
        if book.num_in_serial == 0:
            if nested:
                return ""
            result = result.replace(f"%n{width}", "")
        else:
            number = str(book.num_in_serial)
            placeholder = f"%n{width}" if width > 0 else "%n"
            padding = "0" * (width - len(number)) if width > 0 else ""
            result = result.replace(placeholder, padding + number)

    if nested:
        checks = (
            (("%fi", "%nf"), author.first_name),
            (("%mi", "%nm"), author.middle_name),
            (("%li", "%nl"), author.last_name),
            (("%s", "%abbrs"), "x" if book.serial_id else ""),
        )
        for placeholders, value in checks:
            if any(p in result for p in placeholders) and not value:
                return ""
        return result

    result = result.replace("%app_dir", (app_dir if app_dir is not None else _default_app_dir()) + "/")
    abbreviation = ""
    if book.serial_id != 0:
        abbreviation = "".join(word[0] for word in serial.name.split(" ") if word)
    replacements = (
        ("%abbrs", abbreviation.lower()),
        ("%fi", _initial(author.first_name)),
        ("%mi", _initial(author.middle_name)),
        ("%li", _initial(author.last_name)),
        ("%nf", author.first_name),
        ("%nm", author.middle_name),
        ("%nl", author.last_name),
        ("%b", book.name),
        ("%a", author.display_name()),
        ("  ", " "),
        ("/ ", "/"),
        ("/.", "/"),
        ("////", "/"),
        ("///", "/"),
        ("//", "/"),
    )
    for placeholder, value in replacements:
        result = result.replace(placeholder, value)
    return result


def fill_params_with_file(
    library: Library,
    template: str,
    book_id: int,
    book_file: str | os.PathLike,
    app_dir: str | None = None,
) -> str:
    """Expand %fn, %f and %d from a book file path, then all the book placeholders."""
    path = Path(book_file).absolute()
    base_name = path.name.rsplit(".", 1)[0] if "." in path.name else path.name
    result = (
        template.replace("%fn", base_name)
        .replace("%f", str(path))
        .replace("%d", str(path.parent))
    )
    return fill_params(library, result, book_id, app_dir=app_dir)
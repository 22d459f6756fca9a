import pytest

from freelib.models import UNKNOWN_AUTHOR, Author, Book, Library, Serial
from freelib.templates import fill_params, fill_params_with_file


@pytest.fixture
def library():
    lib = Library(name="test")
    lib.authors = {
        0: Author(),
        5: Author(first_name="Ivan", last_name="Ivanov", middle_name="Petrovich"),
        6: Author(last_name="Solo"),
    }
    lib.serials = {3: Serial(name="Big Red Dog")}
    lib.books = {
        1: Book(name="Title", serial_id=3, num_in_serial=7, first_author_id=5),
        2: Book(name="Lonely", first_author_id=6),
        4: Book(name="Nobody"),
    }
    return lib


def test_title_and_author(library):
    assert fill_params(library, "%b", 1) == "Title"
    assert fill_params(library, "%a", 1) == Author(
        first_name="Ivan", last_name="Ivanov", middle_name="Petrovich"
    ).display_name()


def test_unknown_author(library):
    assert fill_params(library, "%a", 4) == UNKNOWN_AUTHOR


def test_series_block_kept_when_series_present(library):
    assert fill_params(library, "[%s - ]%b", 1) == "Big Red Dog - Title"


def test_series_block_dropped_without_series(library):
    assert fill_params(library, "[%s - ]%b", 2) == "Lonely"


def test_nested_without_series_is_empty(library):
    assert fill_params(library, "%s", 2, nested=True) == ""


def test_number_padding(library):
    assert fill_params(library, "%n3", 1) == "007"


def test_number_block_dropped_when_zero(library):
    assert fill_params(library, "[%n2 ]%b", 2) == "Lonely"


def test_series_abbreviation(library):
    assert fill_params(library, "%abbrs", 1) == "brd"


def test_initials_block_dropped_for_missing_first_name(library):
    assert fill_params(library, "%nl[ %fi]", 2) == "Solo"


def test_slashes_collapsed(library):
    result = fill_params(library, "a////b///c//%b", 1)
    assert "//" not in result
    assert result.endswith("/Title")


def test_app_dir(library):
    assert fill_params(library, "%app_dir%b", 1, app_dir="/opt/app") == "/opt/app/Title"


def test_unknown_book_raises(library):
    with pytest.raises(KeyError):
        fill_params(library, "%b", 99)


def test_fill_params_with_file(library, tmp_path):
    book_file = tmp_path / "book.fb2"
    assert fill_params_with_file(library, "%fn", 1, book_file) == "book"
    assert fill_params_with_file(library, "%d", 1, book_file) == str(tmp_path)
    assert fill_params_with_file(library, "%f", 1, book_file) == str(book_file)


def test_fill_params_with_file_combines_book_fields(library, tmp_path):
    book_file = tmp_path / "data.epub"
    assert fill_params_with_file(library, "%fn %b", 2, book_file) == "data Lonely"
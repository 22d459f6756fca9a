"""Catalogue e-book libraries (INPX indexes, FB2 and EPUB books) in SQLite."""

__version__ = "0.1.0"

__all__ = [
    "books",
    "catalog",
    "inpx",
    "loader",
    "metadata",
    "models",
    "store",
    "templates",
]
from __future__ import annotations

from typing import Optional

from .history_book import DEFAULT_BOOK_PATH, HistoryBook


def open_book(path: Optional[str] = None) -> HistoryBook:
    """Load the book at ``path``, or the bundled one when no path is given."""
    if not path:
        return HistoryBook.default()
    return HistoryBook.from_json(path)


__all__ = ["DEFAULT_BOOK_PATH", "HistoryBook", "open_book"]

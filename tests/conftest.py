# ABOUTME: Shared pytest fixtures for shelfmark tests.
# ABOUTME: Provides catalog items, sample CSV catalogs, and a mock transport for the book APIs.

from pathlib import Path

import httpx
import pytest

from shelfmark.enrichment.types import CatalogItem
from tests.fixtures.book_api import book_api_handler


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def atomic_habits() -> CatalogItem:
    """A book with a known creator."""
    return CatalogItem(title="Atomic Habits", creator="James Clear")


@pytest.fixture
def seven_books() -> list[CatalogItem]:
    """Seven bare book titles, "Book 1" through "Book 7"."""
    return [CatalogItem(title=f"Book {n}") for n in range(1, 8)]


@pytest.fixture
def catalog_csv(tmp_path: Path) -> Path:
    """A small catalog CSV with title, author, and genre columns."""
    path = tmp_path / "catalog.csv"
    path.write_text(
        "Title,Author,Genre\n"
        "Atomic Habits,James Clear,\n"
        "Dune,Frank Herbert,Science Fiction\n"
        ",Nobody,\n"
        "Solaris,,\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def book_transport() -> httpx.MockTransport:
    """Mock transport answering every book lookup with Atomic Habits data."""
    return httpx.MockTransport(book_api_handler())

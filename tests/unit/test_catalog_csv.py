# ABOUTME: Unit tests for reading catalog CSV files and building engine config from CLI options.
# ABOUTME: Tests column detection, blank-row skipping, and format errors.

from pathlib import Path

import pytest

from shelfmark.cli.commands.batch_cmd import CsvFormatError, read_catalog_csv
from shelfmark.cli.options import build_config


class TestReadCatalogCsv:
    """Tests for read_catalog_csv."""

    def test_reads_rows(self, catalog_csv: Path) -> None:
        items = read_catalog_csv(catalog_csv)

        assert [item.title for item in items] == ["Atomic Habits", "Dune", "Solaris"]
        assert items[0].creator == "James Clear"
        assert items[0].genre is None
        assert items[1].genre == "Science Fiction"
        assert items[2].creator is None

    def test_alternate_creator_column(self, tmp_path: Path) -> None:
        path = tmp_path / "films.csv"
        path.write_text("title,director\nSolaris,Andrei Tarkovsky\n", encoding="utf-8")
        items = read_catalog_csv(path)
        assert items[0].creator == "Andrei Tarkovsky"

    def test_missing_title_column(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.csv"
        path.write_text("name,author\nDune,Frank Herbert\n", encoding="utf-8")
        with pytest.raises(CsvFormatError):
            read_catalog_csv(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(CsvFormatError):
            read_catalog_csv(path)

    def test_byte_order_mark(self, tmp_path: Path) -> None:
        path = tmp_path / "excel.csv"
        path.write_text("Title\nDune\n", encoding="utf-8-sig")
        assert [item.title for item in read_catalog_csv(path)] == ["Dune"]


class TestBuildConfig:
    """Tests for build_config."""

    def test_defaults(self) -> None:
        config = build_config()
        assert config.min_interval == 0.2
        assert config.chunk_size == 3

    def test_overrides(self) -> None:
        config = build_config(min_interval=0.0, chunk_size=5, ratio=2.0)
        assert config.min_interval == 0.0
        assert config.chunk_size == 5
        assert config.policy.ratio == 2.0

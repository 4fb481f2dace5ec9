"""Unit tests for the resume tracker."""
from texocr.resume import determine_start_page, find_page_units, page_unit_name


class TestDetermineStartPage:
    """Test suite for determine_start_page."""

    def test_empty_directory_starts_at_one(self, tmp_path):
        assert determine_start_page(tmp_path) == 1

    def test_missing_directory_starts_at_one(self, tmp_path):
        assert determine_start_page(tmp_path / "does_not_exist") == 1

    def test_main_tex_alone_does_not_count(self, tmp_path):
        """A preamble-only main.tex still means starting at page 1."""
        (tmp_path / "main.tex").write_text("\\documentclass{article}\n")
        assert determine_start_page(tmp_path) == 1

    def test_returns_one_past_highest_page(self, tmp_path):
        for page in (1, 2):
            (tmp_path / page_unit_name(page)).write_text("x")
        assert determine_start_page(tmp_path) == 3

    def test_uses_numeric_maximum_not_listing_order(self, tmp_path):
        """page10 sorts before page9 as text; the numeric maximum must win."""
        for page in (9, 10, 2):
            (tmp_path / page_unit_name(page)).write_text("x")
        assert determine_start_page(tmp_path) == 11

    def test_gap_is_not_backfilled(self, tmp_path):
        for page in (1, 3):
            (tmp_path / page_unit_name(page)).write_text("x")
        assert determine_start_page(tmp_path) == 4


class TestFindPageUnits:
    """Test suite for find_page_units."""

    def test_ignores_unrelated_files(self, tmp_path):
        (tmp_path / "page1.tex").write_text("x")
        (tmp_path / ".page2.tex.tmp").write_text("x")
        (tmp_path / "page.tex").write_text("x")
        (tmp_path / "page3.png").write_text("x")
        (tmp_path / "main.tex").write_text("x")
        (tmp_path / "page4.tex").mkdir()

        units = find_page_units(tmp_path)

        assert list(units) == [1]
        assert units[1] == tmp_path / "page1.tex"

    def test_page_unit_name(self):
        assert page_unit_name(12) == "page12.tex"

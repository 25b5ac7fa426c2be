"""Unit tests for breakpoint token scanning."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from tdb.models.token import BreakpointToken, Direction
from tdb.pipeline.scanner import (
    ScanFileError,
    expand_braces,
    expand_patterns,
    glob_to_regex,
    parse_tokens,
    read_source_file,
    scan,
    scan_with_report,
)


@pytest.fixture
def project(tmp_path):
    """Liten projektkatalog med tvÃ¥ HTML-filer och en JS-fil."""
    src = tmp_path / "src"
    (src / "components").mkdir(parents=True)
    (src / "index.html").write_text(
        '<div class="media-max-768:hidden flex media-min-1024:flex"></div>\n', encoding="utf-8"
    )
    (src / "components" / "nav.html").write_text(
        '<nav class="media-max-768:hidden media-max-768:text-black"></nav>\n', encoding="utf-8"
    )
    (src / "app.js").write_text("el.className = 'media-min-640:w-[50%]';\n", encoding="utf-8")
    return tmp_path


class TestParseTokens:
    """Test the token grammar."""

    def test_parses_direction_pixels_and_utility(self):
        tokens = parse_tokens('class="media-max-1209:text-black"')

        assert tokens == [
            BreakpointToken(Direction.MAX, 1209, "text-black", "media-max-1209:text-black")
        ]

    def test_min_direction(self):
        [token] = parse_tokens("media-min-640:flex")
        assert token.direction is Direction.MIN
        assert token.pixels == 640

    def test_extended_utility_characters(self):
        text = "media-max-500:w-[33.5%] media-min-10:bg-black/50 media-max-1:grid_cols"
        utilities = [t.utility_class for t in parse_tokens(text)]
        assert utilities == ["w-[33.5%]", "bg-black/50", "grid_cols"]

    def test_match_stops_at_quote_and_whitespace(self):
        tokens = parse_tokens("'media-max-768:hidden' media-min-1024:flex\tx")
        assert [t.raw_token for t in tokens] == ["media-max-768:hidden", "media-min-1024:flex"]

    def test_rejects_malformed_tokens(self):
        text = "media-mid-768:hidden media-max-:flex media-max-768: media-max-768hidden"
        assert parse_tokens(text) == []

    def test_repeated_calls_do_not_share_state(self):
        text = "media-max-768:hidden"
        assert len(parse_tokens(text)) == 1
        assert len(parse_tokens(text)) == 1

    def test_pixels_taken_verbatim(self):
        [token] = parse_tokens("media-max-007:hidden")
        assert token.pixels == 7
        assert token.raw_token == "media-max-007:hidden"

    def test_only_ascii_digits_accepted(self):
        assert parse_tokens('<div class="media-max-٧٦٨:hidden">') == []
        assert parse_tokens("media-min-１０:flex") == []


class TestGlobHelpers:
    """Test brace expansion and glob matching."""

    def test_expand_braces(self):
        assert expand_braces("src/**/*.{html,js}") == ["src/**/*.html", "src/**/*.js"]

    def test_expand_nested_braces(self):
        assert expand_braces("{a,b{1,2}}.txt") == ["a.txt", "b1.txt", "b2.txt"]

    def test_expand_braces_without_alternatives(self):
        assert expand_braces("src/{x}.html") == ["src/{x}.html"]

    def test_glob_to_regex_globstar(self):
        regex = glob_to_regex("/p/src/**/*.html")
        assert regex.match("/p/src/index.html")
        assert regex.match("/p/src/a/b/index.html")
        assert not regex.match("/p/src/index.js")

    def test_glob_to_regex_star_stays_in_segment(self):
        regex = glob_to_regex("/p/*.html")
        assert regex.match("/p/a.html")
        assert not regex.match("/p/a/b.html")


class TestExpandPatterns:
    """Test file enumeration."""

    def test_sorted_and_excludes_directories(self, project):
        (project / "src" / "dir.html").mkdir()
        files = expand_patterns(["src/**/*.html"], cwd=project)

        assert files == sorted(files, key=lambda p: p.as_posix())
        assert all(p.is_file() for p in files)
        assert [p.name for p in files] == ["nav.html", "index.html"]

    def test_brace_patterns(self, project):
        files = expand_patterns(["src/*.{html,js}"], cwd=project)
        assert {p.name for p in files} == {"index.html", "app.js"}

    def test_negated_patterns_exclude(self, project):
        files = expand_patterns(["src/**/*.html", "!src/components/**"], cwd=project)
        assert [p.name for p in files] == ["index.html"]

    def test_duplicates_removed(self, project):
        files = expand_patterns(["src/*.html", "src/index.html"], cwd=project)
        assert len(files) == 1

    def test_glob_characters_in_project_path(self, tmp_path):
        site = tmp_path / "site[1]"
        (site / "src").mkdir(parents=True)
        (site / "src" / "a.html").write_text("x", encoding="utf-8")
        (site / "src" / "skip.html").write_text("x", encoding="utf-8")

        files = expand_patterns(["src/*.html", "!src/skip.html"], cwd=site)

        assert [p.name for p in files] == ["a.html"]

    def test_dot_relative_and_parent_patterns(self, project):
        files = expand_patterns(["./src/*.html", "!../*/src/index.html"], cwd=project)
        assert files == []


class TestScan:
    """Test scan() across files."""

    def test_dedup_across_files(self, project):
        tokens = scan(["src/**/*.html"], cwd=project)

        assert list(tokens) == [
            "media-max-768:hidden",
            "media-max-768:text-black",
            "media-min-1024:flex",
        ]

    def test_single_string_pattern(self, project):
        tokens = scan("src/*.js", cwd=project)
        assert list(tokens) == ["media-min-640:w-[50%]"]

    def test_first_occurrence_wins(self, project):
        tokens = scan(["src/**/*.html"], cwd=project)
        token = tokens["media-max-768:hidden"]
        assert token.utility_class == "hidden"

    def test_scan_is_deterministic(self, project):
        first = scan(["src/**/*"], cwd=project)
        second = scan(["src/**/*"], cwd=project)
        assert list(first.items()) == list(second.items())

    def test_empty_patterns_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            tokens = scan([])
        assert tokens == {}
        assert "No content paths" in caplog.text

    def test_none_patterns_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert scan(None) == {}
        assert "No content paths" in caplog.text

    def test_raw_sources_scanned(self, project):
        tokens = scan(["src/*.js"], raw_sources=['<p class="media-max-320:hidden">'], cwd=project)
        assert list(tokens) == ["media-min-640:w-[50%]", "media-max-320:hidden"]

    def test_undecodable_file_skipped(self, project, caplog):
        bad = project / "src" / "bad.html"
        bad.write_bytes(b"\xff\xfe media-max-1:hidden \x80")

        with caplog.at_level(logging.WARNING):
            report = scan_with_report(["src/**/*.html"], cwd=project)

        assert report.skipped == [bad]
        assert "media-min-1024:flex" in report.tokens
        assert str(bad) in caplog.text

    def test_unreadable_file_does_not_abort_scan(self, project):
        real_read = read_source_file

        def flaky(path):
            if path.name == "index.html":
                raise ScanFileError(f"Could not read file {path}: permission denied")
            return real_read(path)

        with patch("tdb.pipeline.scanner.read_source_file", side_effect=flaky):
            report = scan_with_report(["src/**/*.html"], cwd=project)

        assert [p.name for p in report.skipped] == ["index.html"]
        assert list(report.tokens) == ["media-max-768:hidden", "media-max-768:text-black"]


def test_read_source_file_missing(tmp_path):
    with pytest.raises(ScanFileError):
        read_source_file(tmp_path / "missing.html")


def test_token_constructed_with_negative_pixels_rejected():
    with pytest.raises(ValueError, match="non-negative"):
        BreakpointToken(Direction.MAX, -1, "hidden", "media-max--1:hidden")

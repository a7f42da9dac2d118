"""Tests for the Source enum and title formatting."""

from __future__ import annotations

import pytest

from papershelf.errors import InvalidSourceError
from papershelf.paper import Source, format_title


class TestSource:
    @pytest.mark.parametrize("source", list(Source))
    def test_round_trip(self, source):
        assert Source.parse(str(source)) is source

    def test_canonical_strings(self):
        assert [str(s) for s in Source] == ["Arxiv", "IACR", "DOI"]

    @pytest.mark.parametrize("value", ["arxiv", "ARXIV", "iacr", "Doi"])
    def test_parse_is_case_insensitive(self, value):
        assert Source.parse(value).value.lower() == value.lower()

    @pytest.mark.parametrize("value", ["pubmed", "", "arxiv.org"])
    def test_unknown_source(self, value):
        with pytest.raises(InvalidSourceError) as exc_info:
            Source.parse(value)
        assert exc_info.value.value == value


class TestFormatTitle:
    def test_basic(self):
        assert format_title("Hello World") == "hello_world"
        assert format_title("short") == "short"
        assert format_title("UPPERCASE TEXT") == "uppercase_text"

    def test_collapses_whitespace(self):
        assert format_title("No    Extra    Spaces") == "no_extra_spaces"

    def test_truncates_at_word_boundary(self):
        title = "This Is A Very Long Title Indeed"
        assert format_title(title) == "this_is_a_very_long_title_indeed"
        assert format_title(title, 20) == "this_is_a_very_long"
        assert format_title(title, 30) == "this_is_a_very_long_title"

    def test_default_length(self):
        long_title = "word " * 30
        assert len(format_title(long_title)) <= 50

    def test_strips_path_characters(self):
        assert format_title("A/B Testing: Results?") == "a_b_testing_results"
        assert format_title("../../etc/passwd") == "etc_passwd"
        assert format_title("On x.509 and TLS-1.3") == "on_x.509_and_tls-1.3"

    def test_long_first_word_is_cut(self):
        word = "pneumonoultramicroscopicsilicovolcanoconiosis" * 2
        assert format_title(f"{word} study", 20) == word[:20]
        assert format_title("...") == ""

"""Tests for export text repair and truncation."""

import json
import logging

import pytest

from ig_migrate.text import decode, decode_text, truncate


def mis_encode(text: str) -> str:
    """Reproduce the export's encoding: one character per UTF-8 byte."""
    return text.encode("utf-8").decode("latin-1")


class TestDecodeText:
    """Tests for decode_text."""

    def test_plain_ascii_unchanged(self):
        assert decode_text("Garden update") == "Garden update"

    def test_repairs_emoji(self):
        assert decode_text(mis_encode("Sunset \U0001F305")) == "Sunset \U0001F305"

    def test_repairs_accented_characters(self):
        assert decode_text(mis_encode("Café in München")) == "Café in München"

    def test_repairs_text_parsed_from_export_json(self):
        """The export escapes every byte as \\u00XX."""
        raw = '{"title": "\\u00f0\\u009f\\u0098\\u008d love it"}'
        parsed = json.loads(raw)

        assert decode_text(parsed["title"]) == "\U0001F60D love it"

    def test_repairs_literal_escape_sequences(self):
        """Escapes that survived parsing are read as byte values."""
        assert decode_text("\\u00f0\\u009f\\u0098\\u008d") == "\U0001F60D"

    def test_mixed_literal_escapes_and_characters(self):
        assert decode_text("hi \\u00c3\\u00a9") == "hi é"

    def test_idempotent_on_repaired_text(self):
        repaired = decode_text(mis_encode("Beach day \U0001F3D6 and more"))

        assert decode_text(repaired) == repaired

    def test_correct_latin1_text_left_alone(self, caplog):
        """Text that is not a valid UTF-8 byte sequence is returned unchanged."""
        with caplog.at_level(logging.DEBUG, logger="ig_migrate.text"):
            assert decode_text("café") == "café"

        assert "Leaving text undecoded" in caplog.text

    def test_latin1_text_forming_valid_utf8_is_redecoded(self):
        assert decode_text("Â£") == "£"

    def test_escape_above_byte_range_returns_original(self):
        text = "snowman \\u2603"

        assert decode_text(text) == text

    def test_malformed_escape_returns_original(self):
        text = "broken \\u00zz escape"

        assert decode_text(text) == text

    def test_empty_string(self):
        assert decode_text("") == ""


class TestDecode:
    """Tests for recursive decode."""

    def test_decodes_nested_structures(self):
        value = {
            "title": mis_encode("Hello \U0001F44B"),
            "media": [
                {"uri": "media/a.jpg", "title": mis_encode("Größe")},
                {"uri": "media/b.jpg", "creation_timestamp": 1700000000},
            ],
        }

        result = decode(value)

        assert result["title"] == "Hello \U0001F44B"
        assert result["media"][0]["title"] == "Größe"
        assert result["media"][1] == {"uri": "media/b.jpg", "creation_timestamp": 1700000000}

    def test_preserves_list_order(self):
        assert decode(["b", "a", "c"]) == ["b", "a", "c"]

    def test_preserves_tuple_type(self):
        assert decode(("a", mis_encode("é"))) == ("a", "é")

    @pytest.mark.parametrize("value", [None, 42, 3.5, True])
    def test_non_text_values_pass_through(self, value):
        assert decode(value) is value

    def test_never_raises(self, caplog):
        class Exploding(dict):
            def items(self):
                raise RuntimeError("boom")

        value = Exploding(a="b")

        assert decode(value) is value
        assert "Error decoding UTF-8 data" in caplog.text


class TestTruncate:
    """Tests for truncate."""

    def test_short_text_unchanged(self):
        assert truncate("short") == "short"

    def test_text_at_limit_unchanged(self):
        text = "x" * 300

        assert truncate(text) == text

    @pytest.mark.parametrize("length", [301, 302, 500, 5000])
    def test_long_text_is_exactly_limit_with_ellipsis(self, length):
        result = truncate("y" * length)

        assert len(result) == 300
        assert result.endswith("...")
        assert result[:297] == "y" * 297

    def test_custom_limit(self):
        assert truncate("abcdefghij", limit=8) == "abcde..."

    def test_limit_smaller_than_suffix(self):
        assert truncate("abcdef", limit=2) == ".."

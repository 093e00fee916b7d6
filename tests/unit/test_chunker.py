"""
Unit tests for the message chunker
"""

import re

import pytest

from term_relay.output_handling.chunker import split_by_lines, keep_tail


def _non_whitespace(text: str) -> str:
    return re.sub(r'\s', '', text)


class TestSplitByLines:
    """Test cases for split_by_lines"""

    def test_fits_in_one_piece(self):
        assert split_by_lines("abc", 3) == ["abc"]

    def test_split_when_over_limit(self):
        assert split_by_lines("abc", 2) == ["ab", "c"]

    def test_single_piece_is_trimmed(self):
        assert split_by_lines("\n  hello world \n\n", 100) == ["hello world"]

    @pytest.mark.parametrize("limit", [0, -1, -100])
    def test_non_positive_limit_rejected(self, limit):
        with pytest.raises(ValueError, match="limit must be positive"):
            split_by_lines("some text", limit)

    def test_breaks_on_line_boundaries(self):
        text = "aaaa\nbbbb\ncccc"
        assert split_by_lines(text, 10) == ["aaaa\nbbbb", "cccc"]

    def test_hard_cut_without_line_break(self):
        assert split_by_lines("x" * 25, 10) == ["x" * 10, "x" * 10, "x" * 5]

    def test_long_line_between_short_lines(self):
        text = "short\n" + "y" * 12 + "\nend"
        pieces = split_by_lines(text, 8)
        assert pieces == ["short", "y" * 8, "yyyy\nend"]

    def test_counts_characters_not_bytes(self):
        pieces = split_by_lines("é" * 5, 2)
        assert pieces == ["éé", "éé", "é"]

    def test_whitespace_only_text_gives_one_empty_piece(self):
        assert split_by_lines(" " * 50, 10) == [""]
        assert split_by_lines("", 10) == [""]

    def test_pieces_within_limit_and_content_preserved(self):
        lines = [f"line {i} " + "z" * (i * 7 % 45) for i in range(200)]
        text = "\n".join(lines)
        limit = 100

        pieces = split_by_lines(text, limit)

        assert len(pieces) > 1
        assert all(0 < len(piece) <= limit for piece in pieces)
        assert _non_whitespace("".join(pieces)) == _non_whitespace(text)

    def test_output_sized_for_two_messages(self):
        pieces = split_by_lines("x" * 5000, 3992)
        assert [len(piece) for piece in pieces] == [3992, 1008]
        assert "".join(pieces) == "x" * 5000


class TestKeepTail:
    """Test cases for the live preview truncation"""

    def test_short_text_kept(self):
        assert keep_tail("abc", 5) == "abc"
        assert keep_tail("abc", 3) == "abc"

    def test_keeps_last_characters(self):
        assert keep_tail("abcdef", 3) == "def"

    def test_exact_boundary(self):
        text = "0123456789"
        for size in range(1, len(text) + 1):
            kept = keep_tail(text, size)
            assert len(kept) == size
            assert text.endswith(kept)

    def test_non_positive_keeps_nothing(self):
        assert keep_tail("abc", 0) == ""
        assert keep_tail("abc", -2) == ""


if __name__ == "__main__":
    pytest.main([__file__])

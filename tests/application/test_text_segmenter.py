"""Unit tests for the text segmenter."""
from __future__ import annotations

import unittest

from voxforge.application.text_segmenter import find_break_index, segment


def _non_whitespace(text: str) -> str:
    return "".join(text.split())


class TestSegment(unittest.TestCase):
    """Test cases for segment()."""

    def test_empty_input_yields_no_chunks(self):
        """Test that empty and whitespace-only input short-circuits."""
        self.assertEqual(segment("", 100), [])
        self.assertEqual(segment("  \n\t ", 100), [])

    def test_short_input_is_single_trimmed_chunk(self):
        """Test that text shorter than the chunk size becomes one chunk."""
        chunks = segment("  Hello there.  ", 100)

        self.assertEqual(len(chunks), 1)
        self.assertEqual(chunks[0].index, 0)
        self.assertEqual(chunks[0].text, "Hello there.")

    def test_invalid_chunk_size_raises(self):
        """Test that a non-positive chunk size is rejected."""
        with self.assertRaises(ValueError):
            segment("abc", 0)

    def test_seven_thousand_chars_into_three_chunks(self):
        """Test the 7000-character / 3000 chunk size scenario."""
        sentence = "The quick brown fox jumps over the lazy dog. "
        text = (sentence * (7000 // len(sentence) + 1))[:7000]

        chunks = segment(text, 3000)

        self.assertEqual(len(chunks), 3)
        for chunk in chunks:
            self.assertLessEqual(len(chunk.text), 3000)
        self.assertTrue(chunks[0].text.endswith("."))
        self.assertTrue(chunks[1].text.endswith("."))
        self.assertEqual([chunk.index for chunk in chunks], [0, 1, 2])

    def test_preserves_all_non_whitespace_content_in_order(self):
        """Test that chunking never drops or reorders content."""
        text = (
            "First paragraph line one.\nLine two, with a comma!\n\n"
            "Second paragraph? Yes. " * 40
            + "Trailing words without punctuation " * 10
        )

        for size in (7, 31, 64, 200, 1000):
            chunks = segment(text, size)
            joined = "".join(chunk.text for chunk in chunks)
            self.assertEqual(_non_whitespace(joined), _non_whitespace(text))
            for chunk in chunks:
                self.assertTrue(chunk.text)
                self.assertEqual(chunk.text, chunk.text.strip())
                self.assertLessEqual(len(chunk.text), size)

    def test_paragraph_break_beats_sentence_end(self):
        """Test that a late paragraph break wins over later punctuation."""
        text = "a" * 60 + "\n\n" + "b. " * 10 + "c" * 100

        chunks = segment(text, 100)

        self.assertEqual(chunks[0].text, "a" * 60)

    def test_breakpoint_in_first_half_is_ignored(self):
        """Test that early breakpoints lead to a hard cut at the chunk size."""
        text = "ab. " + "x" * 200

        chunks = segment(text, 100)

        self.assertEqual(chunks[0].text, ("ab. " + "x" * 200)[:100])
        self.assertEqual(len(chunks[0].text), 100)

    def test_hard_cut_without_breakpoints(self):
        """Test mid-word cuts when no breakpoint exists."""
        chunks = segment("x" * 250, 100)

        self.assertEqual([len(chunk.text) for chunk in chunks], [100, 100, 50])

    def test_multiscript_sentence_enders(self):
        """Test that CJK and Myanmar full stops are used as breakpoints."""
        cjk = "漢" * 70 + "。" + "字" * 60
        self.assertEqual(segment(cjk, 100)[0].text, "漢" * 70 + "。")

        myanmar = "က" * 70 + "။" + "ခ" * 60
        self.assertEqual(segment(myanmar, 100)[0].text, "က" * 70 + "။")


class TestFindBreakIndex(unittest.TestCase):
    """Test cases for find_break_index()."""

    def test_cuts_after_marker(self):
        """Test that the cut lands right after the marker."""
        window = "x" * 70 + ". " + "y" * 28
        self.assertEqual(find_break_index(window, 100), 71)

    def test_marker_must_be_strictly_past_half(self):
        """Test that a marker exactly at the halfway mark does not count."""
        window = "x" * 50 + "," + "y" * 49
        self.assertEqual(find_break_index(window, 100), 100)

        window = "x" * 51 + "," + "y" * 48
        self.assertEqual(find_break_index(window, 100), 52)


if __name__ == "__main__":
    unittest.main()

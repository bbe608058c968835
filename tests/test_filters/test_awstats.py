"""Unit tests for the AWStats data file adapter.

Tests cover:
- Format detection
- Referrer extraction from the pagerefs section
- Section rebuild with the retained count
- Map section removal
- Files without a pagerefs section
"""

import io
import unittest

from referrercop.filters.adapters.awstats import AWStatsAdapter


HEADER = "AWSTATS DATA FILE 7.8 (build 20200416)\n# If you remove this file, all statistics for date 202410 will be lost/reset.\n"

MAP_SECTION = (
    "BEGIN_MAP 3\n"
    "POS_GENERAL 2045\n"
    "POS_PAGEREFS 4100\n"
    "POS_TIME 5120\n"
    "END_MAP\n"
)

GENERAL_SECTION = (
    "BEGIN_GENERAL 2\n"
    "LastLine 20241031235959 1200 0 0\n"
    "TotalVisits 340\n"
    "END_GENERAL\n"
)

PAGEREFS_SECTION = (
    "BEGIN_PAGEREFS 3\n"
    "http://example.com/page 12 10\n"
    "http://spam.example/casino 4 4\n"
    "http://other.org/ 1 1\n"
    "END_PAGEREFS\n"
)

TIME_SECTION = (
    "BEGIN_TIME 1\n"
    "0 10 20 3000 0 0 0\n"
    "END_TIME\n"
)


def is_spam(url):
    return "spam.example" in url


class TestAWStatsSniff(unittest.TestCase):
    """Test format detection."""

    def test_sniff_accepts_data_file(self):
        """Test that the data file signature is recognized."""
        stream = io.StringIO(HEADER + PAGEREFS_SECTION)
        self.assertTrue(AWStatsAdapter.sniff_applicable(stream))
        self.assertEqual(stream.tell(), 0)

    def test_sniff_rejects_other_input(self):
        """Test that other inputs are rejected."""
        self.assertFalse(AWStatsAdapter.sniff_applicable(io.StringIO("http://a.com/\n")))
        self.assertFalse(AWStatsAdapter.sniff_applicable(io.StringIO(PAGEREFS_SECTION)))


class TestAWStatsAdapter(unittest.TestCase):
    """Test extraction and rewriting of data files."""

    def setUp(self):
        """Set up a data file with map, general, pagerefs and time sections."""
        self.document = HEADER + MAP_SECTION + GENERAL_SECTION + PAGEREFS_SECTION + TIME_SECTION
        self.adapter = AWStatsAdapter(io.StringIO(self.document))

    def test_extract_candidates(self):
        """Test that referrer URLs come from the pagerefs section only."""
        self.assertEqual(
            list(self.adapter.extract_candidates()),
            [
                "http://example.com/page",
                "http://spam.example/casino",
                "http://other.org/",
            ],
        )

    def test_rewrite_removes_one_spam_referrer(self):
        """Test that one spam line among three leaves a count of two."""
        output = io.StringIO()
        stats = self.adapter.classify_and_rewrite(output, is_spam)

        expected = (
            HEADER
            + GENERAL_SECTION
            + "BEGIN_PAGEREFS 2\n"
            "http://example.com/page 12 10\n"
            "http://other.org/ 1 1\n"
            "END_PAGEREFS\n"
            + TIME_SECTION
        )
        self.assertEqual(output.getvalue(), expected)
        self.assertEqual(stats.processed, 3)
        self.assertEqual(stats.spam, 1)
        self.assertEqual(stats.ham, 2)
        self.assertEqual(stats.invalid, 0)

    def test_rewrite_without_spam_round_trips(self):
        """Test that a spam-free file is reproduced apart from the map."""
        output = io.StringIO()
        stats = self.adapter.classify_and_rewrite(output, lambda url: False)

        self.assertEqual(
            output.getvalue(),
            HEADER + GENERAL_SECTION + PAGEREFS_SECTION + TIME_SECTION,
        )
        self.assertIn("BEGIN_PAGEREFS 3\n", output.getvalue())
        self.assertEqual(stats.ham, 3)

    def test_rewrite_removes_map_section(self):
        """Test that the map section is absent from rewritten output."""
        output = io.StringIO()
        self.adapter.classify_and_rewrite(output, is_spam)

        self.assertNotIn("BEGIN_MAP", output.getvalue())
        self.assertNotIn("POS_GENERAL", output.getvalue())
        self.assertNotIn("END_MAP", output.getvalue())

    def test_rewrite_all_spam(self):
        """Test that an emptied section keeps its header and footer."""
        output = io.StringIO()
        self.adapter.classify_and_rewrite(output, lambda url: True)

        self.assertIn("BEGIN_PAGEREFS 0\nEND_PAGEREFS\n", output.getvalue())

    def test_non_url_referrer_lines_are_kept(self):
        """Test that malformed referrer lines pass through as invalid."""
        document = HEADER + (
            "BEGIN_PAGEREFS 2\n"
            "not-a-url 3 3\n"
            "http://spam.example/ 1 1\n"
            "END_PAGEREFS\n"
        )
        output = io.StringIO()
        stats = AWStatsAdapter(io.StringIO(document)).classify_and_rewrite(output, is_spam)

        self.assertIn("BEGIN_PAGEREFS 1\nnot-a-url 3 3\nEND_PAGEREFS\n", output.getvalue())
        self.assertEqual(stats.invalid, 1)
        self.assertEqual(stats.spam, 1)

    def test_rewrite_is_idempotent(self):
        """Test that rewriting twice gives identical output."""
        first = io.StringIO()
        second = io.StringIO()
        self.adapter.classify_and_rewrite(first, lambda url: False)
        self.adapter.classify_and_rewrite(second, lambda url: False)

        self.assertEqual(first.getvalue(), second.getvalue())

    def test_missing_pagerefs_section(self):
        """Test that a file without pagerefs is written through unchanged."""
        document = HEADER + GENERAL_SECTION
        adapter = AWStatsAdapter(io.StringIO(document))
        output = io.StringIO()

        with self.assertLogs("referrercop", level="WARNING"):
            stats = adapter.classify_and_rewrite(output, is_spam)

        self.assertEqual(output.getvalue(), document)
        self.assertEqual(stats.processed, 0)
        self.assertEqual(list(adapter.extract_candidates()), [])


if __name__ == "__main__":
    unittest.main()

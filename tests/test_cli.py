"""Tests for the command-line interface.

Commands are invoked through typer's CliRunner against temporary list
and config files.
"""

import gzip
import hashlib
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import httpx
from typer.testing import CliRunner

from referrercop import cli
from referrercop.cli import app
from referrercop.update.updater import BlacklistUpdater


URL_LIST = "http://badsite.com/x\nhttp://good.com/spam/page\nhttp://good.com/ok\n"


class TestCLI(unittest.TestCase):
    """Test suite for the referrercop command."""

    def setUp(self):
        """Write lists and a config file pointing at them."""
        self.runner = CliRunner()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

        self.blacklist = self.root / "blacklist.refcop"
        self.blacklist.write_text("badsite.com\n/\\/spam\\//\n", encoding="utf-8")
        self.whitelist = self.root / "whitelist.refcop"
        self.whitelist.write_text("friend.org\n", encoding="utf-8")

        self.config = self.root / "referrercop.yaml"
        self.config.write_text(
            f"blacklist_file: {self.blacklist}\n"
            f"whitelist_file: {self.whitelist}\n"
            "cache_path: null\n"
            "update_url: http://lists.example/list.gz\n"
            "update_sha1_url: http://lists.example/list.sha1\n",
            encoding="utf-8",
        )

    def tearDown(self):
        """Clean up temporary files."""
        self.temp_dir.cleanup()

    def invoke(self, *args, **kwargs):
        return self.runner.invoke(app, ["--config", str(self.config), *args], **kwargs)

    def test_version(self):
        """Test version output."""
        result = self.runner.invoke(app, ["version"])

        self.assertEqual(result.exit_code, 0)
        self.assertIn(cli.__version__, result.stdout)

    def test_filter_stdin(self):
        """Test filtering standard input."""
        result = self.invoke("filter", input=URL_LIST)

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.stdout, "http://good.com/ok\n")

    def test_default_mode_filters_stdin(self):
        """Test that running without a command filters standard input."""
        result = self.invoke(input=URL_LIST)

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.stdout, "http://good.com/ok\n")

    def test_filter_files(self):
        """Test filtering several files to stdout."""
        first = self.root / "a.txt"
        second = self.root / "b.txt"
        first.write_text("http://badsite.com/\nhttp://one.net/\n")
        second.write_text("http://two.net/\n")

        result = self.invoke("filter", str(first), str(second))

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.stdout, "http://one.net/\nhttp://two.net/\n")

    def test_filter_verbose_reports_statistics(self):
        """Test that verbose mode prints statistics."""
        result = self.invoke("--verbose", "filter", input=URL_LIST)

        self.assertEqual(result.exit_code, 0)
        self.assertIn("Processed 3 lines in", result.output)
        self.assertIn("lines per second", result.output)
        self.assertIn("1 ham, 2 spam, 0 invalid", result.output)

    def test_in_place(self):
        """Test in-place filtering keeps a backup."""
        path = self.root / "urls.txt"
        path.write_text(URL_LIST)

        result = self.invoke("in-place", str(path))

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(path.read_text(), "http://good.com/ok\n")
        self.assertEqual((self.root / "urls.txt.bak").read_text(), URL_LIST)

    def test_in_place_requires_files(self):
        """Test that in-place mode needs at least one file."""
        result = self.invoke("in-place")
        self.assertNotEqual(result.exit_code, 0)

    def test_extract_spam(self):
        """Test extracting sorted spam URLs."""
        path = self.root / "urls.txt"
        path.write_text(URL_LIST + "http://badsite.com/x\n")

        result = self.invoke("extract-spam", str(path))

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.stdout, "http://badsite.com/x\nhttp://good.com/spam/page\n")

    def test_extract_ham_stdin(self):
        """Test extracting ham URLs from standard input."""
        result = self.invoke("extract-ham", input="http://b.org/\nhttp://a.org/\nhttp://b.org/\n")

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.stdout, "http://a.org/\nhttp://b.org/\n")

    def test_filter_stdin_keeps_undecodable_bytes(self):
        """Test that non-UTF-8 input bytes reach stdout unchanged."""
        result = self.invoke("filter", input=b"http://ok.net/caf\xe9\nhttp://badsite.com/\n")

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.stdout_bytes, b"http://ok.net/caf\xe9\n")

    def test_extract_ham_keeps_undecodable_bytes(self):
        """Test that extracted URLs keep non-UTF-8 bytes from files."""
        path = self.root / "urls.txt"
        path.write_bytes(b"http://ok.net/caf\xe9\nhttp://badsite.com/\n")

        result = self.invoke("extract-ham", str(path))

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(result.stdout_bytes, b"http://ok.net/caf\xe9\n")

    def test_test_url(self):
        """Test single URL classification."""
        spam = self.invoke("test-url", "http://www.badsite.com/")
        ham = self.invoke("test-url", "http://friend.org/spam/")

        self.assertEqual(spam.stdout.strip(), "Spam")
        self.assertEqual(ham.stdout.strip(), "Ham")

    def test_blacklist_override(self):
        """Test that --blacklist replaces the configured list."""
        other = self.root / "other.refcop"
        other.write_text("good.com\n")

        result = self.invoke("--blacklist", str(other), "test-url", "http://good.com/ok")

        self.assertEqual(result.stdout.strip(), "Spam")

    def test_missing_blacklist_fails(self):
        """Test that a missing blacklist is reported with exit code 1."""
        result = self.invoke("--blacklist", str(self.root / "missing"), "filter", input=URL_LIST)

        self.assertEqual(result.exit_code, 1)
        self.assertIn("File not found", result.output)

    def test_invalid_config_fails(self):
        """Test that a broken config file is reported with exit code 1."""
        self.config.write_text("blacklist: nope\n")

        result = self.invoke("test-url", "http://a.com/")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("unknown keys", result.output)

    def test_invalid_list_fails(self):
        """Test that a list parse error is reported with exit code 1."""
        self.blacklist.write_text("ok.com\n/bad(/\n")

        result = self.invoke("test-url", "http://a.com/")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("line 2", result.output)

    def test_update(self):
        """Test that update downloads a changed blacklist."""
        new_list = b"badsite.com\nnewspam.com\n"

        def handler(request):
            if request.url.path.endswith(".sha1"):
                return httpx.Response(200, text=hashlib.sha1(new_list).hexdigest())
            return httpx.Response(200, content=gzip.compress(new_list))

        client = httpx.Client(transport=httpx.MockTransport(handler))
        self.addCleanup(client.close)

        def make_updater(update_url, sha1_url):
            return BlacklistUpdater(update_url, sha1_url, client=client)

        with mock.patch.object(cli, "BlacklistUpdater", side_effect=make_updater):
            result = self.invoke("update")

        self.assertEqual(result.exit_code, 0)
        self.assertEqual(self.blacklist.read_bytes(), new_list)

    def test_update_server_error(self):
        """Test that update failures exit with code 1."""
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
        self.addCleanup(client.close)

        def make_updater(update_url, sha1_url):
            return BlacklistUpdater(update_url, sha1_url, client=client)

        with mock.patch.object(cli, "BlacklistUpdater", side_effect=make_updater):
            result = self.invoke("update")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error", result.output)


if __name__ == "__main__":
    unittest.main()

"""Filtering pipeline for ReferrerCop.

This module provides the FilterPipeline class that ties the classifier to
the format adapters and implements the run modes: filtering a stream,
filtering files in place, extracting ham or spam URLs, and testing a single
URL.
"""

import io
import logging
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Optional, TextIO

from referrercop.classifier.classifier import Classifier
from referrercop.core.constants import BACKUP_SUFFIX, UrlKind
from referrercop.core.models import FilterStats, Settings
from referrercop.filters.dispatcher import select_filter


logger = logging.getLogger(__name__)


def ensure_seekable(stream: TextIO) -> TextIO:
    """Return the stream itself if seekable, else an in-memory copy."""
    if stream.seekable():
        return stream
    return io.StringIO(stream.read())


def open_input(path: Path) -> TextIO:
    """Open an input file for filtering.

    Bytes that are not valid UTF-8 are carried as surrogate escapes, so a
    stream written with the same error handler reproduces them exactly.
    """
    return path.open("r", encoding="utf-8", errors="surrogateescape")


class FilterPipeline:
    """Run spam filtering over inputs with one shared classifier.

    Statistics of every filter pass are accumulated in ``totals``.

    Example:
        >>> pipeline = FilterPipeline.from_settings(load_settings())
        >>> with open("access.log") as f:
        ...     stats = pipeline.filter_stream(f, sys.stdout)
    """

    def __init__(self, classifier: Classifier):
        """Initialize pipeline.

        Args:
            classifier: Classifier used for every input
        """
        self.classifier = classifier
        self.totals = FilterStats()

    @classmethod
    def from_settings(cls, settings: Settings) -> "FilterPipeline":
        """Build a pipeline from the lists named in the settings."""
        return cls(Classifier.from_settings(settings))

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def filter_stream(self, input_stream: TextIO, output: TextIO) -> FilterStats:
        """Filter one input, writing only ham to output.

        Args:
            input_stream: Input in any supported format
            output: Text stream receiving the filtered input

        Returns:
            Statistics for this input

        Raises:
            NoApplicableFormatError: If no adapter accepts the input
        """
        adapter = select_filter(ensure_seekable(input_stream))
        stats = adapter.classify_and_rewrite(output, self.classifier.is_spam)
        self.totals = self.totals.combine(stats)
        return stats

    def filter_file(self, path: Path, output: TextIO) -> FilterStats:
        """Filter a file, writing only ham to output."""
        logger.info(f"Filtering {path}")
        with open_input(path) as input_stream:
            return self.filter_stream(input_stream, output)

    def filter_file_in_place(
        self,
        path: Path,
        backup_suffix: str = BACKUP_SUFFIX,
    ) -> FilterStats:
        """Replace a file with its filtered version, keeping a backup.

        The filtered result is written to a temporary file next to ``path``.
        Only after the pass succeeds is the original moved to
        ``<path><backup_suffix>`` (replacing any older backup) and the
        temporary file renamed to ``path``. A failed pass leaves the
        original untouched.

        Args:
            path: File to filter
            backup_suffix: Suffix of the backup file

        Returns:
            Statistics for this file
        """
        logger.info(f"Filtering {path} in place")
        backup = path.with_name(path.name + backup_suffix)
        tmp_path: Optional[Path] = None

        try:
            with open_input(path) as input_stream, tempfile.NamedTemporaryFile(
                "w",
                delete=False,
                dir=path.parent,
                prefix=f".{path.name}-",
                encoding="utf-8",
                errors="surrogateescape",
                newline="",
            ) as output:
                tmp_path = Path(output.name)
                stats = self.filter_stream(input_stream, output)

            shutil.copymode(path, tmp_path)
            shutil.move(str(path), str(backup))
            tmp_path.replace(path)
        except BaseException:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise

        return stats

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract(self, input_stream: TextIO, kind: UrlKind) -> list[str]:
        """Extract ham or spam URLs from one input.

        Args:
            input_stream: Input in any supported format
            kind: Which class of URL to keep

        Returns:
            Unique URLs in first-seen order
        """
        adapter = select_filter(ensure_seekable(input_stream))
        want_spam = kind == UrlKind.SPAM

        seen: dict[str, None] = {}
        for url in adapter.extract_candidates():
            if url and self.classifier.is_spam(url) == want_spam:
                seen.setdefault(url, None)
        return list(seen)

    def extract_files(self, paths: Iterable[Path], kind: UrlKind) -> list[str]:
        """Extract URLs from several files.

        Returns:
            Sorted unique URLs across all files
        """
        extracted: set[str] = set()
        for path in paths:
            logger.info(f"Extracting URLs from {path}")
            with open_input(path) as input_stream:
                extracted.update(self.extract(input_stream, kind))
        return sorted(extracted)

    # ------------------------------------------------------------------
    # Single URL
    # ------------------------------------------------------------------

    def is_spam(self, url: str) -> bool:
        """Classify one URL."""
        return self.classifier.is_spam(url)

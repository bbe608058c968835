"""Base classes and interfaces for input format filters.

This module defines the abstract StreamFilter interface that every format
adapter implements. An adapter is bound to one seekable text stream and can
scan it any number of times: to enumerate candidate URLs, or to rewrite it
with spam records removed.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from typing import Optional, TextIO

from referrercop.core.exceptions import UnsupportedInputError
from referrercop.core.models import FilterStats


# Returns True when the URL is spam and its record should be dropped
SpamPredicate = Callable[[str], bool]


class StreamFilter(ABC):
    """Abstract base class for all format adapters.

    URLs are handed to the predicate exactly as captured from the input;
    normalization is the classifier's job.

    Attributes:
        name: Format identifier (e.g., "apache-combined")
        description: Human-readable format name
        stats: Statistics of the most recent rewrite pass
    """

    name: str
    description: str

    def __init__(self, stream: TextIO):
        """Bind the adapter to an input stream.

        Args:
            stream: Seekable text stream

        Raises:
            UnsupportedInputError: If the stream is not in this adapter's format
        """
        if not self.sniff_applicable(stream):
            raise UnsupportedInputError(
                f"Input is not in {self.description} format"
            )
        self.stream = stream
        self.stats = FilterStats()

    @classmethod
    @abstractmethod
    def sniff_applicable(cls, stream: TextIO) -> bool:
        """Check whether the stream is in this adapter's format.

        Examines only the leading signature of the stream and leaves the
        read position where it was.

        Args:
            stream: Seekable text stream

        Returns:
            True if this adapter can process the stream
        """
        pass

    @abstractmethod
    def extract_candidates(self) -> Iterator[str]:
        """Yield the URL of every well-formed record, in input order.

        Each call starts again from the beginning of the stream. Malformed
        records are skipped.

        Yields:
            Candidate URLs
        """
        pass

    @abstractmethod
    def classify_and_rewrite(
        self,
        output: TextIO,
        predicate: SpamPredicate,
    ) -> FilterStats:
        """Copy the input to output with spam records removed.

        Malformed records are copied unchanged and counted as invalid.

        Args:
            output: Text stream receiving the filtered input
            predicate: Returns True for URLs to drop

        Returns:
            Statistics for this pass
        """
        pass

    def _rewind(self) -> None:
        self.stream.seek(0)

    @staticmethod
    def _first_line(stream: TextIO) -> str:
        """Read the first line of a stream and restore its position."""
        position = stream.tell()
        try:
            stream.seek(0)
            return stream.readline()
        finally:
            stream.seek(position)

    @staticmethod
    def _write_line(output: TextIO, line: str) -> None:
        """Write a record, terminating it with a newline if it lacks one."""
        output.write(line if line.endswith("\n") else line + "\n")


class LineFilterBase(StreamFilter):
    """Base implementation for formats with one record per line.

    Concrete adapters only decide how a URL is captured from a line.
    """

    @abstractmethod
    def match_record(self, line: str) -> Optional[str]:
        """Capture the URL from one record.

        Args:
            line: Raw input line

        Returns:
            The captured URL, or None if the record is malformed
        """
        pass

    def extract_candidates(self) -> Iterator[str]:
        self._rewind()
        for line in self.stream:
            url = self.match_record(line)
            if url is not None:
                yield url

    def classify_and_rewrite(
        self,
        output: TextIO,
        predicate: SpamPredicate,
    ) -> FilterStats:
        stats = FilterStats()
        self._rewind()
        start_time = time.perf_counter()

        for line in self.stream:
            stats.processed += 1

            url = self.match_record(line)
            if url is None:
                stats.invalid += 1
                self._write_line(output, line)
                continue

            if predicate(url):
                stats.spam += 1
            else:
                stats.ham += 1
                self._write_line(output, line)

        stats.elapsed = time.perf_counter() - start_time
        self.stats = stats
        return stats

"""AWStats data file adapter.

AWStats keeps its monthly statistics in a text data file made of named
sections. Referrers live in the pagerefs section:

    BEGIN_PAGEREFS 3
    http://example.com/page 12 10
    http://spam.example/ 4 4
    http://other.org/ 1 1
    END_PAGEREFS

Only that section is filtered. The file also carries a map section holding
byte offsets of every section; rewriting invalidates those offsets, so the
map is dropped and AWStats rebuilds it on its next update.
"""

import logging
import time
from collections.abc import Iterator
from typing import Optional, TextIO

from referrercop.core.constants import (
    AWSTATS_HEADER_RE,
    AWSTATS_MAP_RE,
    AWSTATS_PAGEREFS_RE,
    AWSTATS_URL_RE,
)
from referrercop.core.models import FilterStats
from referrercop.filters.base import SpamPredicate, StreamFilter


logger = logging.getLogger(__name__)


class AWStatsAdapter(StreamFilter):
    """Adapter for AWStats text data files.

    Unlike the line formats, this adapter reads the whole document, filters
    the referrer lines of the pagerefs section, and writes the document back
    with the section rebuilt:

    - Retained lines are joined, stripped, and newline-terminated
    - The header becomes ``BEGIN_PAGEREFS <retained-count>``
    - Everything outside the section is kept verbatim, except the map section

    Attributes:
        name: Format identifier ("awstats")
        description: Human-readable format name
    """

    name = "awstats"
    description = "AWStats data file"

    @classmethod
    def sniff_applicable(cls, stream: TextIO) -> bool:
        return bool(AWSTATS_HEADER_RE.match(cls._first_line(stream)))

    def _read_document(self) -> str:
        self._rewind()
        return self.stream.read()

    @staticmethod
    def _referrer_lines(body: str) -> list[str]:
        """Split the pagerefs body into lines, keeping line endings."""
        return body.strip().splitlines(keepends=True)

    def extract_candidates(self) -> Iterator[str]:
        match = AWSTATS_PAGEREFS_RE.search(self._read_document())
        if match is None:
            return

        for line in self._referrer_lines(match.group("body")):
            url = self._match_referrer(line)
            if url is not None:
                yield url

    def classify_and_rewrite(
        self,
        output: TextIO,
        predicate: SpamPredicate,
    ) -> FilterStats:
        stats = FilterStats()
        start_time = time.perf_counter()

        document = AWSTATS_MAP_RE.sub("", self._read_document(), count=1)

        match = AWSTATS_PAGEREFS_RE.search(document)
        if match is None:
            logger.warning("AWStats data file has no pagerefs section")
            self._write_line(output, document)
            stats.elapsed = time.perf_counter() - start_time
            self.stats = stats
            return stats

        retained: list[str] = []

        for line in self._referrer_lines(match.group("body")):
            stats.processed += 1

            url = self._match_referrer(line)
            if url is None:
                stats.invalid += 1
                retained.append(line)
                continue

            if predicate(url):
                stats.spam += 1
            else:
                stats.ham += 1
                retained.append(line)

        section = self._build_section(retained)
        document = document[:match.start()] + section + document[match.end():]
        self._write_line(output, document)

        stats.elapsed = time.perf_counter() - start_time
        self.stats = stats
        return stats

    @staticmethod
    def _match_referrer(line: str) -> Optional[str]:
        match = AWSTATS_URL_RE.match(line)
        return match.group(1) if match else None

    @staticmethod
    def _build_section(retained: list[str]) -> str:
        """Reassemble the pagerefs section around the retained lines."""
        body = "".join(retained).strip() + "\n" if retained else ""
        return f"BEGIN_PAGEREFS {len(retained)}\n{body}END_PAGEREFS"

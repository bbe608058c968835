"""Plain text adapter for lists of URLs.

Each line holding a URL is one record. This adapter accepts any input, so
it is the last one tried during format selection.
"""

from typing import Optional, TextIO

from referrercop.core.constants import TEXT_URL_RE
from referrercop.filters.base import LineFilterBase


class PlainTextAdapter(LineFilterBase):
    """Adapter for text with one URL per line.

    A line is a record when it starts (after optional whitespace) with an
    http or https URL; the URL ends at the first whitespace.

    Attributes:
        name: Format identifier ("text")
        description: Human-readable format name
    """

    name = "text"
    description = "plain text"

    @classmethod
    def sniff_applicable(cls, stream: TextIO) -> bool:
        """Always True; plain text is the catch-all format."""
        return True

    def match_record(self, line: str) -> Optional[str]:
        match = TEXT_URL_RE.match(line)
        return match.group(1) if match else None

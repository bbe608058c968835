"""Apache combined log format adapter.

Combined log lines look like:

    127.0.0.1 - frank [10/Oct/2000:13:55:36 -0700] "GET /a.gif HTTP/1.0" 200 2326 "http://example.com/start.html" "Mozilla/4.08"

The quoted field before the user agent is the referrer, which is the URL
handed to the classifier.
"""

from typing import Optional, TextIO

from referrercop.core.constants import APACHE_COMBINED_RE, APACHE_NO_REFERRER
from referrercop.filters.base import LineFilterBase


class ApacheCombinedAdapter(LineFilterBase):
    """Adapter for Apache combined access logs.

    The format is recognized when the first line parses as a combined log
    entry. Lines that do not parse, and entries whose referrer is ``-`` or
    empty, are not classified: they are skipped during extraction and copied
    through unchanged when rewriting.

    Attributes:
        name: Format identifier ("apache-combined")
        description: Human-readable format name
    """

    name = "apache-combined"
    description = "Apache combined log"

    @classmethod
    def sniff_applicable(cls, stream: TextIO) -> bool:
        first_line = cls._first_line(stream)
        return bool(APACHE_COMBINED_RE.match(first_line.rstrip("\r\n")))

    def match_record(self, line: str) -> Optional[str]:
        match = APACHE_COMBINED_RE.match(line.rstrip("\r\n"))
        if not match:
            return None

        referrer = match.group(1)
        if referrer in APACHE_NO_REFERRER:
            return None

        return referrer

"""Format adapters for ReferrerCop inputs.

This package contains one adapter per supported input format. Each adapter
implements the StreamFilter interface.
"""

from referrercop.filters.adapters.apache_combined import ApacheCombinedAdapter
from referrercop.filters.adapters.awstats import AWStatsAdapter
from referrercop.filters.adapters.plain_text import PlainTextAdapter

__all__ = [
    "ApacheCombinedAdapter",
    "AWStatsAdapter",
    "PlainTextAdapter",
]

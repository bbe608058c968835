"""Format-aware streaming filters.

- StreamFilter: Interface every format adapter implements
- ApacheCombinedAdapter, AWStatsAdapter, PlainTextAdapter: Supported formats
- select_filter: Pick the adapter for an input
"""

from referrercop.filters.base import LineFilterBase, SpamPredicate, StreamFilter
from referrercop.filters.adapters import (
    ApacheCombinedAdapter,
    AWStatsAdapter,
    PlainTextAdapter,
)
from referrercop.filters.dispatcher import FILTER_CLASSES, select_filter

__all__ = [
    "StreamFilter",
    "LineFilterBase",
    "SpamPredicate",
    "ApacheCombinedAdapter",
    "AWStatsAdapter",
    "PlainTextAdapter",
    "FILTER_CLASSES",
    "select_filter",
]

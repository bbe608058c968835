"""Input format detection.

Tries the format adapters in a fixed priority order and binds the first
one that recognizes the input.
"""

import logging
from collections.abc import Sequence
from typing import TextIO

from referrercop.core.exceptions import NoApplicableFormatError
from referrercop.filters.adapters import (
    ApacheCombinedAdapter,
    AWStatsAdapter,
    PlainTextAdapter,
)
from referrercop.filters.base import StreamFilter


logger = logging.getLogger(__name__)


# Plain text accepts anything, so it must stay last
FILTER_CLASSES: tuple[type[StreamFilter], ...] = (
    ApacheCombinedAdapter,
    AWStatsAdapter,
    PlainTextAdapter,
)


def select_filter(
    stream: TextIO,
    candidates: Sequence[type[StreamFilter]] = FILTER_CLASSES,
) -> StreamFilter:
    """Return an adapter bound to the stream.

    Args:
        stream: Seekable text stream
        candidates: Adapter classes in priority order

    Returns:
        Instance of the first adapter whose sniff accepts the stream

    Raises:
        NoApplicableFormatError: If no candidate accepts the stream
    """
    for filter_class in candidates:
        if filter_class.sniff_applicable(stream):
            logger.info(f"Input type: {filter_class.description}")
            return filter_class(stream)

    names = ", ".join(c.name for c in candidates) or "none"
    raise NoApplicableFormatError(f"No filter can process this input (tried: {names})")

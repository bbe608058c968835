"""Spam/ham classification of referrer URLs.

This module provides the Classifier that decides whether a URL is referrer
spam by checking it against a whitelist and a blacklist. Results are
memoized per raw URL string for the lifetime of the classifier.
"""

import logging
from pathlib import Path
from typing import Optional

from referrercop.classifier.normalizer import URLNormalizer
from referrercop.classifier.rulelist import RuleList, load_rule_list
from referrercop.core.constants import ListRole
from referrercop.core.exceptions import MissingBlacklistError
from referrercop.core.models import Settings


logger = logging.getLogger(__name__)


class Classifier:
    """Classify URLs as spam or ham.

    Evaluation order, first match wins:
    1. Normalize the URL (host without ``www.``, host/path key)
    2. Whitelist: host entry, host/path entry, pattern -> ham
    3. Blacklist: host entry, host/path entry, pattern -> spam
    4. Otherwise ham

    The memo is owned by the instance and is not thread-safe.
    """

    def __init__(
        self,
        blacklist: Optional[RuleList],
        whitelist: Optional[RuleList] = None,
        *,
        normalizer: Optional[URLNormalizer] = None,
    ):
        """Initialize Classifier.

        Args:
            blacklist: Compiled blacklist (required)
            whitelist: Compiled whitelist, or None to whitelist nothing
            normalizer: URLNormalizer instance (creates default if None)

        Raises:
            MissingBlacklistError: If blacklist is None
        """
        if blacklist is None:
            raise MissingBlacklistError("Classification requires a blacklist")

        self.blacklist = blacklist
        self.whitelist = whitelist
        self.normalizer = normalizer or URLNormalizer()
        self._memo: dict[str, bool] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "Classifier":
        """Load both lists named by the settings and build a classifier.

        A missing whitelist file means no whitelist; a missing blacklist
        file is an error.

        Raises:
            ListNotFoundError: If the blacklist file does not exist
            ListParseError: If either list cannot be compiled
        """
        return cls.from_files(
            settings.blacklist_file,
            settings.whitelist_file,
            cache_dir=settings.cache_path,
        )

    @classmethod
    def from_files(
        cls,
        blacklist_file: Path,
        whitelist_file: Optional[Path] = None,
        *,
        cache_dir: Optional[Path] = None,
    ) -> "Classifier":
        """Load lists from files and build a classifier."""
        blacklist = load_rule_list(blacklist_file, ListRole.BLACKLIST, cache_dir=cache_dir)
        whitelist = None
        if whitelist_file is not None:
            whitelist = load_rule_list(
                whitelist_file, ListRole.WHITELIST, cache_dir=cache_dir, required=False
            )
        return cls(blacklist, whitelist)

    def is_spam(self, url: str) -> bool:
        """Classify a single URL.

        Args:
            url: URL exactly as captured from the input

        Returns:
            True if the URL is spam, False if ham
        """
        cached = self._memo.get(url)
        if cached is not None:
            return cached

        normalized = self.normalizer.normalize(url)

        if self.whitelist is not None and self.whitelist.matches(normalized):
            result = False
        else:
            result = self.blacklist.matches(normalized)

        logger.debug(f"{'spam' if result else 'ham'}: {url}")
        self._memo[url] = result
        return result

    def is_ham(self, url: str) -> bool:
        """Inverse of is_spam."""
        return not self.is_spam(url)

    @property
    def memo_size(self) -> int:
        """Number of distinct URLs classified so far."""
        return len(self._memo)

    def clear_memo(self) -> None:
        """Forget memoized results."""
        self._memo.clear()

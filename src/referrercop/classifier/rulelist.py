"""Compiled blacklist and whitelist representation.

A rule list source is plain text, one rule per line:

    # comment
    www.BadSite.com             exact host (or host/path) token, normalized to badsite.com
    http://www.spam.org/path/   URL, normalized to spam.org/path
    /casino-\\d+/               regular expression, matched case-insensitively

Compilation produces a set of exact entries and an ordered list of patterns.
The compiled form is keyed by a SHA-1 fingerprint of the source so that an
unchanged list can be loaded from the compiled-list cache instead.
"""

import hashlib
import logging
import re
from pathlib import Path
from typing import Iterable, Optional, TextIO

from referrercop.classifier.normalizer import NormalizedURL, URLNormalizer
from referrercop.core.constants import (
    LIST_COMMENT_RE,
    LIST_PATTERN_RE,
    LIST_URL_RE,
    READ_CHUNK_SIZE,
    ListRole,
)
from referrercop.core.exceptions import ListNotFoundError, ListParseError
from referrercop.core.models import CompiledList
from referrercop.storage.cache import CompiledListCache


logger = logging.getLogger(__name__)


def fingerprint_text(text: str) -> str:
    """Return the SHA-1 hex digest of a list source."""
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def fingerprint_file(path: Path) -> str:
    """Return the SHA-1 hex digest of a list file's bytes."""
    digest = hashlib.sha1()
    with path.open("rb") as f:
        while True:
            chunk = f.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


class RuleList:
    """Compiled blacklist or whitelist.

    Attributes:
        role: Whether this is a blacklist or whitelist
        fingerprint: SHA-1 of the source the list was compiled from
        exact_entries: Normalized host or host/path strings
        patterns: Compiled patterns in source order
        entry_count: Number of non-comment, non-empty source lines
        from_cache: Whether the compiled form came from the cache
    """

    def __init__(
        self,
        *,
        role: ListRole,
        fingerprint: str,
        exact_entries: Iterable[str] = (),
        patterns: Iterable[re.Pattern] = (),
        entry_count: int = 0,
        from_cache: bool = False,
    ):
        self.role = role
        self.fingerprint = fingerprint
        self.exact_entries = frozenset(exact_entries)
        self.patterns = list(patterns)
        self.entry_count = entry_count
        self.from_cache = from_cache

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def compile(
        cls,
        source: TextIO,
        *,
        role: ListRole = ListRole.BLACKLIST,
        cache: Optional[CompiledListCache] = None,
    ) -> "RuleList":
        """Compile a list from a text stream.

        Args:
            source: Stream positioned at the start of the list
            role: Role of the list, which also names its cache artifact
            cache: Compiled-list cache, or None to always compile

        Returns:
            Compiled RuleList

        Raises:
            ListParseError: If a line cannot be compiled
        """
        text = source.read()
        return cls._build(text, fingerprint_text(text), role, cache)

    @classmethod
    def load_file(
        cls,
        path: Path,
        *,
        role: ListRole = ListRole.BLACKLIST,
        cache: Optional[CompiledListCache] = None,
    ) -> "RuleList":
        """Compile a list file.

        The fingerprint is taken over the file's bytes, so it can be compared
        with the hash published by the update server.

        Raises:
            ListNotFoundError: If the file does not exist
            ListParseError: If a line cannot be compiled
        """
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise ListNotFoundError(f"File not found: {path}") from e

        logger.info(f"Using {role.value} {path}")
        fingerprint = hashlib.sha1(data).hexdigest()
        return cls._build(data.decode("utf-8", errors="replace"), fingerprint, role, cache)

    @classmethod
    def _build(
        cls,
        text: str,
        fingerprint: str,
        role: ListRole,
        cache: Optional[CompiledListCache],
    ) -> "RuleList":
        """Load from cache when the fingerprint matches, else compile and store."""
        if cache is not None:
            cached = cache.load(role, fingerprint)
            if cached is not None:
                rule_list = cls._from_compiled(cached, role)
                if rule_list is not None:
                    logger.info(f"Loaded compiled {role.value} from cache")
                    return rule_list

        rule_list = cls._compile_text(text, fingerprint, role)
        logger.info(f"Compiled {rule_list.entry_count} {role.value} entries")

        if cache is not None:
            cache.store(role, rule_list.to_compiled())

        return rule_list

    @classmethod
    def _compile_text(cls, text: str, fingerprint: str, role: ListRole) -> "RuleList":
        normalizer = URLNormalizer()
        exact_entries: set[str] = set()
        patterns: list[re.Pattern] = []
        entry_count = 0

        for line_number, raw in enumerate(text.splitlines(), start=1):
            line = LIST_COMMENT_RE.sub("", raw).strip()
            if not line:
                continue

            entry_count += 1

            url_match = LIST_URL_RE.match(line)
            if url_match:
                try:
                    exact_entries.add(normalizer.normalize_entry(url_match.group(0)))
                except ValueError as e:
                    raise ListParseError(line_number, e) from e
                continue

            pattern_match = LIST_PATTERN_RE.match(line)
            if pattern_match:
                try:
                    patterns.append(re.compile(pattern_match.group(1), re.IGNORECASE))
                except re.error as e:
                    raise ListParseError(line_number, e) from e
                continue

            exact_entries.add(normalizer.normalize_token(line))

        return cls(
            role=role,
            fingerprint=fingerprint,
            exact_entries=exact_entries,
            patterns=patterns,
            entry_count=entry_count,
        )

    @classmethod
    def _from_compiled(cls, record: CompiledList, role: ListRole) -> Optional["RuleList"]:
        """Rebuild from a cache record; None if a stored pattern no longer compiles."""
        try:
            patterns = [re.compile(source, re.IGNORECASE) for source in record.patterns]
        except re.error as e:
            logger.warning(f"Cached {role.value} holds an invalid pattern: {e}")
            return None

        return cls(
            role=role,
            fingerprint=record.fingerprint,
            exact_entries=record.exact_entries,
            patterns=patterns,
            entry_count=record.entry_count,
            from_cache=True,
        )

    def to_compiled(self) -> CompiledList:
        """Convert to the record persisted in the cache."""
        return CompiledList(
            fingerprint=self.fingerprint,
            exact_entries=set(self.exact_entries),
            patterns=self.pattern_sources,
            entry_count=self.entry_count,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def pattern_sources(self) -> list[str]:
        """Source text of each pattern, in order."""
        return [pattern.pattern for pattern in self.patterns]

    def matches(self, url: NormalizedURL) -> bool:
        """Check a normalized URL against the list.

        Host-only entries are checked first, then host/path entries, then
        patterns against host/path.
        """
        if url.host is not None and url.host in self.exact_entries:
            return True
        if url.key in self.exact_entries:
            return True
        return any(pattern.search(url.key) for pattern in self.patterns)

    def __len__(self) -> int:
        return self.entry_count

    def __repr__(self) -> str:
        return (
            f"RuleList(role={self.role.value!r}, entries={self.entry_count}, "
            f"fingerprint={self.fingerprint[:12]!r})"
        )


def load_rule_list(
    path: Path,
    role: ListRole,
    *,
    cache_dir: Optional[Path] = None,
    required: bool = True,
) -> Optional[RuleList]:
    """Load a list file, optionally tolerating its absence.

    Args:
        path: List file
        role: Blacklist or whitelist
        cache_dir: Compiled-list cache directory, or None for no cache
        required: Raise if the file is missing instead of returning None

    Returns:
        RuleList, or None when an optional file is missing

    Raises:
        ListNotFoundError: If a required file is missing
        ListParseError: If a line cannot be compiled
    """
    if not path.exists():
        if required:
            raise ListNotFoundError(f"File not found: {path}")
        logger.info(f"No {role.value} at {path}")
        return None

    cache = CompiledListCache(cache_dir) if cache_dir is not None else None
    return RuleList.load_file(path, role=role, cache=cache)

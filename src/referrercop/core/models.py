"""Core data models for ReferrerCop.

This module defines the data structures shared across the application:
per-pass filter statistics, resolved settings, and the compiled form of a
rule list as it is persisted to the cache.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


# ============================================================================
# Filter Statistics
# ============================================================================

@dataclass
class FilterStats:
    """Counters for one classify-and-rewrite pass.

    A fresh instance is produced for every pass; callers read it afterwards.
    """
    processed: int = 0
    ham: int = 0
    spam: int = 0
    invalid: int = 0
    elapsed: float = 0.0                    # Pass duration in seconds

    @property
    def throughput(self) -> float:
        """Records processed per second, or 0.0 for an instantaneous pass."""
        if self.elapsed > 0:
            return self.processed / self.elapsed
        return 0.0

    def combine(self, other: "FilterStats") -> "FilterStats":
        """Return the sum of this and another pass."""
        return FilterStats(
            processed=self.processed + other.processed,
            ham=self.ham + other.ham,
            spam=self.spam + other.spam,
            invalid=self.invalid + other.invalid,
            elapsed=self.elapsed + other.elapsed,
        )

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "processed": self.processed,
            "ham": self.ham,
            "spam": self.spam,
            "invalid": self.invalid,
            "elapsed": self.elapsed,
            "throughput": self.throughput,
        }


# ============================================================================
# Compiled List Model
# ============================================================================

@dataclass
class CompiledList:
    """Serializable form of a compiled rule list.

    Patterns are stored as their source strings; they are recompiled on load.
    Exact entries are written as a sorted list so the record is plain JSON.
    """
    fingerprint: str
    exact_entries: set[str] = field(default_factory=set)
    patterns: list[str] = field(default_factory=list)
    entry_count: int = 0

    def to_dict(self) -> dict:
        """Convert to the plain record written to the cache."""
        return {
            "fingerprint": self.fingerprint,
            "exact_entries": sorted(self.exact_entries),
            "patterns": list(self.patterns),
            "entry_count": self.entry_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CompiledList":
        """Build from a cache record.

        Raises:
            KeyError: If a field is missing
            TypeError: If a field has the wrong shape
            ValueError: If a field has the wrong type
        """
        if not isinstance(data, dict):
            raise TypeError(f"expected a mapping, got {type(data).__name__}")
        return cls(
            fingerprint=str(data["fingerprint"]),
            exact_entries={str(e) for e in data["exact_entries"]},
            patterns=[str(p) for p in data["patterns"]],
            entry_count=int(data["entry_count"]),
        )


# ============================================================================
# Settings Model
# ============================================================================

@dataclass
class Settings:
    """Resolved runtime settings."""
    blacklist_file: Path
    whitelist_file: Path
    cache_path: Optional[Path]              # None disables the compiled-list cache
    update_url: str
    update_sha1_url: str
    config_file: Optional[Path] = None      # File the settings were read from

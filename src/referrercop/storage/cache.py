"""Compiled rule list cache for ReferrerCop.

Compiling a large blacklist is slow, so the compiled form is stored on disk
under a name derived from the list's role and reused while the source list's
fingerprint is unchanged.

Artifacts are plain JSON records. The cache directory may be shared (the
default is ``/tmp``), so loading an artifact never does more than parse data;
anything that does not parse into a record is treated as a miss.

The cache is best-effort: unreadable or stale artifacts are ignored and
write failures are logged. Writes go through a temporary file and a rename,
but there is no locking between processes; two processes rebuilding the
same list may race and the last writer wins.
"""

import json
import logging
import tempfile
from pathlib import Path
from typing import Optional

from referrercop.core.constants import CACHE_SUFFIX, ListRole
from referrercop.core.models import CompiledList


logger = logging.getLogger(__name__)


class CompiledListCache:
    """Reads and writes compiled list artifacts in one cache directory."""

    def __init__(self, cache_dir: Path):
        """Initialize cache.

        Args:
            cache_dir: Directory holding the artifacts (created on first write)
        """
        self.cache_dir = cache_dir

    def path_for(self, role: ListRole) -> Path:
        """Get the artifact path for a list role.

        Args:
            role: Blacklist or whitelist

        Returns:
            Path such as ``<cache_dir>/blacklist_compiled.json``
        """
        return self.cache_dir / f"{role.value}{CACHE_SUFFIX}"

    def load(self, role: ListRole, fingerprint: str) -> Optional[CompiledList]:
        """Load the cached compilation if it matches the fingerprint.

        Args:
            role: Blacklist or whitelist
            fingerprint: Fingerprint of the current list source

        Returns:
            CompiledList, or None if absent, corrupt, or stale
        """
        path = self.path_for(role)
        if not path.exists():
            return None

        try:
            record = CompiledList.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError,
                KeyError, TypeError, ValueError) as e:
            logger.warning(f"Error loading {role.value} from cache {path}: {e}")
            return None

        if record.fingerprint != fingerprint:
            logger.debug(f"Cached {role.value} is stale, recompiling")
            return None

        return record

    def store(self, role: ListRole, record: CompiledList) -> bool:
        """Persist a compiled list.

        Failures are logged and reported through the return value only.

        Args:
            role: Blacklist or whitelist
            record: Compiled list to persist

        Returns:
            True if the artifact was written
        """
        path = self.path_for(role)
        tmp_path: Optional[Path] = None

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", delete=False, dir=self.cache_dir, prefix=f".{role.value}-",
                encoding="utf-8",
            ) as tmp:
                tmp_path = Path(tmp.name)
                json.dump(record.to_dict(), tmp, ensure_ascii=False)
            tmp_path.replace(path)
            return True
        except OSError as e:
            logger.warning(f"Unable to create cache file {path}: {e}")
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            return False

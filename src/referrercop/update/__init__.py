"""Remote blacklist update."""

from referrercop.update.updater import BlacklistUpdater

__all__ = ["BlacklistUpdater"]

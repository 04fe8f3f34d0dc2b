"""Timestamped snapshots of a record store file.

Backups live in `<backup_dir>/<store_name>-<timestamp>.json`. The
timestamp is a fixed-width UTC rendering with `:` and `.` replaced by `-`,
so sorting backup names lexicographically sorts them chronologically.

Everything in here is best-effort: failures are logged and swallowed so a
broken backup directory can never block a write to the live store.
"""
from __future__ import annotations
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_KEEP_BACKUPS = 5


def backup_timestamp(when: datetime) -> str:
    """Render `when` as a filesystem-safe, lexicographically sortable stamp."""
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return when.strftime("%Y-%m-%dT%H:%M:%S.%fZ").replace(":", "-").replace(".", "-")


class BackupManager:
    def __init__(
        self,
        store_name: str,
        backup_dir: str | Path,
        keep: int = DEFAULT_KEEP_BACKUPS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if keep < 1:
            raise ValueError("keep must be at least 1")
        self.store_name = store_name
        self.backup_dir = Path(backup_dir)
        self.keep = keep
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        # Only match our own stamps so `articles` never prunes `articles-archive`.
        self._pattern = re.compile(
            rf"^{re.escape(store_name)}-\d{{4}}-\d{{2}}-\d{{2}}T[\d-]+Z\.json$"
        )

    def backup_name(self, when: datetime) -> str:
        return f"{self.store_name}-{backup_timestamp(when)}.json"

    def list_backups(self) -> List[Path]:
        """Return this store's backups, newest first."""
        if not self.backup_dir.is_dir():
            return []
        names = [p.name for p in self.backup_dir.iterdir() if p.is_file() and self._pattern.match(p.name)]
        return [self.backup_dir / n for n in sorted(names, reverse=True)]

    def create_backup(self, source: str | Path) -> Optional[Path]:
        """Copy the exact bytes of `source` into a new backup file.

        Returns the backup path, or None when nothing was written. A missing
        source is the normal first-write case and is not logged as an error.
        """
        source = Path(source)
        try:
            data = source.read_bytes()
        except FileNotFoundError:
            logger.debug("No %s yet; skipping backup", source)
            return None
        except Exception:
            logger.exception("Backup creation failed: could not read %s", source)
            return None

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            path = self.backup_dir / self.backup_name(self._clock())
            path.write_bytes(data)
        except Exception:
            logger.exception("Backup creation failed for store %s", self.store_name)
            return None

        logger.debug("Backed up %s to %s (%d bytes)", source, path, len(data))
        self.cleanup_backups()
        return path

    def cleanup_backups(self, keep: Optional[int] = None) -> List[Path]:
        """Delete all but the newest `keep` backups. Returns the deleted paths."""
        keep = self.keep if keep is None else keep
        try:
            backups = self.list_backups()
        except Exception:
            logger.exception("Backup cleanup failed: could not list %s", self.backup_dir)
            return []

        removed: List[Path] = []
        for path in backups[keep:]:
            try:
                path.unlink()
                removed.append(path)
            except Exception:
                logger.exception("Backup cleanup failed for %s", path)
        if removed:
            logger.debug("Pruned %d old backup(s) of %s", len(removed), self.store_name)
        return removed

    def latest(self) -> Optional[Path]:
        backups = self.list_backups()
        return backups[0] if backups else None

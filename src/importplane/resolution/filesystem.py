"""Read-only, cached view of the file system.

All existence checks are exact-case, even on case-insensitive file systems,
so ``import Foo`` never resolves to ``foo.py``. Listings are cached until
``invalidate()`` is called.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class _Entry:
    is_dir: bool
    is_file: bool


def detect_case_sensitivity(probe: Path | None) -> bool:
    """Guess whether the file system holding *probe* is case-sensitive."""
    if probe is not None and probe.exists():
        swapped = probe.with_name(probe.name.swapcase())
        if swapped.name != probe.name:
            try:
                return not (swapped.exists() and os.path.samefile(probe, swapped))
            except OSError:
                return True
    return sys.platform not in ("win32", "darwin")


class FileSystemView:
    """Cached directory listings with exact-case lookups."""

    def __init__(self, case_sensitive: bool | None = None, probe: Path | None = None) -> None:
        self._case_sensitive = (
            case_sensitive if case_sensitive is not None else detect_case_sensitivity(probe)
        )
        self._listings: dict[str, dict[str, _Entry]] = {}
        self._texts: dict[str, str | None] = {}

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    def path_key(self, path: Path) -> str:
        """Comparison key honoring the file system's case sensitivity."""
        text = os.path.normpath(str(path))
        return text if self._case_sensitive else text.casefold()

    def is_under(self, path: Path, root: Path) -> bool:
        """True when *path* equals *root* or lives below it."""
        p, r = self.path_key(path), self.path_key(root)
        return p == r or p.startswith(r.rstrip(os.sep) + os.sep)

    def _listing(self, directory: Path) -> dict[str, _Entry]:
        key = self.path_key(directory)
        cached = self._listings.get(key)
        if cached is not None:
            return cached
        entries: dict[str, _Entry] = {}
        try:
            with os.scandir(directory) as it:
                for entry in it:
                    try:
                        entries[entry.name] = _Entry(entry.is_dir(), entry.is_file())
                    except OSError:
                        continue
        except (FileNotFoundError, NotADirectoryError, PermissionError):
            pass
        self._listings[key] = entries
        return entries

    def list_dir(self, directory: Path) -> list[str]:
        """Entry names of *directory*, sorted; empty when it does not exist."""
        return sorted(self._listing(directory))

    def _lookup(self, path: Path) -> _Entry | None:
        if path.parent == path:
            return _Entry(is_dir=os.path.isdir(path), is_file=False)
        return self._listing(path.parent).get(path.name)

    def exists(self, path: Path) -> bool:
        return self._lookup(path) is not None

    def is_dir(self, path: Path) -> bool:
        entry = self._lookup(path)
        return entry is not None and entry.is_dir

    def is_file(self, path: Path) -> bool:
        entry = self._lookup(path)
        return entry is not None and entry.is_file

    def read_text(self, path: Path) -> str | None:
        """File contents, or None when unreadable."""
        key = self.path_key(path)
        if key in self._texts:
            return self._texts[key]
        text: str | None
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("file_unreadable", path=str(path), error=str(e))
            text = None
        self._texts[key] = text
        return text

    def invalidate(self, path: Path | None = None) -> None:
        """Drop cached state for *path* (and its parent listing), or everything."""
        if path is None:
            self._listings.clear()
            self._texts.clear()
            return
        self._listings.pop(self.path_key(path), None)
        self._listings.pop(self.path_key(path.parent), None)
        self._texts.pop(self.path_key(path), None)

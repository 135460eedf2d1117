"""Directory scanning and whole-tree discovery.

Two modes:
  - scan_directory: immediate trackable files of one directory, sorted
  - discover_directories: every directory holding a store or at least one
    trackable file, as sorted root-relative paths

Traversal is an explicit sorted walk with a visited set keyed on the
resolved real path, so symlinked directories are entered once and output
order is reproducible. Hidden directories (.git, .attention, ...) are not
descended into.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from .config import ATTRIBUTES_FILE, PRIORITIES_FILE, TrackerConfig
from .path_filter import is_trackable

log = logging.getLogger(__name__)

AUX_STORE_DIR = Path(".as") / "folder"


def relative_dir(root: Path, directory: Path) -> str:
    """Root-relative POSIX path of a directory; the root itself is '.'."""
    rel = directory.relative_to(root).as_posix()
    return rel if rel not in ("", ".") else "."


def _within(root: Path, path: Path) -> bool:
    return path == root or root in path.parents


def has_store(directory: Path) -> bool:
    """True when the directory holds its own attribute/priority data."""
    return (
        (directory / ATTRIBUTES_FILE).is_file()
        or (directory / PRIORITIES_FILE).is_file()
        or (directory / AUX_STORE_DIR).is_dir()
    )


class DirectoryScanner:
    """Finds trackable files and tracked directories under one root."""

    def __init__(self, root: str | Path, config: TrackerConfig | None = None) -> None:
        self.root = Path(root).resolve()
        self.config = config or TrackerConfig()

    # -----------------------------------------------------------------------
    # Path helpers
    # -----------------------------------------------------------------------

    def resolve_dir(self, directory: str | Path | None = None) -> Path:
        """Absolute path for a directory given relative to root (or absolute).

        Raises ValueError for directories outside the root, including
        in-root symlinks whose target lies outside it.
        """
        if directory is None or str(directory) in ("", "."):
            return self.root
        p = Path(directory)
        if not p.is_absolute():
            p = self.root / p
        p = Path(os.path.normpath(p))
        if not _within(self.root, p):
            # absolute path through a symlinked prefix of the root
            p = p.resolve()
        if not _within(self.root, p) or not _within(self.root, p.resolve()):
            raise ValueError(f"{directory} is outside the tracked root {self.root}")
        return p

    def relative(self, directory: str | Path) -> str:
        return relative_dir(self.root, self.resolve_dir(directory))

    # -----------------------------------------------------------------------
    # Single directory
    # -----------------------------------------------------------------------

    def scan_directory(self, directory: str | Path | None = None) -> list[str]:
        """Immediate (non-recursive) trackable file names, sorted."""
        dir_path = self.resolve_dir(directory)
        if not dir_path.is_dir():
            return []
        rel = relative_dir(self.root, dir_path)
        files: list[str] = []
        try:
            entries = list(os.scandir(dir_path))
        except OSError as exc:
            log.warning("Cannot list %s: %s", dir_path, exc)
            return []
        for entry in entries:
            try:
                if not entry.is_file():
                    continue
            except OSError:
                continue
            if is_trackable(entry.name, self.config, rel):
                files.append(entry.name)
        return sorted(files)

    # -----------------------------------------------------------------------
    # Whole tree
    # -----------------------------------------------------------------------

    def walk(self) -> Iterator[Path]:
        """Every non-hidden directory under root, depth-first, sorted.

        Symlinked directories resolving outside the root are skipped.
        """
        visited: set[str] = set()
        stack = [self.root]
        while stack:
            current = stack.pop()
            real = os.path.realpath(current)
            if real in visited:
                continue
            if not _within(self.root, Path(real)):
                log.debug("Skipping %s: resolves outside %s", current, self.root)
                continue
            visited.add(real)
            yield current
            try:
                children = sorted(
                    entry.name for entry in os.scandir(current)
                    if entry.is_dir() and not entry.name.startswith(".")
                )
            except OSError as exc:
                log.warning("Cannot list %s: %s", current, exc)
                continue
            # reversed so the stack pops children in ascending order
            stack.extend(current / name for name in reversed(children))

    def discover_directories(self) -> list[str]:
        """Relative paths of directories holding a store or trackable files."""
        found: list[str] = []
        for directory in self.walk():
            if has_store(directory) or (self.config.track_files and self.scan_directory(directory)):
                found.append(relative_dir(self.root, directory))
        return sorted(found)

    def store_directories(self) -> list[str]:
        """Relative paths of directories that hold their own store."""
        return sorted(
            relative_dir(self.root, d) for d in self.walk() if has_store(d)
        )

    def scan_repository(self) -> dict[str, list[str]]:
        """``{relative_dir: [files]}`` for every directory with trackable files."""
        all_files: dict[str, list[str]] = {}
        for rel in self.discover_directories():
            files = self.scan_directory(rel)
            if files:
                all_files[rel] = files
        return all_files

"""Include/exclude policy for candidate files.

Pure predicate -- no I/O. Rules, in order:
  1. exact match against config.exclude_files -> excluded
  2. hidden (leading '.') -> excluded
  3. any exclusion glob matches -> excluded
  4. extension must be recognised unless include_all_extensions
"""

from __future__ import annotations

import os
import posixpath
import re
from functools import lru_cache

from .config import TrackerConfig


def _translate(pattern: str) -> str:
    """Regex source for a path glob.

    ``*`` and ``?`` stay inside one path segment; ``**/`` matches zero or
    more whole directories and a trailing ``**`` matches anything.
    """
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:[^/]*/)*")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        c = pattern[i]
        i += 1
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1 if pattern[i:i + 1] in ("!", "]") else i)
            if end == -1:
                out.append(re.escape(c))
                continue
            body = pattern[i:end].replace("\\", "\\\\")
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append(f"[{body}]")
            i = end + 1
        else:
            out.append(re.escape(c))
    return "".join(out)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(_translate(pattern))


def glob_match(path: str, pattern: str) -> bool:
    """Segment-aware glob match of a POSIX relative path.

    ``test*`` matches ``tests`` but not ``tests/app.py``;
    ``spec/**/*`` matches both ``spec/a.rb`` and ``spec/unit/a.rb``.
    """
    return _compile(pattern).fullmatch(path) is not None


def _relative_path(filename: str, rel_dir: str) -> str:
    if not rel_dir or rel_dir == ".":
        return filename
    return posixpath.join(rel_dir.replace(os.sep, "/"), filename)


def is_excluded(filename: str, config: TrackerConfig, rel_dir: str = "") -> bool:
    """Rules 1-3: excluded name, hidden file, exclusion glob."""
    if filename in config.exclude_files:
        return True
    if filename.startswith("."):
        return True
    candidates = {filename, _relative_path(filename, rel_dir)}
    return any(
        glob_match(candidate, pattern)
        for pattern in config.exclude_patterns
        for candidate in candidates
    )


def has_tracked_extension(filename: str, config: TrackerConfig) -> bool:
    """Rule 4."""
    if config.include_all_extensions:
        return True
    return os.path.splitext(filename)[1] in config.file_extensions


def is_trackable(filename: str, config: TrackerConfig, rel_dir: str = "") -> bool:
    """Decide whether ``filename`` gets a file facet.

    Args:
        filename: Bare file name (no directory part).
        config: Extensions and exclusion rules.
        rel_dir: Root-relative directory holding the file, so path-scoped
            patterns such as ``node_modules/**/*`` can apply.
    """
    return not is_excluded(filename, config, rel_dir) and has_tracked_extension(filename, config)

"""Content identity for tracked files.

A file's identity is its git blob SHA: sha1(b"blob <len>\\0" + bytes).
When the tree is a git work tree the SHA comes from ``git hash-object``;
otherwise, or when git fails for any reason, it is computed directly.
Both paths yield the same 40-char hex string for the same bytes, so a file
keeps its identity when it becomes version-controlled.
"""

from __future__ import annotations

import hashlib
import logging
import re
import subprocess
from pathlib import Path

from .config import DEFAULT_GIT_TIMEOUT
from .models import FILE_UNREADABLE, VCS_UNAVAILABLE, IdentityResult

log = logging.getLogger(__name__)

_SHA_RE = re.compile(r"^[0-9a-f]{40}$")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _git(args: list[str], cwd: str | Path, timeout: float = DEFAULT_GIT_TIMEOUT) -> str:
    """Run a git command, return stdout. Returns empty string on failure."""
    try:
        result = subprocess.run(
            ["git"] + args,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
        if result.returncode != 0:
            return ""
        return result.stdout.strip()
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
        return ""


def blob_sha(data: bytes) -> str:
    """Git blob SHA of raw bytes, computed without git."""
    header = f"blob {len(data)}\0".encode("ascii")
    return hashlib.sha1(header + data).hexdigest()


def manual_blob_sha(path: str | Path) -> str:
    """Blob SHA of a file's bytes. Raises OSError if unreadable."""
    return blob_sha(Path(path).read_bytes())


def is_git_repository(root: str | Path, timeout: float = DEFAULT_GIT_TIMEOUT) -> bool:
    """True when root lies inside a git work tree."""
    return bool(_git(["rev-parse", "--git-dir"], cwd=root, timeout=timeout))


def git_hash_object(path: str | Path, timeout: float = DEFAULT_GIT_TIMEOUT) -> str:
    """``git hash-object`` for a file, run from the file's own directory.

    --no-filters keeps the hash byte-exact (no autocrlf/clean filters),
    matching blob_sha. Returns empty string on any failure.
    """
    p = Path(path)
    out = _git(["hash-object", "--no-filters", "--", p.name], cwd=p.parent, timeout=timeout)
    return out if _SHA_RE.match(out) else ""


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class ContentIdentityResolver:
    """Computes content identities for files under one root.

    The git check runs once per resolver; construct a new resolver to
    re-check after the tree's VCS state changes.
    """

    def __init__(self, root: str | Path, *, use_git: bool = True,
                 timeout: float = DEFAULT_GIT_TIMEOUT) -> None:
        self.root = Path(root)
        self.timeout = timeout
        self._use_git = use_git
        self._git_repository: bool | None = None

    @property
    def git_repository(self) -> bool:
        if self._git_repository is None:
            self._git_repository = self._use_git and is_git_repository(self.root, self.timeout)
            log.debug("%s git repository: %s", self.root, self._git_repository)
        return self._git_repository

    def identity(self, path: str | Path) -> IdentityResult:
        """Identity of one file (absolute, or relative to root)."""
        p = Path(path)
        if not p.is_absolute():
            p = self.root / p

        if self.git_repository:
            sha = git_hash_object(p, self.timeout)
            if sha:
                return IdentityResult(path=str(p), sha=sha, source="git")
            log.debug("%s for %s, hashing manually", VCS_UNAVAILABLE, p)

        try:
            sha = manual_blob_sha(p)
        except OSError as exc:
            log.warning("Cannot read %s: %s", p, exc)
            return IdentityResult(path=str(p), reason=FILE_UNREADABLE)
        return IdentityResult(path=str(p), sha=sha, source="manual")

    def identities(self, paths: list[str | Path]) -> dict[str, str]:
        """Identities for several files; unreadable files are omitted."""
        results: dict[str, str] = {}
        for path in paths:
            result = self.identity(path)
            if result.success:
                results[str(path)] = result.sha
        return results

    def file_changed(self, path: str | Path, previous_sha: str) -> bool:
        """True when the file's current identity differs from previous_sha."""
        return self.identity(path).sha != previous_sha

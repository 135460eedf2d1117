"""Tracker configuration and root resolution.

The tracked-tree root is never a process-wide default: callers resolve it
once (``resolve_root``) and hand it to every component.

Optional per-repo overrides live in ``<root>/.attention/attention.conf``::

    [extensions]
    .sh
    .kt

    [exclude]
    vendor/**/*

    [exclude_files]
    setup.py

    [options]
    include_all_extensions = false
    track_files = true
    git_timeout = 30

List sections extend the defaults; ``[options]`` overrides them.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, replace
from pathlib import Path

log = logging.getLogger(__name__)

ATTRIBUTES_FILE = "Attributes.ini"
PRIORITIES_FILE = "Priorities.ini"
CONFIG_FILE = Path(".attention") / "attention.conf"

DEFAULT_EXTENSIONS = (
    ".rb", ".js", ".py", ".java", ".go", ".rs", ".ts", ".jsx", ".tsx",
)
DEFAULT_EXCLUDE_PATTERNS = (
    "*_test.rb", "*_spec.rb", "spec/**/*", "test/**/*", "node_modules/**/*",
)
DEFAULT_EXCLUDE_FILES = (ATTRIBUTES_FILE, PRIORITIES_FILE)
DEFAULT_GIT_TIMEOUT = 30.0

_LIST_SECTIONS = {
    "extensions": "file_extensions",
    "exclude": "exclude_patterns",
    "exclude_files": "exclude_files",
}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    """Invalid configuration value (hard failure, not a scan outcome)."""


@dataclass(frozen=True)
class TrackerConfig:
    """Which files are trackable and how git is consulted."""

    file_extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS
    exclude_files: tuple[str, ...] = DEFAULT_EXCLUDE_FILES
    include_all_extensions: bool = False
    track_files: bool = True
    git_timeout: float = DEFAULT_GIT_TIMEOUT

    def __post_init__(self) -> None:
        if self.git_timeout <= 0:
            raise ConfigError(f"git_timeout must be positive, got {self.git_timeout}")
        for ext in self.file_extensions:
            if not ext.startswith("."):
                raise ConfigError(f"extension must start with '.': {ext!r}")


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"option {name} expects a boolean, got {value!r}")


def _read_sections(conf: Path) -> dict[str, list[str]]:
    """Split a conf file into ``{section: [lines]}``.

    Format: ``[section]`` headers, # comments, blank lines ignored.
    Lines before the first header are ignored.
    """
    sections: dict[str, list[str]] = {}
    current: list[str] | None = None
    for raw_line in conf.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") and line.endswith("]"):
            current = sections.setdefault(line[1:-1].strip().lower(), [])
            continue
        if current is not None:
            current.append(line)
    return sections


def load_config(root: str | Path, base: TrackerConfig | None = None) -> TrackerConfig:
    """Load ``.attention/attention.conf`` under root on top of ``base``.

    Returns ``base`` (or the defaults) unchanged when no conf file exists.
    """
    config = base or TrackerConfig()
    conf = Path(root) / CONFIG_FILE
    if not conf.is_file():
        return config

    sections = _read_sections(conf)
    changes: dict[str, object] = {}

    for section, attr in _LIST_SECTIONS.items():
        entries = sections.get(section, [])
        if entries:
            existing = getattr(config, attr)
            changes[attr] = existing + tuple(e for e in entries if e not in existing)

    for line in sections.get("options", []):
        if "=" not in line:
            raise ConfigError(f"{conf}: expected key=value in [options], got {line!r}")
        key, value = (part.strip() for part in line.split("=", 1))
        if key in ("include_all_extensions", "track_files"):
            changes[key] = _parse_bool(key, value)
        elif key == "git_timeout":
            try:
                changes[key] = float(value)
            except ValueError as exc:
                raise ConfigError(f"git_timeout expects a number, got {value!r}") from exc
        else:
            raise ConfigError(f"{conf}: unknown option {key!r}")

    log.debug("Loaded %s (%d overrides)", conf, len(changes))
    return replace(config, **changes)


def resolve_root(path: str | Path | None = None) -> Path:
    """Resolve the tracked-tree root.

    Uses the given path, or ATTENTION_ROOT env, or the git top level of the
    current directory, or the current directory itself.
    """
    if path:
        return Path(path).resolve()

    env_root = os.environ.get("ATTENTION_ROOT", "")
    if env_root:
        return Path(env_root).resolve()

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            check=True,
            timeout=DEFAULT_GIT_TIMEOUT,
        )
        top = result.stdout.strip()
        if top:
            return Path(top).resolve()
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError, OSError):
        pass
    return Path.cwd().resolve()

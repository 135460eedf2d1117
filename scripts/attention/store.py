"""Attributes.ini / Priorities.ini read + write.

Flat INI: ``[Facet]`` headers, ``key=value`` lines. Values are kept as
their original text so a read-modify-write cycle only touches the keys a
caller changed; section and key order are preserved. Numeric views (for
the resolver) skip values that are not floats, such as git_object_id.

Writes go to a temp file in the same directory followed by os.replace.
There is no locking: two concurrent writers can lose updates.
"""

from __future__ import annotations

import configparser
import logging
import os
import tempfile
from pathlib import Path

from .config import ATTRIBUTES_FILE, PRIORITIES_FILE
from .models import IDENTITY_KEY, FacetData

log = logging.getLogger(__name__)

# configparser treats [DEFAULT] specially; use a name no facet will have
_NO_DEFAULT_SECTION = "\x00attention-default"

# {facet: {key: raw value}}
RawFacets = dict[str, dict[str, str]]


class MalformedStoreError(ValueError):
    """A store file exists but cannot be parsed."""

    def __init__(self, path: str | Path, detail: str) -> None:
        super().__init__(f"{path}: {detail}")
        self.path = str(path)
        self.detail = detail


def _parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        interpolation=None,
        default_section=_NO_DEFAULT_SECTION,
        delimiters=("=",),
        comment_prefixes=("#", ";"),
        strict=True,
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


def format_value(value: float | str) -> str:
    """Serialise a store value (floats as repr, e.g. 0.0, 0.25)."""
    if isinstance(value, str):
        return value
    return repr(float(value))


def parse_text(text: str, source: str | Path = "<string>") -> RawFacets:
    """Parse store text into ordered ``{facet: {key: raw}}``."""
    parser = _parser()
    try:
        parser.read_string(text, source=str(source))
    except configparser.Error as exc:
        raise MalformedStoreError(source, str(exc).splitlines()[0]) from exc
    return {
        section: {key: value.strip() for key, value in parser.items(section)}
        for section in parser.sections()
    }


def render_text(data: RawFacets) -> str:
    """Render ``{facet: {key: value}}`` as store text.

    Sections are separated by one blank line; keys are written as
    ``key=value`` with no spaces around ``=``.
    """
    blocks = []
    for section, values in data.items():
        lines = [f"[{section}]"]
        lines.extend(f"{key}={format_value(value)}" for key, value in values.items())
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n" if blocks else ""


def read_raw(path: str | Path) -> RawFacets:
    """Read a store file. Missing file -> empty mapping.

    Raises MalformedStoreError when the file cannot be parsed or decoded.
    """
    p = Path(path)
    if not p.is_file():
        return {}
    try:
        text = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedStoreError(p, f"not UTF-8 text ({exc.reason})") from exc
    return parse_text(text, source=p)


def to_numeric(raw: RawFacets) -> FacetData:
    """Float view of a store; identities and non-numeric values are dropped."""
    numeric: FacetData = {}
    for section, values in raw.items():
        facet: dict[str, float] = {}
        for key, value in values.items():
            # a SHA can be all digits or parse as an exponent
            if key == IDENTITY_KEY:
                continue
            try:
                facet[key] = float(value)
            except ValueError:
                continue
        numeric[section] = facet
    return numeric


def read_store(path: str | Path) -> FacetData:
    """Numeric ``{facet: {key: float}}`` view of a store file."""
    return to_numeric(read_raw(path))


def write_raw(path: str | Path, data: RawFacets) -> None:
    """Replace a store file with ``data`` (atomic rename, no locking)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{p.name}.tmp.", dir=str(p.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(render_text(data))
        os.replace(tmp_path, p)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    log.info("Wrote %s (%d facets)", p, len(data))


def attributes_path(directory: str | Path) -> Path:
    return Path(directory) / ATTRIBUTES_FILE


def priorities_path(directory: str | Path) -> Path:
    return Path(directory) / PRIORITIES_FILE

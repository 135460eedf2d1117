"""Hierarchical attribute/priority resolution.

A directory's resolved view is every ancestor's store merged root-first,
nearer ancestors overriding farther ones, with the directory's own store
applied last. Merging is per key, not per facet: a subdirectory can add
or override one key of an inherited facet without dropping its siblings.

A directory's own store is Attributes.ini / Priorities.ini plus any
auxiliary files in ``.as/folder/``. Auxiliary files are typed by name:
``Priorities.ini`` holds priorities, every other ``*.ini`` holds
attributes, and a ``[Default]`` section in an attribute file is renamed
after the file stem (``Security.ini [Default]`` -> facet ``Security``).

Resolved views are recomputed on every call and never written back.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import TrackerConfig
from .models import FacetData, ResolvedTree
from .scanner import AUX_STORE_DIR, DirectoryScanner, relative_dir
from .store import MalformedStoreError, attributes_path, priorities_path, read_store

log = logging.getLogger(__name__)

AUX_DEFAULT_SECTION = "Default"
AUX_PRIORITIES_STEM = "priorities"

# (attributes, priorities) declared by one directory itself
OwnStore = tuple[FacetData, FacetData]


def merge_facets(base: FacetData, override: FacetData) -> FacetData:
    """Key-level merge; override wins. Neither input is modified."""
    result = {facet: dict(values) for facet, values in base.items()}
    for facet, values in override.items():
        result.setdefault(facet, {}).update(values)
    return result


def _read_or_empty(path: Path) -> FacetData:
    try:
        return read_store(path)
    except MalformedStoreError as exc:
        log.warning("Ignoring malformed store %s", exc)
        return {}
    except OSError as exc:
        log.warning("Cannot read %s: %s", path, exc)
        return {}


def read_aux_stores(directory: Path) -> OwnStore:
    """Attributes and priorities from ``<directory>/.as/folder/*.ini``."""
    attributes: FacetData = {}
    priorities: FacetData = {}
    aux_dir = directory / AUX_STORE_DIR
    if not aux_dir.is_dir():
        return attributes, priorities

    for ini_file in sorted(aux_dir.glob("*.ini")):
        data = _read_or_empty(ini_file)
        if ini_file.stem.lower() == AUX_PRIORITIES_STEM:
            priorities = merge_facets(priorities, data)
            continue
        if AUX_DEFAULT_SECTION in data:
            default = data.pop(AUX_DEFAULT_SECTION)
            data = merge_facets(data, {ini_file.stem: default})
        attributes = merge_facets(attributes, data)
    return attributes, priorities


class HierarchicalResolver:
    """Resolves inherited attribute/priority views for a tree."""

    def __init__(self, root: str | Path, config: TrackerConfig | None = None) -> None:
        self.scanner = DirectoryScanner(root, config)
        self.root = self.scanner.root
        self._cache: dict[Path, OwnStore] = {}

    # -----------------------------------------------------------------------
    # Per-directory data
    # -----------------------------------------------------------------------

    def own_store(self, directory: Path) -> OwnStore:
        """What the directory declares itself (no inheritance)."""
        cached = self._cache.get(directory)
        if cached is not None:
            return cached
        attributes = _read_or_empty(attributes_path(directory))
        priorities = _read_or_empty(priorities_path(directory))
        aux_attributes, aux_priorities = read_aux_stores(directory)
        own = (merge_facets(attributes, aux_attributes),
               merge_facets(priorities, aux_priorities))
        self._cache[directory] = own
        return own

    def _chain(self, directory: Path) -> list[Path]:
        """Root ... parent, directory (root first)."""
        chain = [directory]
        for parent in directory.parents:
            if parent != self.root and self.root not in parent.parents:
                break
            chain.append(parent)
        chain.reverse()
        return chain

    def _resolve(self, directory: Path) -> OwnStore:
        attributes: FacetData = {}
        priorities: FacetData = {}
        for level in self._chain(directory):
            own_attributes, own_priorities = self.own_store(level)
            attributes = merge_facets(attributes, own_attributes)
            priorities = merge_facets(priorities, own_priorities)
        return attributes, priorities

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def resolve_directory(self, directory: str | Path | None = None) -> OwnStore:
        """Resolved (attributes, priorities) for one directory."""
        self._cache = {}
        try:
            return self._resolve(self.scanner.resolve_dir(directory))
        finally:
            self._cache = {}

    def _directories(self) -> list[Path]:
        """Directories with a store in themselves or any ancestor."""
        anchors = {self.scanner.resolve_dir(rel) for rel in self.scanner.store_directories()}
        return [
            d for d in self.scanner.walk()
            if d in anchors or any(p in anchors for p in d.parents)
        ]

    def resolve(self) -> ResolvedTree:
        """Resolved views for every directory with data, keyed by relative path.

        Directories whose resolved view is empty are omitted.
        """
        self._cache = {}
        tree = ResolvedTree()
        try:
            for directory in self._directories():
                rel = relative_dir(self.root, directory)
                attributes, priorities = self._resolve(directory)
                if attributes:
                    tree.attributes[rel] = attributes
                if priorities:
                    tree.priorities[rel] = priorities
        finally:
            self._cache = {}
        log.debug("Resolved %d attribute and %d priority views",
                  len(tree.attributes), len(tree.priorities))
        return tree


def resolve(root: str | Path, config: TrackerConfig | None = None) -> ResolvedTree:
    """Convenience wrapper: HierarchicalResolver(root, config).resolve()."""
    return HierarchicalResolver(root, config).resolve()

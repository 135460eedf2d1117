"""File facet lifecycle: create, update, refresh, cleanup.

Each tracked file gets a ``File:<name>`` facet in its directory's
Attributes.ini carrying its content identity (git_object_id) and a
review_status that starts at 0.0. Only the identity key is ever rewritten
by the synchronizer; every other key belongs to the user.

All operations are idempotent and return result dataclasses rather than
raising for expected conditions (no files, no store, unreadable file,
malformed store).
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import TrackerConfig
from .identity import ContentIdentityResolver
from .models import (
    IDENTITY_KEY,
    MALFORMED_STORE,
    NO_TRACKABLE_FILES,
    REVIEW_KEY,
    STORE_MISSING,
    CleanupResult,
    FacetStatistics,
    FileFacet,
    FileFailure,
    RefreshResult,
    RepositorySyncResult,
    SyncResult,
    parse_facet,
)
from .scanner import DirectoryScanner
from .store import MalformedStoreError, RawFacets, attributes_path, format_value, read_raw, write_raw

log = logging.getLogger(__name__)

DEFAULT_REVIEW_STATUS = 0.0


class FacetSynchronizer:
    """Reconciles file facets of a directory against the files on disk."""

    def __init__(self, root: str | Path, config: TrackerConfig | None = None,
                 identity: ContentIdentityResolver | None = None) -> None:
        self.config = config or TrackerConfig()
        self.scanner = DirectoryScanner(root, self.config)
        self.root = self.scanner.root
        self.identity = identity or ContentIdentityResolver(
            self.root, timeout=self.config.git_timeout)

    def _load(self, dir_path: Path) -> RawFacets:
        """Existing facets; raises MalformedStoreError."""
        return read_raw(attributes_path(dir_path))

    # -----------------------------------------------------------------------
    # sync
    # -----------------------------------------------------------------------

    def sync(self, directory: str | Path | None = None) -> SyncResult:
        """Create facets for new files and refresh changed identities."""
        dir_path = self.scanner.resolve_dir(directory)
        rel = self.scanner.relative(dir_path)

        files = self.scanner.scan_directory(dir_path)
        if not files:
            return SyncResult(directory=rel, success=False, reason=NO_TRACKABLE_FILES)

        store_file = attributes_path(dir_path)
        try:
            facets = self._load(dir_path)
        except MalformedStoreError as exc:
            log.warning("Skipping %s: %s", rel, exc)
            return SyncResult(directory=rel, success=False, reason=MALFORMED_STORE,
                              total=len(files))

        result = SyncResult(directory=rel, total=len(files))
        dirty = False
        for filename in files:
            ident = self.identity.identity(dir_path / filename)
            if not ident.success:
                result.failures.append(FileFailure(filename, ident.reason))
                continue

            section = FileFacet(filename).section
            facet = facets.get(section)
            if facet is None:
                facets[section] = {
                    IDENTITY_KEY: ident.sha,
                    REVIEW_KEY: format_value(DEFAULT_REVIEW_STATUS),
                }
                result.created += 1
                continue

            if facet.get(IDENTITY_KEY) != ident.sha:
                facet[IDENTITY_KEY] = ident.sha
                result.updated += 1
            if REVIEW_KEY not in facet:
                facet[REVIEW_KEY] = format_value(DEFAULT_REVIEW_STATUS)
                dirty = True

        if result.created or result.updated or dirty:
            write_raw(store_file, facets)
        log.debug("%s", result.message)
        return result

    def sync_repository(self) -> RepositorySyncResult:
        """sync() every directory that has trackable files."""
        totals = RepositorySyncResult()
        for rel in self.scanner.scan_repository():
            result = self.sync(rel)
            totals.results.append(result)
            if result.success:
                totals.directories += 1
                totals.created += result.created
                totals.updated += result.updated
        log.info("%s", totals.message)
        return totals

    # -----------------------------------------------------------------------
    # refresh / cleanup
    # -----------------------------------------------------------------------

    def refresh_identities(self, directory: str | Path | None = None) -> RefreshResult:
        """Recompute identities of existing file facets whose file exists.

        Facets whose file is gone are left alone (see cleanup).
        """
        dir_path = self.scanner.resolve_dir(directory)
        rel = self.scanner.relative(dir_path)
        store_file = attributes_path(dir_path)
        if not store_file.is_file():
            return RefreshResult(directory=rel, success=False, reason=STORE_MISSING)
        try:
            facets = self._load(dir_path)
        except MalformedStoreError as exc:
            log.warning("Skipping %s: %s", rel, exc)
            return RefreshResult(directory=rel, success=False, reason=MALFORMED_STORE)

        result = RefreshResult(directory=rel)
        for section, values in facets.items():
            facet = parse_facet(section)
            if not isinstance(facet, FileFacet):
                continue
            file_path = dir_path / facet.filename
            if not file_path.exists():
                continue
            ident = self.identity.identity(file_path)
            if not ident.success:
                result.failures.append(FileFailure(facet.filename, ident.reason))
                continue
            if values.get(IDENTITY_KEY) != ident.sha:
                values[IDENTITY_KEY] = ident.sha
                result.updated += 1

        if result.updated:
            write_raw(store_file, facets)
        return result

    def cleanup(self, directory: str | Path | None = None) -> CleanupResult:
        """Remove file facets whose backing file no longer exists."""
        dir_path = self.scanner.resolve_dir(directory)
        rel = self.scanner.relative(dir_path)
        store_file = attributes_path(dir_path)
        if not store_file.is_file():
            return CleanupResult(directory=rel, success=False, reason=STORE_MISSING)
        try:
            facets = self._load(dir_path)
        except MalformedStoreError as exc:
            log.warning("Skipping %s: %s", rel, exc)
            return CleanupResult(directory=rel, success=False, reason=MALFORMED_STORE)

        stale: list[str] = []
        for section in facets:
            facet = parse_facet(section)
            if isinstance(facet, FileFacet) and not (dir_path / facet.filename).exists():
                stale.append(section)
        for section in stale:
            del facets[section]

        if stale:
            write_raw(store_file, facets)
            log.info("Removed %d facets for deleted files in %s", len(stale), rel)
        return CleanupResult(directory=rel, removed=len(stale))

    # -----------------------------------------------------------------------
    # statistics
    # -----------------------------------------------------------------------

    def statistics(self, directory: str | Path | None = None) -> FacetStatistics:
        """Count file-derived vs manual facets. Never writes."""
        dir_path = self.scanner.resolve_dir(directory)
        rel = self.scanner.relative(dir_path)
        stats = FacetStatistics(directory=rel, git_repository=self.identity.git_repository)
        if not attributes_path(dir_path).is_file():
            stats.success = False
            stats.reason = STORE_MISSING
            return stats
        try:
            facets = self._load(dir_path)
        except MalformedStoreError as exc:
            log.warning("Skipping %s: %s", rel, exc)
            stats.success = False
            stats.reason = MALFORMED_STORE
            return stats

        for section in facets:
            if isinstance(parse_facet(section), FileFacet):
                stats.file_facets += 1
            else:
                stats.manual_facets += 1
        return stats

"""Data models for attention tracking.

Zero external dependencies -- pure Python dataclasses.

  - FileFacet / ManualFacet: tagged facet names (``File:`` prefix only at
    the INI boundary, see parse_facet)
  - IdentityResult: outcome of one content-identity computation
  - SyncResult, RefreshResult, CleanupResult, FacetStatistics,
    RepositorySyncResult: synchronizer outcomes
  - ResolvedTree: per-directory inherited attribute/priority views
  - RankingItem: one (path, facet, key) with its score and urgency
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

# ---------------------------------------------------------------------------
# Failure reasons
# ---------------------------------------------------------------------------

FILE_UNREADABLE = "file_unreadable"
NO_TRACKABLE_FILES = "no_trackable_files"
STORE_MISSING = "store_missing"
VCS_UNAVAILABLE = "vcs_unavailable"
MALFORMED_STORE = "malformed_store"

FILE_FACET_PREFIX = "File:"

# Keys every file facet carries
IDENTITY_KEY = "git_object_id"
REVIEW_KEY = "review_status"

# {facet: {key: value}} for one directory
FacetData = dict[str, dict[str, float]]
# {path: {facet: {key: value}}} for the whole tree
TreeData = dict[str, FacetData]


# ---------------------------------------------------------------------------
# Facets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileFacet:
    """Facet derived from a tracked file in the same directory."""

    filename: str

    @property
    def section(self) -> str:
        return f"{FILE_FACET_PREFIX}{self.filename}"


@dataclass(frozen=True)
class ManualFacet:
    """User- or tool-authored facet (e.g. TechnicalDebt)."""

    name: str

    @property
    def section(self) -> str:
        return self.name


Facet = Union[FileFacet, ManualFacet]


def parse_facet(section: str) -> Facet:
    """Classify an INI section name."""
    if section.startswith(FILE_FACET_PREFIX):
        return FileFacet(section[len(FILE_FACET_PREFIX):])
    return ManualFacet(section)


# ---------------------------------------------------------------------------
# Content identity
# ---------------------------------------------------------------------------


@dataclass
class IdentityResult:
    """Content identity of one file, or the reason it has none."""

    path: str
    sha: str = ""
    source: str = ""              # "git" or "manual"
    reason: str = ""              # FILE_UNREADABLE on failure

    @property
    def success(self) -> bool:
        return bool(self.sha)


# ---------------------------------------------------------------------------
# Synchronizer results
# ---------------------------------------------------------------------------


@dataclass
class FileFailure:
    """A file skipped during synchronization."""

    filename: str
    reason: str = FILE_UNREADABLE


@dataclass
class SyncResult:
    """Outcome of FacetSynchronizer.sync for one directory."""

    directory: str
    success: bool = True
    created: int = 0
    updated: int = 0
    total: int = 0
    reason: str = ""
    failures: list[FileFailure] = field(default_factory=list)

    @property
    def message(self) -> str:
        if not self.success:
            return f"{self.directory}: {self.reason}"
        return (f"Created {self.created} and updated {self.updated} "
                f"file facets in {self.directory}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "directory": self.directory,
            "success": self.success,
            "created": self.created,
            "updated": self.updated,
            "total": self.total,
            "reason": self.reason,
            "failures": [f.filename for f in self.failures],
        }


@dataclass
class RepositorySyncResult:
    """Totals of a sync across every discovered directory."""

    directories: int = 0
    created: int = 0
    updated: int = 0
    results: list[SyncResult] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (f"Processed {self.directories} directories: created "
                f"{self.created}, updated {self.updated} file facets")


@dataclass
class RefreshResult:
    """Outcome of FacetSynchronizer.refresh_identities."""

    directory: str
    success: bool = True
    updated: int = 0
    reason: str = ""
    failures: list[FileFailure] = field(default_factory=list)


@dataclass
class CleanupResult:
    """Outcome of FacetSynchronizer.cleanup."""

    directory: str
    success: bool = True
    removed: int = 0
    reason: str = ""


@dataclass
class FacetStatistics:
    """File-derived vs manual facet counts for one directory."""

    directory: str
    success: bool = True
    file_facets: int = 0
    manual_facets: int = 0
    git_repository: bool = False
    reason: str = ""

    @property
    def total(self) -> int:
        return self.file_facets + self.manual_facets

    def to_dict(self) -> dict[str, Any]:
        return {
            "directory": self.directory,
            "file_facets": self.file_facets,
            "manual_facets": self.manual_facets,
            "total": self.total,
            "git_repository": self.git_repository,
        }


# ---------------------------------------------------------------------------
# Resolution + ranking
# ---------------------------------------------------------------------------


@dataclass
class ResolvedTree:
    """Inherited attribute and priority views keyed by relative path.

    Computed view -- never written back to disk.
    """

    attributes: TreeData = field(default_factory=dict)
    priorities: TreeData = field(default_factory=dict)

    def paths(self) -> list[str]:
        return sorted(set(self.attributes) | set(self.priorities))

    def to_dict(self) -> dict[str, Any]:
        """Per-path view used by exporters: {path: {attributes, priorities}}."""
        return {
            path: {
                "attributes": self.attributes.get(path, {}),
                "priorities": self.priorities.get(path, {}),
            }
            for path in self.paths()
        }


@dataclass
class RankingItem:
    """One (path, facet, attribute) triple with its derived scores."""

    path: str
    facet: str
    attribute: str
    attribute_value: float = 0.0
    priority_value: float = 0.0

    @property
    def score(self) -> float:
        """attribute x priority -- lower is more urgent."""
        return self.attribute_value * self.priority_value

    @property
    def urgency(self) -> float:
        """(1 - attribute) x priority -- higher is more urgent."""
        return (1.0 - self.attribute_value) * self.priority_value

    @property
    def completion_percent(self) -> float:
        return round(self.attribute_value * 100, 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "facet": self.facet,
            "attribute": self.attribute,
            "attribute_value": self.attribute_value,
            "priority_value": self.priority_value,
            "score": self.score,
            "urgency": self.urgency,
            "completion_percent": self.completion_percent,
        }

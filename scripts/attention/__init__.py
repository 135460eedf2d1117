"""Attention -- attributes and priorities attached to a source tree.

Tracks how complete each part of a repository is (attributes) and how much
it matters (priorities), resolves both through directory inheritance and
ranks the result by unmet priority ("urgency").
No external dependencies beyond Python stdlib + git CLI.

Modules:
  - config: TrackerConfig, .attention/attention.conf loading, root resolution
  - models: Facets, result types, ranking items (dataclasses)
  - path_filter: include/exclude policy for candidate files
  - identity: git blob SHA with a bit-compatible manual fallback
  - scanner: per-directory scan and whole-tree directory discovery
  - store: Attributes.ini / Priorities.ini read + write
  - synchronizer: file facet create/update/cleanup lifecycle
  - resolver: hierarchical attribute/priority inheritance
  - calculator: score and urgency rankings
"""

from __future__ import annotations

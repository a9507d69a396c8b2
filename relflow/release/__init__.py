"""Release bounded context.

- semver, version_source, patch, bump: version identifiers and file rewriting
- changelog: pending/cumulative changelog curation
- gh, pods, carthage: adapters for the external tools
- preflight, publisher, next_version: the release stages
- pipeline, run_log: stage sequencing and the persisted run log
"""

from __future__ import annotations

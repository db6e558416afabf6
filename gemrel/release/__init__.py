"""Release bounded context.

- model: release identity and commit records
- semver: version resolution (literal or bumped)
- executor: command execution and verification
- changelog, notes, gh: release notes from history and pull request titles
- gate: operator confirmation
- fsm, pipeline: ordered steps and orchestration
"""

from __future__ import annotations

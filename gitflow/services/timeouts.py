from __future__ import annotations

# Hosting API calls (one deadline per call)
PLATFORM_TIMEOUT_SECONDS = 60.0

# Pause after changing the platform default branch, before deleting develop
DEFAULT_BRANCH_SETTLE_SECONDS = 2.0

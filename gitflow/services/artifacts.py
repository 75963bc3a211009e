"""Files written into a freshly initialized repository.

Both are write-if-absent: an existing file is never touched.
"""

from __future__ import annotations

from pathlib import Path

from gitflow.core.errors import ConfigurationError
from gitflow.core.result import Err, Ok, Result

__all__ = [
    "GITIGNORE_PATH",
    "GITIGNORE_TEMPLATE",
    "RELEASE_CONFIG_PATH",
    "RELEASE_CONFIG_TEMPLATE",
    "write_if_absent",
]

GITIGNORE_PATH = ".gitignore"
RELEASE_CONFIG_PATH = ".github/release.yml"

GITIGNORE_TEMPLATE = """\
# Dependencies
node_modules/
.pnp
.pnp.js
vendor/
.venv/
venv/

# Build output
dist/
build/
out/
*.tsbuildinfo
__pycache__/
*.py[cod]

# IDE
.idea/
.vscode/
*.swp
*.swo
.DS_Store
Thumbs.db

# Logs
logs/
*.log
npm-debug.log*
yarn-debug.log*
yarn-error.log*
pnpm-debug.log*

# Coverage
coverage/
.nyc_output/
.coverage
htmlcov/

# Environment
.env
.env.local
.env.*.local

# Temp files
tmp/
temp/
*.tmp
"""

RELEASE_CONFIG_TEMPLATE = """\
changelog:
  exclude:
    labels:
      - ignore-for-release
  categories:
    - title: Breaking Changes
      labels:
        - breaking-change
        - breaking
    - title: New Features
      labels:
        - feature
        - enhancement
    - title: Bug Fixes
      labels:
        - bug
        - fix
    - title: Documentation
      labels:
        - documentation
        - docs
    - title: Chores
      labels:
        - chore
        - maintenance
    - title: Dependencies
      labels:
        - dependencies
    - title: Other Changes
      labels:
        - "*"
"""


def write_if_absent(root: Path, rel_path: str, content: str) -> Result[bool, ConfigurationError]:
    """Write `content` to `root/rel_path` unless it exists. Returns True if written."""
    path = root / rel_path
    if path.exists():
        return Ok(False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        return Err(ConfigurationError(key=rel_path, message=f"failed to write {rel_path}: {e}", path=path))
    return Ok(True)

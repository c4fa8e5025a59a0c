#!/usr/bin/env python3
"""
Upload build artifacts to OpenStack Swift.

Wrapper around swift_artifact.cli for running from a checkout without
installing the package.

Usage:
    python scripts/upload.py --source "dist/*.tar.gz" --container releases
    python scripts/upload.py --config .swift-artifact.yaml --dry-run
"""

import sys
from pathlib import Path

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from swift_artifact.cli import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())

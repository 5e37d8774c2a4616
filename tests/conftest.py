"""Make the service namespace and the shared libraries importable without an install."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

for path in (ROOT / "libs" / "python", ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

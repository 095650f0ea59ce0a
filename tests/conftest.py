from __future__ import annotations

import sys
from pathlib import Path

# Import the local src tree, not an installed copy.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

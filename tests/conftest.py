import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from gridcrawl.map.grid import GridMap  # noqa: E402


@pytest.fixture
def open_room():
    """9x9 map: a wall frame around a 7x7 floor."""
    rows = ["#########"] + ["#.......#" for _ in range(7)] + ["#########"]
    return GridMap.from_ascii(rows)

"""
Pytest configuration and fixtures for zd-lookup tests.
"""

import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing zd_lookup
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from zd_lookup.models import Entry  # noqa: E402


# Configure anyio to only use asyncio (not trio)
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sample_entries() -> list[Entry]:
    """Dictionary used by the longest-match scenarios."""
    return [
        Entry(vn="con chó", en="dog"),
        Entry(vn="con chó con", en="puppy"),
        Entry(vn="con mèo", en="cat"),
    ]

"""
Pytest configuration and fixtures for ddb-normalizer tests.
"""

import json
import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing ddb_normalizer
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    """Load a fixture file, stripping the API envelope if present."""
    with open(FIXTURES_DIR / name) as f:
        data = json.load(f)
    if isinstance(data.get("data"), dict):
        data = data["data"]
    return data


# Configure anyio to only use asyncio (not trio)
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def ddb_fighter_rogue():
    """Fighter 5 / Rogue 3 Half-Elf carrying 80 lb."""
    return load_fixture("ddb_fighter_rogue.json")


@pytest.fixture
def ddb_warlock():
    """Warlock 5 Tiefling with a Bag of Holding."""
    return load_fixture("ddb_warlock.json")

"""
Shared fixtures for engine tests
"""

import json
import os
import sys
from pathlib import Path

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from casebrain_engine.schemas import Document, PracticeArea


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_bundle(name: str) -> dict:
    """Load a fixture bundle and build its Document objects"""
    with open(FIXTURES_DIR / name, "r", encoding="utf-8") as f:
        bundle = json.load(f)
    bundle["documents"] = [Document(**d) for d in bundle["documents"]]
    bundle["practice_area"] = PracticeArea(bundle["practice_area"])
    return bundle


@pytest.fixture
def criminal_bundle():
    return load_bundle("criminal_pace_breach.json")


@pytest.fixture
def thin_bundle():
    return load_bundle("thin_scanned.json")


@pytest.fixture
def contract_bundle():
    return load_bundle("civil_contract_no_angles.json")


@pytest.fixture
def sqlalchemy_db(tmp_path):
    """Fresh SQLite database per test"""
    from casebrain_engine.db.session import reset_engine, init_db

    old_db_url = os.environ.get("DATABASE_URL")
    db_path = tmp_path / "casebrain_test.db"
    os.environ["DATABASE_URL"] = f"sqlite:///{db_path}"
    reset_engine()
    init_db()
    yield db_path
    if old_db_url is not None:
        os.environ["DATABASE_URL"] = old_db_url
    else:
        os.environ.pop("DATABASE_URL", None)
    reset_engine()

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="session")
def api_client() -> Iterable[TestClient]:
    from celestial_api import app

    with TestClient(app) as client:
        yield client

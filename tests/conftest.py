"""
Shared test fixtures.

Mock Supabase client for the alias store, sample category schemas and
pastes, and FastAPI test clients.
"""

import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import patch
from typing import Generator

from services.alias_index_service import clear_alias_index_cache

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None):
        self._data = data or []
        self._count = count

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self._data = [row for row in self._data if row.get(column) == value]
        return self

    def gte(self, column, value):
        self._data = [row for row in self._data if (row.get(column) or 0) >= value]
        return self

    def order(self, column, desc: bool = False):
        self._data = sorted(self._data, key=lambda row: row.get(column) or 0, reverse=desc)
        return self

    def limit(self, count):
        self._data = self._data[:count]
        return self

    def execute(self) -> MockSupabaseResponse:
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None):
        self._data = data or []
        self._count = count

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._data.copy(), self._count)


class MockSupabaseClient:
    """Mock Supabase client. RPC calls are recorded, not executed."""

    def __init__(self):
        self._tables = {}
        self.rpc_calls: list[tuple[str, dict]] = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(config["data"], config["count"])

    def rpc(self, name: str, params: dict) -> MockSupabaseQuery:
        self.rpc_calls.append((name, params))
        return MockSupabaseQuery([])


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def fresh_alias_index_cache():
    """Every test starts without memoized alias indexes."""
    clear_alias_index_cache()
    yield
    clear_alias_index_cache()


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("smart_paste_aliases", [
                {"source_key": "heft", "spec_name": "Weight", "usage_count": 5}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("smart_paste_aliases", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.community_alias_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def sample_schema() -> dict:
    """Category schema covering cameras, lenses and audio."""
    return {
        "Cameras": [
            {"name": "Sensor Type", "required": True},
            {"name": "Effective Pixels"},
            {"name": "ISO Range"},
            {"name": "Video Resolution"},
            {"name": "Weight"},
            {"name": "Dimensions"},
            {"name": "Weather Sealing"},
        ],
        "Lenses": [
            {"name": "Focal Length", "required": True},
            {"name": "Maximum Aperture"},
            {"name": "Filter Thread"},
            {"name": "Weight"},
        ],
        "Audio": [
            {"name": "Polar Pattern"},
            {"name": "Frequency Response"},
        ],
    }


@pytest.fixture
def camera_paste() -> str:
    """Plain-text camera listing as copied from a retailer page."""
    return "\n".join([
        "Sony Alpha 7 IV Mirrorless Camera",
        "Sensor Type: Full-Frame CMOS",
        "Effective Pixels: 33 MP",
        "ISO: 100-51200",
        "Weight: 1.45 lb",
        "Warranty: 1 Year Limited",
        "Serial Number: 4012345",
        "Sale Price: $2,498.00",
        "MSRP: $2,798.00",
    ])


@pytest.fixture
def batch_paste() -> str:
    """Two products separated by a horizontal rule."""
    return "\n".join([
        "Sony A7 IV",
        "Sensor Type: Full Frame",
        "Weight: 658 g",
        "---",
        "Canon R5",
        "Sensor Type: Full Frame",
        "Weight: 738 g",
    ])


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/smart-paste/parse", json={...})
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def test_client_with_mock_db(mock_supabase):
    """
    Create FastAPI test client whose alias store is the mock client.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("smart_paste_aliases", [...])
            response = test_client_with_mock_db.get("/api/smart-paste/aliases")
    """
    from fastapi.testclient import TestClient
    from main import app
    from services.community_alias_service import CommunityAliasService

    service = CommunityAliasService(client=mock_supabase)
    with patch("routes.smart_paste.get_community_alias_service", return_value=service):
        yield TestClient(app)

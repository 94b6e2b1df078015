"""
API tests for the smart paste routes and app endpoints.

Run: pytest tests/unit/test_smart_paste_routes.py -v
"""

from unittest.mock import patch

from config.settings import settings
from config.database import ALIAS_TABLE, ALIAS_UPSERT_RPC
from tests.factories import CommunityAliasRowFactory

BASE = "/api/smart-paste"


class TestParseEndpoints:
    """Tests for /parse, /parse/batch and /boundaries"""

    def test_parse(self, test_client, camera_paste, sample_schema):
        """Parse should return camelCase fields with resolved values."""
        response = test_client.post(f"{BASE}/parse", json={"text": camera_paste, "schema": sample_schema})

        assert response.status_code == 200
        data = response.json()
        assert data["purchasePrice"] == "2498.00"
        assert data["category"] == "Cameras"
        assert data["fields"]["Weight"]["value"] == "1.45 lb"
        assert data["fields"]["Weight"]["sourceKey"] == "Weight"
        assert any(p["key"] == "Warranty" for p in data["unmatchedPairs"])

    def test_parse_empty_body(self, test_client):
        """An empty request should give an empty result."""
        response = test_client.post(f"{BASE}/parse", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["fields"] == {}
        assert data["name"] == ""
        assert data["rawExtracted"] == []

    def test_parse_surrogate_reference(self, test_client):
        """A reference to a surrogate code point should be dropped, not break the response."""
        response = test_client.post(f"{BASE}/parse", json={"text": "Weight: 2kg &#55357;"})

        assert response.status_code == 200
        data = response.json()
        assert data["sourceLines"] == ["Weight: 2kg"]

    def test_parse_with_community_aliases(self, test_client_with_mock_db, mock_supabase, sample_schema):
        """useCommunityAliases should pull aliases from the store."""
        mock_supabase.set_table_data(ALIAS_TABLE, [
            CommunityAliasRowFactory.create(source_key="heft", spec_name="Weight", usage_count=10),
        ])

        response = test_client_with_mock_db.post(f"{BASE}/parse", json={
            "text": "Heft: 2 kg",
            "schema": sample_schema,
            "useCommunityAliases": True,
        })

        assert response.status_code == 200
        assert response.json()["fields"]["Weight"]["value"] == "2 kg"

    def test_parse_batch_single_product(self, test_client, camera_paste, sample_schema):
        """A paste without boundaries should give one item."""
        response = test_client.post(f"{BASE}/parse/batch", json={"text": camera_paste, "schema": sample_schema})

        assert response.status_code == 200
        items = response.json()
        assert len(items) == 1
        assert items[0]["segment"]["name"] == "Single Product"
        assert items[0]["result"]["brand"] == "Sony"

    def test_parse_batch_two_products(self, test_client, batch_paste, sample_schema):
        """A batch paste should give one item per product."""
        response = test_client.post(f"{BASE}/parse/batch", json={"text": batch_paste, "schema": sample_schema})

        assert response.status_code == 200
        assert [i["result"]["fields"]["Weight"]["value"] for i in response.json()] == ["658 g", "738 g"]

    def test_boundaries(self, test_client, batch_paste):
        """Boundaries should return the segments."""
        response = test_client.post(f"{BASE}/boundaries", json={"text": batch_paste})

        assert response.status_code == 200
        segments = response.json()
        assert len(segments) == 2
        assert segments[1]["startLine"] == 3
        assert segments[1]["endLine"] == 6

    def test_unexpected_error(self, test_client):
        """Unexpected errors should return a 500 INTERNAL_ERROR."""
        with patch("routes.smart_paste.get_smart_paste_service", side_effect=RuntimeError("boom")):
            response = test_client.post(f"{BASE}/parse", json={"text": "Weight: 1 kg"})

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"


class TestReviewEndpoints:
    """Tests for /apply, /diff, /normalize-units and /coerce"""

    def test_apply(self, test_client, camera_paste, sample_schema):
        """Apply should merge reviewer choices into the payload."""
        parsed = test_client.post(f"{BASE}/parse", json={"text": camera_paste, "schema": sample_schema}).json()

        response = test_client.post(f"{BASE}/apply", json={
            "parseResult": parsed,
            "selectedValues": {"Weight": "1.5 lb", "_manualMappings": {"Warranty": "1 Year Limited"}},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["purchasePrice"] == "2498.00"
        assert data["specs"]["Weight"] == "1.5 lb"
        assert data["specs"]["Warranty"] == "1 Year Limited"

    def test_apply_normalize_metric(self, test_client, camera_paste, sample_schema):
        """normalizeMetric should convert imperial values."""
        parsed = test_client.post(f"{BASE}/parse", json={"text": camera_paste, "schema": sample_schema}).json()

        response = test_client.post(f"{BASE}/apply", json={"parseResult": parsed, "normalizeMetric": True})

        assert response.status_code == 200
        assert response.json()["specs"]["Weight"] == "658 g"

    def test_apply_missing_parse_result(self, test_client):
        """parseResult is required."""
        response = test_client.post(f"{BASE}/apply", json={})

        assert response.status_code == 422

    def test_diff(self, test_client):
        """Diff should classify changed and added fields."""
        response = test_client.post(f"{BASE}/diff", json={
            "existingSpecs": {"A": "1"},
            "newFields": {"A": {"value": "2"}, "B": {"value": "3"}},
        })

        assert response.status_code == 200
        assert [(e["specName"], e["status"]) for e in response.json()] == [("A", "changed"), ("B", "added")]

    def test_normalize_units(self, test_client):
        """Dimensions in inches should convert to millimetres."""
        response = test_client.post(f"{BASE}/normalize-units", json={"value": "6.5 x 4.3 x 3.1 inches"})

        assert response.status_code == 200
        assert response.json()["normalized"] == "165 × 109 × 79 mm"

    def test_normalize_units_nothing_to_do(self, test_client):
        """A value without units should give null."""
        response = test_client.post(f"{BASE}/normalize-units", json={"value": "Black"})

        assert response.status_code == 200
        assert response.json() is None

    def test_coerce(self, test_client):
        """Boolean fields should coerce to Yes/No."""
        response = test_client.post(f"{BASE}/coerce", json={"specName": "Weather Sealing", "value": "included"})

        assert response.status_code == 200
        assert response.json() == {"original": "included", "coerced": "Yes"}


class TestAcquisitionEndpoints:
    """Tests for /extract and /fetch-page"""

    def test_extract_text_file(self, test_client):
        """A text upload should come back as text."""
        response = test_client.post(
            f"{BASE}/extract",
            files={"file": ("specs.txt", b"Weight: 1 kg", "text/plain")},
        )

        assert response.status_code == 200
        assert response.json()["text"] == "Weight: 1 kg"
        assert response.json()["source"] == "text"

    def test_extract_unsupported(self, test_client):
        """Unsupported uploads should be rejected with 422."""
        response = test_client.post(
            f"{BASE}/extract",
            files={"file": ("specs.zip", b"PK\x03\x04", "application/zip")},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "UNSUPPORTED_FILE_TYPE"

    def test_fetch_page_without_proxy(self, test_client):
        """Without a proxy, page import should be refused."""
        with patch.object(settings, "product_page_proxy_url", None):
            response = test_client.post(f"{BASE}/fetch-page", json={"url": "https://shop.example.com/a7iv"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "PROXY_NOT_CONFIGURED"

    def test_fetch_page_rejects_non_http(self, test_client):
        """Only http(s) URLs should be accepted."""
        response = test_client.post(f"{BASE}/fetch-page", json={"url": "ftp://shop.example.com/a7iv"})

        assert response.status_code == 422


class TestAliasEndpoints:
    """Tests for /aliases"""

    def test_list_aliases(self, test_client_with_mock_db, mock_supabase):
        """Listing should apply the usage threshold."""
        mock_supabase.set_table_data(ALIAS_TABLE, [
            CommunityAliasRowFactory.create(source_key="heft", usage_count=5),
            CommunityAliasRowFactory.create(source_key="mass", usage_count=2),
        ])

        response = test_client_with_mock_db.get(f"{BASE}/aliases")

        assert response.status_code == 200
        assert response.json() == {"heft": {"specName": "Weight", "usageCount": 5}}

    def test_list_aliases_min_usage(self, test_client_with_mock_db, mock_supabase):
        """minUsage should override the threshold."""
        mock_supabase.set_table_data(ALIAS_TABLE, [
            CommunityAliasRowFactory.create(source_key="heft", usage_count=5),
            CommunityAliasRowFactory.create(source_key="mass", usage_count=2),
        ])

        response = test_client_with_mock_db.get(f"{BASE}/aliases", params={"minUsage": 1})

        assert list(response.json()) == ["heft", "mass"]

    def test_record_alias(self, test_client_with_mock_db, mock_supabase):
        """Recording should upsert and return 204."""
        response = test_client_with_mock_db.post(f"{BASE}/aliases", json={
            "sourceKey": "Heft",
            "specName": "Weight",
            "category": "Cameras",
        })

        assert response.status_code == 204
        assert mock_supabase.rpc_calls == [
            (ALIAS_UPSERT_RPC, {"p_source_key": "heft", "p_spec_name": "Weight", "p_category": "Cameras"})
        ]

    def test_record_alias_validation(self, test_client_with_mock_db, mock_supabase):
        """A blank source key should be rejected."""
        response = test_client_with_mock_db.post(f"{BASE}/aliases", json={"sourceKey": "", "specName": "Weight"})

        assert response.status_code == 422
        assert mock_supabase.rpc_calls == []


class TestAppEndpoints:
    """Tests for /health and /"""

    def test_health(self, test_client):
        """A disabled alias store should still report healthy."""
        with patch("main.check_connection", return_value={"status": "disabled"}):
            response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["alias_store"] == {"status": "disabled"}

    def test_health_degraded(self, test_client):
        """An unreachable alias store should report degraded."""
        with patch("main.check_connection", return_value={"status": "unhealthy", "error": "timeout"}):
            response = test_client.get("/health")

        assert response.json()["status"] == "degraded"

    def test_root(self, test_client):
        """Root should list the smart paste endpoints."""
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "Smart Paste API"
        assert response.json()["endpoints"]["parse"] == "/api/smart-paste/parse"

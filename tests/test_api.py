"""
Tests for the Flask HTTP API.
"""

import pytest

from ledgerrecon import __version__
from ledgerrecon.api.app import app
from ledgerrecon.core.recon.profiles import get_profiles_dir


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client


class TestHealthAndProfiles:
    """Tests for GET /health and GET /profiles."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "healthy"
        assert body["service"] == "ledgerrecon"
        assert body["version"] == __version__

    def test_profiles(self, client):
        body = client.get("/profiles").get_json()
        assert body["total_profiles"] == 3
        names = [p["name"] for p in body["profiles"]]
        assert names == ["DEFAULT", "INVOICE", "PERCENT"]
        assert all(len(p["hash"]) == 64 for p in body["profiles"])


class TestSample:
    """Tests for GET /sample."""

    def test_sample(self, client):
        response = client.get("/sample")
        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "SUCCESS"
        assert body["result"]["summary"]["match_count"] == 3
        assert body["result"]["summary"]["variance_amount"] == pytest.approx(550.0)


class TestReconcile:
    """Tests for POST /reconcile."""

    def test_rows_payload(self, client):
        response = client.post("/reconcile", json={
            "left": [{"id": "INV-002", "amount": 8500}],
            "right": {"name": "bank.csv", "rows": [{"id": "INV-002", "amount": 8750}]},
            "key_columns": ["id"],
            "tolerance": 10,
        })
        assert response.status_code == 200
        body = response.get_json()
        assert body["result"]["summary"]["variance_count"] == 1
        assert body["result"]["variances"][0]["differences"] == {"amount": pytest.approx(-250.0)}

    def test_text_payload_with_profile(self, client):
        response = client.post("/reconcile", json={
            "left": {"name": "ledger.csv", "text": "Invoice ID,Amount\nINV-001,\"$1,000\"\n"},
            "right": {"name": "bank.tsv", "text": "Invoice ID\tAmount\nINV-001\t1005\n"},
            "profile": "INVOICE",
        })
        assert response.status_code == 200
        body = response.get_json()
        assert body["config"]["tolerance"] == 10.0
        assert body["result"]["summary"]["match_count"] == 1

    def test_invalid_config(self, client):
        response = client.post("/reconcile", json={"left": [], "right": [], "tolerance": 1})
        assert response.status_code == 400
        body = response.get_json()
        assert body["status"] == "ERROR"
        assert body["result"] is None

    @pytest.mark.parametrize("params", [
        {"key_columns": 5},
        {"key_columns": ["id"], "value_columns": "amount"},
        {"profile": ["INVOICE"]},
    ])
    def test_wrongly_typed_config_is_bad_request(self, client, params):
        response = client.post("/reconcile", json={"left": [{"id": "1"}], "right": [{"id": "1"}], **params})
        assert response.status_code == 400
        body = response.get_json()
        assert body["status"] == "ERROR"
        assert body["errors"]

    def test_profile_path_traversal_rejected(self, client):
        response = client.post("/reconcile", json={
            "left": [{"id": "1"}],
            "right": [{"id": "1"}],
            "profile": "../../../../etc/none",
        })
        assert response.status_code == 400
        errors = response.get_json()["errors"]
        assert any("Invalid profile name" in e for e in errors)
        assert all(str(get_profiles_dir()) not in e for e in errors)

    def test_missing_dataset(self, client):
        response = client.post("/reconcile", json={"left": []})
        assert response.status_code == 400
        assert "required" in response.get_json()["message"]

    def test_non_json_body(self, client):
        response = client.post("/reconcile", data="not json", content_type="text/plain")
        assert response.status_code == 400

    def test_bad_rows(self, client):
        response = client.post("/reconcile", json={"left": [1, 2], "right": [], "key_columns": ["id"]})
        assert response.status_code == 400

    def test_unparseable_text(self, client):
        response = client.post("/reconcile", json={
            "left": {"name": "empty.csv", "text": ""},
            "right": [],
            "key_columns": ["id"],
        })
        assert response.status_code == 400
        assert "Could not parse empty.csv" in response.get_json()["message"]

    def test_unexpected_error(self, client, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("ledgerrecon.api.app.run_reconciliation", boom)
        response = client.post("/reconcile", json={"left": [], "right": [], "key_columns": ["id"]})
        assert response.status_code == 500
        assert response.get_json()["error"] == "Internal server error"

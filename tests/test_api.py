"""
Tests for Flask API routes.

Tests the REST API endpoints.
"""

import pytest
import json
from unittest.mock import Mock, patch

from app import create_app
from config import TestingConfig


VCARD = "BEGIN:VCARD\nFN:Ada Lovelace\nORG:Analytical Engines\nEMAIL:ada@example.com\nEND:VCARD"


class TestAPIRoutes:
    """Test cases for API routes."""

    @pytest.fixture
    def app(self):
        """Create test Flask app."""
        app = create_app("testing")
        app.config["TESTING"] = True
        return app

    @pytest.fixture
    def client(self, app):
        """Create test client."""
        return app.test_client()

    def test_root_endpoint(self, client):
        """Test root endpoint returns API info."""
        response = client.get("/")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert "name" in data
        assert "version" in data
        assert "endpoints" in data

    def test_health_check(self, client):
        """Test health check endpoint."""
        response = client.get("/api/health")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["status"] == "healthy"

    def test_status_endpoint(self, client):
        """Test status endpoint."""
        with patch("api.routes.get_pipeline") as mock_get_pipeline:
            mock_pipeline = Mock()
            mock_pipeline.get_status.return_value = {"parser": "ContactParser"}
            mock_get_pipeline.return_value = mock_pipeline

            response = client.get("/api/status")

            assert response.status_code == 200
            data = json.loads(response.data)
            assert data["success"] is True
            assert data["data"]["limits"]["max_batch_size"] == TestingConfig.MAX_BATCH_SIZE

    def test_extract_text(self, client):
        """Test text extraction endpoint."""
        response = client.post("/api/extract", json={"text": "Ada Lovelace\nEngineer\nada@example.com"})

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["data"]["contact_data"]["name"] == "Ada Lovelace"
        assert data["data"]["normalized"]["primary_email"] == "ada@example.com"

    def test_extract_no_text(self, client):
        """Test extract endpoint without text."""
        response = client.post("/api/extract", json={})

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data["success"] is False

    def test_extract_wrong_type(self, client):
        """Test extract endpoint rejects non-string text."""
        response = client.post("/api/extract", json={"text": ["a"]})

        assert response.status_code == 400

    def test_extract_text_too_long(self, client):
        """Test extract endpoint enforces the text limit."""
        response = client.post("/api/extract", json={"text": "x" * (TestingConfig.MAX_TEXT_LENGTH + 1)})

        assert response.status_code == 400
        data = json.loads(response.data)
        assert "exceeds" in data["error"]

    def test_qr_payload(self, client):
        """Test QR payload endpoint."""
        response = client.post("/api/qr", json={"payload": VCARD})

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["data"]["contact_data"]["company"] == "Analytical Engines"
        assert data["data"]["normalized"]["full_name"] == "Ada Lovelace"

    def test_qr_no_payload(self, client):
        """Test QR endpoint without payload."""
        response = client.post("/api/qr", data="not json")

        assert response.status_code == 400

    def test_process_card(self, client):
        """Test full card processing with a QR payload."""
        response = client.post("/api/process", json={
            "front": "Ada Lovelace\nEngineer",
            "back": "+44 20 7946 0000",
            "qr": {"front": "mailto:ada@example.com"},
        })

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["contact_data"]["emails"] == ["ada@example.com"]
        assert data["normalized"]["primary_phone"] == "+44 20 7946 0000"

    def test_process_no_card(self, client):
        """Test process endpoint without a body."""
        response = client.post("/api/process")

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data["success"] is False

    def test_process_needs_front_or_qr(self, client):
        """Test a card needs OCR text or a QR payload."""
        response = client.post("/api/process", json={"back": "only back"})

        assert response.status_code == 400

    def test_process_invalid_qr(self, client):
        """Test a malformed qr object is rejected."""
        response = client.post("/api/process", json={"front": "x", "qr": "mailto:a@b.com"})

        assert response.status_code == 400

    def test_batch(self, client):
        """Test batch processing endpoint."""
        response = client.post("/api/batch", json={"cards": [
            {"front": "Ada Lovelace\nada@example.com"},
            {"qr": {"back": "tel:+49301234567"}},
        ]})

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["total"] == 2
        assert data["with_data"] == 2

    def test_batch_too_large(self, client):
        """Test batch size limit."""
        cards = [{"front": "x"}] * (TestingConfig.MAX_BATCH_SIZE + 1)
        response = client.post("/api/batch", json={"cards": cards})

        assert response.status_code == 400
        data = json.loads(response.data)
        assert "Too many cards" in data["error"]

    def test_batch_invalid_card(self, client):
        """Test a bad card names its index."""
        response = client.post("/api/batch", json={"cards": [{"front": "x"}, "nope"]})

        assert response.status_code == 400
        data = json.loads(response.data)
        assert "Card 1" in data["error"]

    def test_merge(self, client):
        """Test merge endpoint is left-biased."""
        response = client.post("/api/merge", json={
            "base": {"name": "Ada Lovelace", "phones": ["030 111"]},
            "extra": {"name": "Other", "company": "Analytical Engines", "address": "12 Main St"},
        })

        assert response.status_code == 200
        data = json.loads(response.data)["data"]
        assert data["contact_data"]["name"] == "Ada Lovelace"
        assert data["contact_data"]["company"] == "Analytical Engines"
        assert data["contact_data"]["phones"] == [{"value": "030 111"}]
        assert data["contact_data"]["address"] == [{"value": "12 Main St"}]

    def test_merge_missing_contact(self, client):
        """Test merge endpoint requires both contacts."""
        response = client.post("/api/merge", json={"base": {}})

        assert response.status_code == 400

    def test_normalize(self, client):
        """Test normalize endpoint."""
        response = client.post("/api/normalize", json={
            "contact": {"name": "Jane", "emails": ["jane@acme.com"], "phones": [{"value": "030 1", "label": "T"}]}
        })

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["data"] == {"full_name": "Jane", "primary_email": "jane@acme.com", "primary_phone": "030 1"}

    def test_normalize_invalid_contact(self, client):
        """Test normalize endpoint rejects bad field types."""
        response = client.post("/api/normalize", json={"contact": {"name": 7}})

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data["success"] is False

    def test_edit(self, client):
        """Test edit endpoint replaces only edited fields."""
        response = client.post("/api/edit", json={
            "contact": {"name": "Jane", "title": "Engineer"},
            "edits": {"title": "CTO"},
        })

        assert response.status_code == 200
        data = json.loads(response.data)["data"]
        assert data["contact_data"] == {"name": "Jane", "title": "CTO"}

    def test_edit_requires_edits(self, client):
        """Test edit endpoint requires an edits object."""
        response = client.post("/api/edit", json={"contact": {"name": "Jane"}})

        assert response.status_code == 400

    def test_boxes(self, client):
        """Test OCR box endpoint."""
        raw = {"pages": [{"dimensions": {"width": 800, "height": 500},
                          "lines": [{"text": "Ada", "bbox": [1, 1, 41, 11]}]}]}
        response = client.post("/api/boxes", json={"raw": raw})

        assert response.status_code == 200
        data = json.loads(response.data)["data"]
        assert data["dimensions"] == {"width": 800, "height": 500}
        assert data["boxes"][0]["text"] == "Ada"
        assert data["boxes"][0]["level"] == "line"

    def test_favicon(self, client):
        """Test favicon returns no content."""
        response = client.get("/favicon.ico")

        assert response.status_code == 204

    def test_404_handler(self, client):
        """Test 404 error handler."""
        response = client.get("/nonexistent")

        assert response.status_code == 404
        data = json.loads(response.data)
        assert data["success"] is False

    def test_405_handler(self, client):
        """Test 405 error handler."""
        response = client.get("/api/extract")

        assert response.status_code == 405
        data = json.loads(response.data)
        assert data["success"] is False

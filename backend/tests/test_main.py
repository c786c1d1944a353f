"""Tests for the FastAPI endpoints."""

import os
import pytest
import sys

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from main import app


SAMPLE_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "sample-family.ged")


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def sample_bytes():
    with open(SAMPLE_PATH, "rb") as f:
        return f.read()


def upload(client, path, content, filename="family.ged"):
    return client.post(path, files={"file": (filename, content, "text/plain")})


# ============================================================================
# Endpoint Tests
# ============================================================================

class TestHealth:
    def test_health(self, client):
        """Test the health check."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestValidateEndpoint:
    """Tests for POST /gedcom/validate."""

    def test_valid_file(self, client, sample_bytes):
        """Test a clean file with preview counts."""
        response = upload(client, "/gedcom/validate", sample_bytes)
        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is True
        assert body["findings"] == []
        assert body["preview"] == {"people": 6, "families": 2}

    def test_findings_reported(self, client):
        """Test findings are returned for a file with problems."""
        response = upload(client, "/gedcom/validate", b"0 @F1@ FAM\n1 HUSB @I9@\n")
        body = response.json()
        assert body["valid"] is False
        severities = sorted(f["severity"] for f in body["findings"])
        assert severities == ["error", "error", "warning"]

    def test_structural_error(self, client):
        """Test a structural error is reported as an invalid file."""
        response = upload(client, "/gedcom/validate", b"0 HEAD\n3 BAD\n0 TRLR\n")
        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is False
        assert body["findings"][0]["line_number"] == 2

    def test_malformed_utf16(self, client):
        """Test undecodable UTF-16 is reported as an invalid file."""
        response = upload(client, "/gedcom/validate", b"0\x00 \x00H")
        assert response.status_code == 200
        assert response.json()["valid"] is False


class TestImportEndpoint:
    """Tests for POST /gedcom/import."""

    def test_import(self, client, sample_bytes):
        """Test importing the sample file."""
        response = upload(client, "/gedcom/import", sample_bytes)
        assert response.status_code == 200
        body = response.json()
        assert len(body["people"]) == 6
        assert body["people"][0]["first_name"] == "John"
        assert body["people"][0]["date_of_birth"] == "1950-01-15"
        assert body["statistics"]["relationship_count"] == 16

    def test_wrong_extension(self, client, sample_bytes):
        """Test non-GEDCOM file names are rejected."""
        response = upload(client, "/gedcom/import", sample_bytes, filename="family.txt")
        assert response.status_code == 400

    def test_parse_error(self, client):
        """Test structural errors become HTTP 400."""
        response = upload(client, "/gedcom/import", b"0 HEAD\n3 BAD\n0 TRLR\n")
        assert response.status_code == 400
        assert "Line 2" in response.json()["detail"]

    def test_malformed_utf16(self, client):
        """Test undecodable UTF-16 uploads are rejected with 400."""
        response = upload(client, "/gedcom/import", b"0\x00 \x00H")
        assert response.status_code == 400
        assert "UTF-16" in response.json()["detail"]

    def test_upload_too_large(self, client, sample_bytes, monkeypatch):
        """Test the upload size limit."""
        monkeypatch.setenv("GEDCOM_MAX_UPLOAD_BYTES", "100")
        response = upload(client, "/gedcom/import", sample_bytes)
        assert response.status_code == 413


class TestExportEndpoint:
    """Tests for POST /gedcom/export."""

    def test_export(self, client):
        """Test exporting people and relationships."""
        payload = {
            "people": [
                {"id": "a", "first_name": "John", "last_name": "Smith", "gender": "MALE"},
                {"id": "b", "first_name": "Mary", "last_name": "Smith", "gender": "FEMALE"},
            ],
            "relationships": [
                {"person_id": "a", "related_person_id": "b", "type": "SPOUSE",
                 "marriage_date": "1972-06-10"},
            ],
            "options": {"generation_date": "2024-03-01", "source_program": "FamilyApp"},
        }
        response = client.post("/gedcom/export", json=payload)
        assert response.status_code == 200
        assert response.headers["content-disposition"] == (
            'attachment; filename="family-tree-2024-03-01.ged"'
        )
        text = response.text
        assert "1 SOUR FamilyApp" in text
        assert "1 HUSB @I1@\n1 WIFE @I2@\n1 MARR\n2 DATE 10 JUN 1972\n" in text
        assert text.endswith("0 TRLR\n")

    def test_export_then_import(self, client, sample_bytes):
        """Test an imported tree exports and imports again."""
        imported = upload(client, "/gedcom/import", sample_bytes).json()
        exported = client.post("/gedcom/export", json={
            "people": imported["people"],
            "relationships": imported["relationships"],
        })
        again = upload(client, "/gedcom/import", exported.content).json()
        assert len(again["people"]) == 6
        assert again["statistics"]["relationship_count"] == 16

    def test_invalid_payload(self, client):
        """Test request validation."""
        response = client.post("/gedcom/export", json={"people": [{"first_name": "No id"}]})
        assert response.status_code == 422

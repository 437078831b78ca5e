"""
Integration tests for the document API endpoints.

Tests cover:
- Health and version endpoints
- HTML import from JSON body and from uploaded files
- Upload validation (extension, size limit, charset)
- Export to full page, body fragment and plain text
- Default block creation
"""

import io

import pytest
import pytest_asyncio

from blockdoc.config import settings
from blockdoc.errors import MalformedInputError
from tests.fixtures.documents import EMAIL_TEMPLATE_HTML, WELCOME_HTML

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def client(async_client):
    """Provide async HTTP client for integration tests."""
    yield async_client


@pytest.fixture
def sections_payload(sample_sections):
    return [s.model_dump(mode="json") for s in sample_sections]


class TestServiceEndpoints:
    """Tests for health and version."""

    @pytest.mark.integration
    async def test_health(self, client):
        """Test health endpoint reports a working parser."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "blockdoc"
        assert data["uptime_seconds"] >= 0
        assert data["checks"] == {"html_parser": "ok"}

    @pytest.mark.integration
    async def test_version_lists_block_types(self, client):
        """Test version endpoint lists the block types."""
        response = await client.get("/api/v1/version")

        assert response.status_code == 200
        data = response.json()
        assert "paragraph" in data["block_types"]
        assert "raw-html" in data["block_types"]
        assert data["components"]

    @pytest.mark.integration
    async def test_request_id_echoed(self, client):
        """Test that a given request id is echoed back."""
        response = await client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert "X-Process-Time-Ms" in response.headers

    @pytest.mark.integration
    async def test_request_id_generated(self, client):
        """Test that a request id is generated when missing."""
        response = await client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 16


class TestImportHtml:
    """Tests for POST /api/v1/documents/import."""

    @pytest.mark.integration
    async def test_import_email_template(self, client):
        """Test importing an email template."""
        response = await client.post("/api/v1/documents/import", json={"html": EMAIL_TEMPLATE_HTML})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["is_native_format"] is False
        assert [s["column_count"] for s in data["sections"]] == [1, 2]
        assert data["summary"]["blocks"] == 5
        assert data["warnings"] == []

    @pytest.mark.integration
    async def test_import_welcome(self, client):
        """Test importing a heading and paragraph."""
        response = await client.post("/api/v1/documents/import", json={"html": WELCOME_HTML})

        data = response.json()
        blocks = data["sections"][0]["columns"][0]
        assert blocks[0]["type"] == "heading"
        assert blocks[0]["content"] == "Welcome"

    @pytest.mark.integration
    async def test_import_empty_gives_one_section(self, client):
        """Test that empty HTML imports as one empty section."""
        response = await client.post("/api/v1/documents/import", json={"html": ""})

        data = response.json()
        assert data["success"] is True
        assert data["summary"]["sections"] == 1
        assert data["summary"]["blocks"] == 0

    @pytest.mark.integration
    async def test_import_missing_field(self, client):
        """Test that a body without html is rejected."""
        response = await client.post("/api/v1/documents/import", json={})

        assert response.status_code == 422

    @pytest.mark.integration
    async def test_import_malformed_input(self, client, monkeypatch):
        """Test that malformed input returns 422."""
        def reject(html):
            raise MalformedInputError("no document tree")

        monkeypatch.setattr("blockdoc.api.routes.documents.parse_html", reject)

        response = await client.post("/api/v1/documents/import", json={"html": "<p>x</p>"})

        assert response.status_code == 422
        data = response.json()
        assert data["success"] is False
        assert "no document tree" in data["error"]

    @pytest.mark.integration
    async def test_import_unexpected_failure(self, client, monkeypatch):
        """Test that an unexpected parser failure returns an error body."""
        def explode(html):
            raise RuntimeError("boom")

        monkeypatch.setattr("blockdoc.api.routes.documents.parse_html", explode)

        response = await client.post("/api/v1/documents/import", json={"html": "<p>x</p>"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert "boom" in data["error"]


class TestImportFile:
    """Tests for POST /api/v1/documents/import/file."""

    @pytest.mark.integration
    async def test_upload_html_file(self, client):
        """Test importing an uploaded HTML file."""
        files = {"file": ("template.html", io.BytesIO(EMAIL_TEMPLATE_HTML.encode("utf-8")), "text/html")}

        response = await client.post("/api/v1/documents/import/file", files=files)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["summary"]["sections"] == 2

    @pytest.mark.integration
    async def test_upload_declared_charset(self, client):
        """Test that an upload is decoded with its declared charset."""
        html = "<p>Café résumé</p>".encode("windows-1252")
        files = {"file": ("legacy.htm", io.BytesIO(html), "text/html; charset=windows-1252")}

        response = await client.post("/api/v1/documents/import/file", files=files)

        block = response.json()["sections"][0]["columns"][0][0]
        assert block["content"] == "Café résumé"

    @pytest.mark.integration
    async def test_upload_wrong_extension(self, client):
        """Test that a non-HTML file extension is rejected."""
        files = {"file": ("notes.txt", io.BytesIO(b"<p>x</p>"), "text/plain")}

        response = await client.post("/api/v1/documents/import/file", files=files)

        assert response.status_code == 400
        assert ".html" in response.json()["detail"]

    @pytest.mark.integration
    async def test_upload_too_large(self, client, monkeypatch):
        """Test that an upload over the size limit is rejected."""
        monkeypatch.setattr(settings, "max_upload_size_mb", 0)
        files = {"file": ("big.html", io.BytesIO(b"<p>" + b"x" * 2048 + b"</p>"), "text/html")}

        response = await client.post("/api/v1/documents/import/file", files=files)

        assert response.status_code == 413

    @pytest.mark.integration
    async def test_upload_missing_file(self, client):
        """Test that a request without a file is rejected."""
        response = await client.post("/api/v1/documents/import/file")

        assert response.status_code == 422


class TestExportHtml:
    """Tests for POST /api/v1/documents/export."""

    @pytest.mark.integration
    async def test_export_full_page(self, client, sections_payload):
        """Test exporting a full HTML page."""
        response = await client.post("/api/v1/documents/export", json={"sections": sections_payload})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["html"].startswith("<!DOCTYPE html>")
        assert data["size_bytes"] == len(data["html"].encode("utf-8"))
        assert data["text"] is None

    @pytest.mark.integration
    async def test_export_body_with_text(self, client, sections_payload):
        """Test exporting the body with plain text."""
        response = await client.post(
            "/api/v1/documents/export",
            json={"sections": sections_payload, "body_only": True, "as_text": True},
        )

        data = response.json()
        assert "<html" not in data["html"]
        assert "Agreement for @Borrower" in data["text"]

    @pytest.mark.integration
    async def test_export_then_import_is_lossless(self, client, sections_payload):
        """Test that export then import returns the same sections."""
        exported = await client.post("/api/v1/documents/export", json={"sections": sections_payload})
        response = await client.post(
            "/api/v1/documents/import", json={"html": exported.json()["html"]}
        )

        data = response.json()
        assert data["is_native_format"] is True
        assert data["sections"] == sections_payload

    @pytest.mark.integration
    async def test_export_invalid_section(self, client):
        """Test that an invalid section is rejected."""
        response = await client.post(
            "/api/v1/documents/export",
            json={"sections": [{"column_count": 9, "columns": []}]},
        )

        assert response.status_code == 422


class TestDefaultBlock:
    """Tests for POST /api/v1/documents/blocks/default."""

    @pytest.mark.integration
    async def test_default_table(self, client):
        """Test the default table block."""
        response = await client.post("/api/v1/documents/blocks/default", json={"type": "table"})

        assert response.status_code == 200
        block = response.json()["block"]
        assert block["type"] == "table"
        assert len(block["rows"]) == 2
        assert all(len(row) == 3 for row in block["rows"])

    @pytest.mark.integration
    async def test_default_with_overrides(self, client):
        """Test a default block with overrides."""
        response = await client.post(
            "/api/v1/documents/blocks/default",
            json={"type": "heading", "overrides": {"level": "h3", "content": "Terms"}},
        )

        block = response.json()["block"]
        assert block["level"] == "h3"
        assert block["content"] == "Terms"

    @pytest.mark.integration
    async def test_invalid_override(self, client):
        """Test that an invalid override is rejected."""
        response = await client.post(
            "/api/v1/documents/blocks/default",
            json={"type": "heading", "overrides": {"level": "h9"}},
        )

        assert response.status_code == 422

    @pytest.mark.integration
    async def test_unknown_type(self, client):
        """Test that an unknown block type is rejected."""
        response = await client.post("/api/v1/documents/blocks/default", json={"type": "carousel"})

        assert response.status_code == 422

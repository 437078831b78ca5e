"""
Unit tests for the conversion CLI (cli/convert.py).

Tests cover:
- import: HTML file -> sections JSON
- export: JSON -> full page, body fragment or text
- roundtrip: fidelity report and exit code
- Error exit codes
"""

import json
from pathlib import Path

import pytest

from blockdoc.cli.convert import build_parser, load_sections, main, roundtrip_report
from blockdoc.export.html_serializer import serialize


@pytest.fixture
def sections_json(tmp_path, sample_sections):
    path = tmp_path / "doc.json"
    path.write_text(
        json.dumps({"sections": [s.model_dump(mode="json") for s in sample_sections]}),
        encoding="utf-8",
    )
    return path


class TestImportCommand:
    """Tests for `blockdoc import`."""

    @pytest.mark.unit
    def test_import_to_stdout(self, tmp_html_file, capsys):
        """Test import writes the sections JSON to stdout."""
        assert main(["import", tmp_html_file]) == 0

        document = json.loads(capsys.readouterr().out)
        assert document["summary"]["sections"] == 2
        assert document["sections"][1]["column_count"] == 2
        assert document["warnings"] == []

    @pytest.mark.unit
    def test_import_to_file(self, tmp_html_file, tmp_path):
        """Test import writes the sections JSON to the output file."""
        output = tmp_path / "out" / "doc.json"

        assert main(["import", tmp_html_file, "-o", str(output)]) == 0
        assert json.loads(output.read_text(encoding="utf-8"))["summary"]["blocks"] == 5

    @pytest.mark.unit
    def test_missing_file(self, tmp_path, capsys):
        """Test that a missing input file exits with an error."""
        assert main(["import", str(tmp_path / "nope.html")]) == 1
        assert "File not found" in capsys.readouterr().err


class TestExportCommand:
    """Tests for `blockdoc export`."""

    @pytest.mark.unit
    def test_export_full_page(self, sections_json, tmp_path):
        """Test export writes a full HTML page."""
        output = tmp_path / "page.html"

        assert main(["export", str(sections_json), "-o", str(output)]) == 0
        html = output.read_text(encoding="utf-8")
        assert html.startswith("<!DOCTYPE html>")
        assert "doc-metadata:" in html

    @pytest.mark.unit
    def test_export_body_only(self, sections_json, capsys):
        """Test export with --body-only omits the page wrapper."""
        assert main(["export", str(sections_json), "--body-only"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("<!-- doc-metadata:")
        assert "<html" not in out

    @pytest.mark.unit
    def test_export_text(self, sections_json, capsys):
        """Test export with --text writes plain text."""
        assert main(["export", str(sections_json), "--text"]) == 0

        out = capsys.readouterr().out
        assert "Agreement for @Borrower" in out
        assert "<div" not in out

    @pytest.mark.unit
    def test_body_only_and_text_are_exclusive(self, sections_json):
        """Test that --body-only and --text cannot be combined."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["export", str(sections_json), "--body-only", "--text"])

    @pytest.mark.unit
    def test_invalid_json_document(self, tmp_path, capsys):
        """Test that an invalid JSON document exits with an error."""
        path = tmp_path / "bad.json"
        path.write_text('[{"column_count": 9}]', encoding="utf-8")

        assert main(["export", str(path)]) == 1
        assert "Error" in capsys.readouterr().err

    @pytest.mark.unit
    def test_load_sections_accepts_bare_list(self, tmp_path, sample_sections):
        """Test that a bare list of sections is accepted."""
        path = tmp_path / "list.json"
        path.write_text(json.dumps([s.model_dump(mode="json") for s in sample_sections]), encoding="utf-8")

        assert [s.id for s in load_sections(path)] == [s.id for s in sample_sections]


class TestRoundtripCommand:
    """Tests for `blockdoc roundtrip`."""

    @pytest.mark.unit
    def test_native_export_is_lossless(self, tmp_path, sample_sections, capsys):
        """Test that exporting and re-importing a native document is lossless."""
        path = tmp_path / "native.html"
        path.write_text(serialize(sample_sections), encoding="utf-8")

        assert main(["roundtrip", str(path)]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["lossless"] is True
        assert report["reimport_native"] is True
        assert report["raw_html_blocks"] == 1

    @pytest.mark.unit
    def test_report_fields(self, tmp_html_file):
        """Test the fields of the roundtrip report."""
        report = roundtrip_report(Path(tmp_html_file))

        assert report["blocks"] == 5
        assert report["reimport_native"] is True
        assert report["export_size_bytes"] > 0

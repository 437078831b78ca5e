"""
Command-line interface for HTML <-> block document conversion.

Usage:
    # HTML -> sections JSON
    blockdoc import page.html -o doc.json

    # Sections JSON -> HTML (full page, body fragment or plain text)
    blockdoc export doc.json -o page.html
    blockdoc export doc.json --body-only
    blockdoc export doc.json --text

    # Import, re-export and re-import: reports what survived
    blockdoc roundtrip page.html
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from pydantic import TypeAdapter

from blockdoc.errors import MalformedInputError
from blockdoc.export.html_serializer import export_document, serialize
from blockdoc.export.text_converter import to_plain_text
from blockdoc.logging_config import setup_logging
from blockdoc.models.document import Section, iter_blocks
from blockdoc.parsing.html_parser import parse_html

# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)

sections_adapter = TypeAdapter(List[Section])


# ============================================================================
# CLI FUNCTIONS
# ============================================================================

def import_file(html_path: Path) -> dict:
    """
    Parse an HTML file into a JSON-ready document.

    Args:
        html_path: Path to the HTML file (bytes are charset-detected)

    Returns:
        Dict with sections, warnings and summary
    """
    result = parse_html(html_path.read_bytes())
    return {
        "sections": [section.model_dump(mode="json") for section in result.sections],
        "warnings": [warning.model_dump(mode="json") for warning in result.warnings],
        "summary": result.summary(),
    }


def load_sections(json_path: Path) -> List[Section]:
    """Load sections from a JSON file (a list, or an object with `sections`)."""
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("sections", [])
    return sections_adapter.validate_python(data)


def roundtrip_report(html_path: Path) -> dict:
    """
    Import, export and re-import a file and compare the two documents.

    Returns:
        Fidelity report: block counts, raw-html count, warnings and whether
        the re-import equals the first import
    """
    first = parse_html(html_path.read_bytes())
    exported = serialize(first.sections)
    second = parse_html(exported)

    first_dump = [s.model_dump(mode="json") for s in first.sections]
    second_dump = [s.model_dump(mode="json") for s in second.sections]
    return {
        "file": str(html_path),
        "blocks": sum(1 for _ in iter_blocks(first.sections)),
        "raw_html_blocks": first.raw_html_block_count(),
        "warnings": [w.message for w in first.warnings],
        "export_size_bytes": len(exported.encode("utf-8")),
        "reimport_native": second.is_native_format,
        "lossless": first_dump == second_dump,
    }


def write_output(text: str, output_path: Optional[Path]) -> None:
    """Write to a file, or stdout when no path is given."""
    if not output_path:
        print(text)
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    logger.info("output_written", path=str(output_path), size_bytes=len(text.encode("utf-8")))


# ============================================================================
# MAIN CLI
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockdoc",
        description="Convert HTML documents to and from the block document model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s import agreement.html -o agreement.json
  %(prog)s export agreement.json -o agreement.html
  %(prog)s export agreement.json --text
  %(prog)s roundtrip agreement.html
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="HTML file -> sections JSON")
    import_parser.add_argument("input", type=str, help="Path to .html file")
    import_parser.add_argument("--output", "-o", type=str, default=None, help="Output JSON path (default: stdout)")

    export_parser = subparsers.add_parser("export", help="Sections JSON -> HTML")
    export_parser.add_argument("input", type=str, help="Path to sections JSON")
    export_parser.add_argument("--output", "-o", type=str, default=None, help="Output path (default: stdout)")
    mode = export_parser.add_mutually_exclusive_group()
    mode.add_argument("--body-only", action="store_true", help="Export the body fragment only")
    mode.add_argument("--text", action="store_true", help="Export plain text instead of HTML")

    roundtrip_parser = subparsers.add_parser("roundtrip", help="Report round-trip fidelity of an HTML file")
    roundtrip_parser.add_argument("input", type=str, help="Path to .html file")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    input_path = Path(args.input)

    if not input_path.is_file():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        if args.command == "import":
            document = import_file(input_path)
            write_output(
                json.dumps(document, ensure_ascii=False, indent=2),
                Path(args.output) if args.output else None,
            )
            if args.verbose:
                summary = document["summary"]
                print(
                    f"\n✓ Imported {summary['blocks']} blocks in {summary['sections']} sections "
                    f"({summary['raw_html_blocks']} raw HTML)",
                    file=sys.stderr,
                )

        elif args.command == "export":
            sections = load_sections(input_path)
            if args.text:
                output = to_plain_text(sections)
            else:
                result = export_document(sections, body_only=args.body_only)
                output = result.html
                for warning in result.warnings:
                    print(f"Warning: {warning}", file=sys.stderr)
            write_output(output, Path(args.output) if args.output else None)

        else:
            report = roundtrip_report(input_path)
            print(json.dumps(report, ensure_ascii=False, indent=2))
            return 0 if report["lossless"] else 2

    except MalformedInputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        logger.error("cli_failed", error=str(e), exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

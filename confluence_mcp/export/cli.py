"""Command line entry point for the Markdown export."""

import argparse
import sys

from ..config import get_settings
from ..confluence_api import create_client
from ..error_handler import create_error_response
from ..exceptions import ConfluenceMCPError
from ..logger_config import configure_log_level
from .exporter import PageExporter

DEFAULT_OUTPUT_DIR = "./downloads"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="confluence-export",
        description="Download a Confluence page (or page hierarchy) as Markdown with its attachments",
    )
    parser.add_argument("page_id", help="ID of the page (the root page in hierarchy mode)")
    parser.add_argument(
        "output_dir",
        nargs="?",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory to write into (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--mode",
        choices=["single", "hierarchy"],
        default="single",
        help="'single' exports one page, 'hierarchy' the page, its descendants and small spaces",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run an export and return the process exit code."""
    args = build_parser().parse_args(argv)
    operation = f"export_{args.mode}"

    try:
        settings = get_settings()
        configure_log_level(settings.log_level)
        with create_client(settings) as client:
            exporter = PageExporter(client, space_page_limit=settings.export_space_page_limit)
            if args.mode == "hierarchy":
                manifest = exporter.export_hierarchy(args.page_id, args.output_dir)
                print(f"Exported {manifest.total_pages} pages and {manifest.total_attachments} attachments")
                if manifest.skipped_pages:
                    print(f"Skipped pages: {', '.join(manifest.skipped_pages)}")
            else:
                manifest = exporter.export_page(args.page_id, args.output_dir)
                print(
                    f"Exported '{manifest.title}' with "
                    f"{manifest.downloaded_attachment_count}/{manifest.attachment_count} attachments"
                )
    except ConfluenceMCPError as e:
        status = create_error_response(e, operation)
        print(f"Export failed: {status.message}", file=sys.stderr)
        return 1

    print(f"Files saved to: {args.output_dir}")
    return 0

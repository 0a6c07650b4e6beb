#!/usr/bin/env python3
"""
relmap - Entity Relationship Mapping for Workbook CRM
=====================================================

Command-line interface for mapping relationships between companies,
employees and contact persons.

Usage:
    # Map one company from a JSON export
    relmap --source-file workbook_export.json --company-id 101

    # Map a network of companies
    relmap --source-file workbook_export.json --company-id 101 --company-id 102

    # Search by name against the live API
    relmap --api-url https://acme.workbook.net --company-name "Nordic"

Options:
    --source-file       Workbook JSON export to read entities from
    --api-url           Workbook base URL (live API)
    --api-key           Workbook API key
    --company-id        Company id to map (repeatable)
    --company-name      Company name to search for
    --max-depth         Expansion depth, 1-5 (default: 3, networks: 2)
    --include-inactive  Include inactive entities
    --no-tree           Skip the text tree
    --output, -o        Output directory (default: ./output)
    --no-json           Do not write the JSON report
    --verbose, -v       Verbose output

Environment Variables:
    WORKBOOK_API_URL    Workbook base URL
    WORKBOOK_API_KEY    Workbook API key
"""

import argparse
import asyncio
import sys

from .config import RelmapConfig
from .ingestion.json_loader import JsonEntitySource
from .ingestion.workbook_client import WorkbookClient
from .integration.bridge import map_relationships
from .reporting.report_builder import generate_text_report


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="relmap",
        description="relmap - Entity relationship mapping for Workbook CRM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single company from an export
  %(prog)s --source-file export.json --company-id 101

  # Network of companies, including inactive contacts
  %(prog)s --source-file export.json --company-id 101 --company-id 102 --include-inactive

  # Live API, search by name
  %(prog)s --api-url https://acme.workbook.net --company-name Nordic
        """
    )

    source_group = parser.add_argument_group("Data Source")
    source_group.add_argument(
        "--source-file",
        dest="source_file",
        help="Workbook JSON export ({\"resources\": [...], \"contacts\": [...]})"
    )
    source_group.add_argument(
        "--api-url",
        dest="api_url",
        help="Workbook base URL (default: $WORKBOOK_API_URL)"
    )
    source_group.add_argument(
        "--api-key",
        dest="api_key",
        help="Workbook API key (default: $WORKBOOK_API_KEY)"
    )

    target_group = parser.add_argument_group("Targets")
    target_group.add_argument(
        "--company-id",
        dest="company_ids",
        type=int,
        action="append",
        help="Company id to map (repeat for a network)"
    )
    target_group.add_argument(
        "--company-name",
        dest="company_name",
        help="Company name to search for (first 5 matches)"
    )

    mapping_group = parser.add_argument_group("Mapping Options")
    mapping_group.add_argument(
        "--max-depth",
        dest="max_depth",
        type=int,
        choices=range(1, 6),
        metavar="{1-5}",
        help="Maximum relationship depth (default: 3, networks: 2)"
    )
    mapping_group.add_argument(
        "--include-inactive",
        action="store_true",
        help="Include inactive entities"
    )
    mapping_group.add_argument(
        "--no-tree",
        action="store_true",
        help="Do not render the relationship tree"
    )

    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "-o", "--output",
        default="output",
        help="Output directory for results (default: ./output)"
    )
    output_group.add_argument(
        "--no-json",
        action="store_true",
        help="Do not write the JSON report"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="relmap 1.0.0"
    )
    return parser


async def _run(args, config: RelmapConfig):
    if args.source_file:
        source = JsonEntitySource.from_file(args.source_file, verbose=args.verbose)
        return await _map(source, args, config)

    async with WorkbookClient(config.source, verbose=args.verbose) as client:
        return await _map(client, args, config)


async def _map(source, args, config: RelmapConfig):
    return await map_relationships(
        source,
        company_ids=args.company_ids,
        company_name=args.company_name,
        max_depth=args.max_depth,
        include_inactive=args.include_inactive,
        include_tree=not args.no_tree,
        config=config,
        progress_callback=print if args.verbose else None,
        save_report=config.output.generate_json
    )


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = RelmapConfig.from_dict({
        "source": {
            "api_base": args.api_url,
            "api_key": args.api_key,
        },
        "output": {
            "output_dir": args.output,
            "generate_json": not args.no_json,
            "include_tree": not args.no_tree,
        },
        "verbose": args.verbose,
    })

    if not args.source_file and not config.source.api_base:
        parser.error("Must provide --source-file or --api-url (or set WORKBOOK_API_URL)")

    try:
        result = asyncio.run(_run(args, config))
    except Exception as e:
        print(f"\n[!] Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    print(generate_text_report(result))
    if result.report_path:
        print(f"\n[+] JSON report saved to: {result.report_path}")

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())

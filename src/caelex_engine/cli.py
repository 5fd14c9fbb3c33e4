"""
Caelex Engine CLI

Command-line interface for evaluating profiles and checking catalogs.

Usage:
    caelex evaluate debris profile.yaml --statuses statuses.json
    caelex evaluate environmental profile.json --report
    caelex catalog list jurisdiction
    caelex catalog validate

Profiles and status maps are YAML or JSON files. Output is JSON on
stdout; logs go to stderr.

Exit codes: 0 ok, 1 engine error, 2 usage error.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml

from .catalogs import CatalogLoader, load_catalog
from .config import configure_logging, get_settings
from .engine import build_report, evaluate
from .exceptions import CaelexError
from .models import Domain

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ENGINE_ERROR = 1
EXIT_USAGE_ERROR = 2

DOMAINS = [d.value for d in Domain]


class UsageError(Exception):
    """Bad command-line input (missing or unreadable file)."""


def read_data_file(path: str) -> Any:
    """Read a YAML or JSON file; JSON is a subset of YAML."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise UsageError(f"Cannot read {path}: {e.strerror or e}") from e
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise UsageError(f"Cannot parse {path}: {e}") from e


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


# =============================================================================
# Commands
# =============================================================================

def cmd_evaluate(args: argparse.Namespace) -> int:
    """Evaluate a profile, optionally assembling the report."""
    profile = read_data_file(args.profile)
    statuses = read_data_file(args.statuses) if args.statuses else None
    if statuses is not None and not isinstance(statuses, dict):
        raise UsageError(f"Status map in {args.statuses} must be a mapping")

    if args.report:
        _print_json(build_report(args.domain, profile, statuses).to_dict())
    else:
        _print_json(evaluate(args.domain, profile, statuses).to_dict())
    return EXIT_OK


def cmd_catalog_list(args: argparse.Namespace) -> int:
    """List the rules of a domain catalog."""
    catalog = load_catalog(args.domain)
    _print_json({
        "catalog": catalog.meta.to_dict(),
        "rules": [
            {
                key: value
                for key, value in rule.to_dict().items()
                if key in ("id", "title", "citation", "severity", "category", "jurisdiction", "tags")
            }
            for rule in catalog.rules
        ],
    })
    return EXIT_OK


def cmd_catalog_validate(args: argparse.Namespace) -> int:
    """Load catalogs from disk, bypassing the cache, and report problems."""
    loader = CatalogLoader(catalog_dir=get_settings().catalog_dir)
    domains = [args.domain] if args.domain else DOMAINS
    report: dict[str, Any] = {}
    failed = False

    for domain in domains:
        try:
            catalog = loader.load(domain)
        except CaelexError as e:
            failed = True
            report[domain] = {"valid": False, "error": e.to_dict()}
            continue
        report[domain] = {
            "valid": True,
            "catalog_id": catalog.meta.catalog_id,
            "version": catalog.meta.version,
            "content_hash": catalog.meta.content_hash,
            "rules": len(catalog),
        }

    _print_json(report)
    return EXIT_ENGINE_ERROR if failed else EXIT_OK


# =============================================================================
# Entry Point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Caelex compliance applicability and scoring engine",
        prog="caelex",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Evaluate command
    eval_parser = subparsers.add_parser("evaluate", help="Evaluate a profile")
    eval_parser.add_argument("domain", choices=DOMAINS)
    eval_parser.add_argument("profile", help="Profile file (YAML or JSON)")
    eval_parser.add_argument("--statuses", help="Existing status map file (YAML or JSON)")
    eval_parser.add_argument(
        "--report",
        action="store_true",
        help="Output the assembled report document instead of the score result",
    )
    eval_parser.set_defaults(func=cmd_evaluate)

    # Catalog commands
    catalog_parser = subparsers.add_parser("catalog", help="Inspect rule catalogs")
    catalog_sub = catalog_parser.add_subparsers(dest="catalog_command", help="Catalog commands")

    list_parser = catalog_sub.add_parser("list", help="List the rules of a catalog")
    list_parser.add_argument("domain", choices=DOMAINS)
    list_parser.set_defaults(func=cmd_catalog_list)

    validate_parser = catalog_sub.add_parser("validate", help="Validate catalogs")
    validate_parser.add_argument("domain", nargs="?", choices=DOMAINS)
    validate_parser.set_defaults(func=cmd_catalog_validate)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EXIT_OK if e.code == 0 else EXIT_USAGE_ERROR

    if not getattr(args, "func", None):
        parser.print_help(sys.stderr)
        return EXIT_USAGE_ERROR

    configure_logging()

    try:
        return args.func(args)
    except UsageError as e:
        print(f"caelex: error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except CaelexError as e:
        logger.error(e.message, extra={"code": e.code})
        print(json.dumps({"error": e.to_dict()}, ensure_ascii=False, default=str), file=sys.stderr)
        return EXIT_ENGINE_ERROR


if __name__ == "__main__":
    sys.exit(main())

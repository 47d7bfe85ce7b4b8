"""infotag CLI - convert between filenames and ID3v1 tags on the command line."""
import sys
import argparse
import json
import logging
from typing import Dict, List, Optional, Tuple

from .core import create_empty, get_field_table, is_field, render
from .errors import ConfigError
from .operations import pattern_fields
from .processor import set_field, render_from_record, flush_warnings
from .batch import process_batch
from .utils import (
    Config,
    CASE_MODES,
    PLACEHOLDER_RE,
    compile_weed,
    join_for_printing,
    setup_logging,
    EXIT_CODE_SUCCESS,
    EXIT_CODE_ERROR,
    EXIT_CODE_USAGE,
    EXIT_CODE_NO_INPUT,
    EXIT_CODE_INTERRUPTED
)

logger = logging.getLogger(__name__)

# ---------- Argument helpers ----------
def parse_assignment(expr: str) -> Tuple[str, str]:
    """Parse a single FIELD=VALUE expression; the field name is case-insensitive."""
    if not expr or '=' not in expr:
        raise ValueError("assignment must be FIELD=VALUE")

    field, value = expr.split('=', 1)
    field = field.strip().upper()

    if not field:
        raise ValueError("assignment field cannot be empty")
    if not is_field(field):
        valid_fields = ', '.join(get_field_table())
        raise ValueError(f"invalid field: {field}. Must be one of: {valid_fields}")

    return field, value

def build_tag_from_args(assignments: Optional[List[str]]) -> Dict[str, str]:
    """Build a tag from --set options; every value goes through the usual field checks."""
    tag = create_empty()
    for expr in assignments or []:
        field, value = parse_assignment(expr)
        result = set_field(tag, field, value)
        if not result:
            raise ValueError(f"{field}: {result.error_message}")
    return tag

def validate_args(args: argparse.Namespace) -> None:
    """Validate command line arguments comprehensively."""
    errors = []

    if getattr(args, 'case', None) is not None and args.case not in CASE_MODES:
        errors.append(f"--case must be one of {', '.join(str(m) for m in CASE_MODES)}")

    if getattr(args, 'weed', None) is not None:
        try:
            compile_weed(args.weed)
        except ConfigError as e:
            errors.append(str(e))

    if getattr(args, 'threads', None) is not None and args.threads < 1:
        errors.append("--threads must be at least 1")

    if getattr(args, 'pattern', None) is not None and not PLACEHOLDER_RE.search(args.pattern):
        errors.append("pattern must contain at least one ((NAME)) placeholder")

    if errors:
        raise ValueError("; ".join(errors))

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="infotag - filename <-> ID3v1 tag converter")
    parser.add_argument("--verbose", action='store_true', default=None,
                        help="Enable verbose logging (overrides INFOTAG_VERBOSE env var)")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("fields", help="List the tag fields and their maximum lengths")

    parse_p = sub.add_parser("parse", help="Extract tags from names (arguments or stdin lines)")
    parse_p.add_argument("pattern", help="Pattern, e.g. '[((TRACKNUM))] ((ARTIST)) - ((TITLE))'")
    parse_p.add_argument("names", nargs='*', help="Names to parse (default: read stdin)")
    parse_p.add_argument("--case", type=int, default=None, help="Case mode: 0 lower, 1 First, 2 Each Word")
    parse_p.add_argument("--weed", default=None, help="Regex whose matches are replaced by a space")
    parse_p.add_argument("--set", action='append', metavar="FIELD=VALUE",
                         help="Value every tag starts from (repeatable)")
    parse_p.add_argument("--strip-extension", action='store_true',
                         help="Drop directory and extension from each name first")
    parse_p.add_argument("--show-empty", action='store_true', help="Show empty fields too")
    parse_p.add_argument("--threads", type=int, default=None,
                         help="Number of threads for parallel processing (default: auto)")
    parse_p.add_argument("--json", action='store_true', help="Print a JSON report instead of text")

    format_p = sub.add_parser("format", help="Build a string from tag values")
    format_p.add_argument("pattern", help="Pattern, e.g. '((TRACKNUM))_((ARTIST))-((TITLE))'")
    format_p.add_argument("--set", action='append', metavar="FIELD=VALUE",
                          help="Tag value (repeatable)")
    format_p.add_argument("--case", type=int, default=None, help="Case mode: 0 lower, 1 First, 2 Each Word")

    return parser

# ---------- Commands ----------
def run_fields() -> int:
    for name, max_len in get_field_table().items():
        print(f"{name}: {'unbounded' if max_len is None else max_len}")
    return EXIT_CODE_SUCCESS

def run_parse(args: argparse.Namespace) -> int:
    """Parse every name and print the resulting tags. Returns exit code."""
    names = args.names
    if not names:
        names = [line.rstrip('\n') for line in sys.stdin if line.strip()]
    if not names:
        print("No names given.", file=sys.stderr)
        return EXIT_CODE_NO_INPUT

    base_tag = build_tag_from_args(args.set)
    logger.debug(f"Pattern fields: {join_for_printing(pattern_fields(args.pattern))}")

    summary = process_batch(
        names,
        args.pattern,
        case=Config.DEFAULT_CASE if args.case is None else args.case,
        weed=Config.DEFAULT_WEED if args.weed is None else args.weed,
        base_tag={k: v for k, v in base_tag.items() if v},
        strip_extension=args.strip_extension,
        max_workers=args.threads
    )

    if args.json:
        print(json.dumps(summary, ensure_ascii=False, indent=2))
    else:
        for rec in summary['results']:
            print_item_result(rec, args.show_empty)
        print_summary(summary)

    return EXIT_CODE_SUCCESS if summary['failed'] == 0 else EXIT_CODE_ERROR

def print_item_result(rec: Dict, show_empty: bool = False) -> None:
    """Print detailed result for a single name."""
    print(f"\nName: {rec['name']}")
    if not rec['passed']:
        print(f"  ERROR ({rec['error_kind']}): {rec['error']}")
    else:
        print(f"  Tag: {render(rec['tag'], show_empty)}")
        print(f"  Fields written: {rec['changed']}")
    for warning in rec['warnings']:
        print(f"  WARNING: {warning}")

def print_summary(summary: Dict) -> None:
    print(f"\n--- SUMMARY ---")
    print(f"Total names processed: {summary['processed']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed: {summary['failed']}")

def run_format(args: argparse.Namespace) -> int:
    tag = build_tag_from_args(args.set)
    case = Config.DEFAULT_CASE if args.case is None else args.case
    result = render_from_record(args.pattern, tag, case=case)
    for warning in flush_warnings():
        print(f"WARNING: {warning}", file=sys.stderr)
    if not result:
        print(f"Error: {result.error_message}", file=sys.stderr)
        return EXIT_CODE_ERROR
    print(result.value)
    return EXIT_CODE_SUCCESS

# ---------- Main ----------
def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configuration precedence: CLI flag > environment variable > default
    try:
        Config.load_from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_CODE_USAGE)

    if args.verbose is None:
        args.verbose = Config.DEFAULT_VERBOSE

    # keep stdout clean for the JSON report
    setup_logging(args.verbose, sys.stderr if getattr(args, 'json', False) else None)

    try:
        validate_args(args)
    except ValueError as e:
        logger.error(f"Argument validation failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_CODE_USAGE)

    try:
        if args.command == 'fields':
            exit_code = run_fields()
        elif args.command == 'parse':
            exit_code = run_parse(args)
        else:
            exit_code = run_format(args)
    except KeyboardInterrupt:
        sys.exit(EXIT_CODE_INTERRUPTED)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_CODE_USAGE)

    sys.exit(exit_code)


if __name__ == '__main__':
    main()

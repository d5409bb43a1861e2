"""Command-line harness for the rule engine.

Evaluates a facts document against a rule set and reports PASS/FAIL.

Usage:
    factrules --rules rules.json --facts facts.json
    cat facts.json | factrules --rules rules.json
    factrules --rules rules.json --stringify
    factrules --rules rules.json --validate
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

from .compiler import validate_rule_set
from .engine import Engine
from .errors import ParseError

# ============== CONFIGURATION ==============
FACTRULES_LOG_LEVEL: str = os.environ.get("FACTRULES_LOG_LEVEL", "WARNING")
FACTRULES_RULES_PATH: str = os.environ.get("FACTRULES_RULES_PATH", "")

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_ERROR = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="factrules",
        description="Evaluate facts against an AND/OR rule set",
    )
    parser.add_argument(
        "--rules",
        type=Path,
        default=Path(FACTRULES_RULES_PATH) if FACTRULES_RULES_PATH else None,
        help="Rule set JSON file (default: $FACTRULES_RULES_PATH)",
    )
    parser.add_argument("--facts", default="-", help="Facts JSON file, or - for stdin")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--stringify", action="store_true", help="Print the rule set in human readable form")
    mode.add_argument("--validate", action="store_true", help="Validate the rule set and exit")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=FACTRULES_LOG_LEVEL,
        help=f"One of {', '.join(LOG_LEVELS)} (default: $FACTRULES_LOG_LEVEL)",
    )
    return parser


def load_facts(source: str) -> Any:
    """Load facts JSON from a file path, or stdin for "-"."""
    if source == "-":
        return json.load(sys.stdin)
    # Read bytes so json detects the encoding and bad input fails as ValueError
    with open(source, "rb") as f:
        return json.load(f)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Checked here rather than with choices=, which skips the FACTRULES_LOG_LEVEL default
    log_level = args.log_level.upper()
    if log_level not in LOG_LEVELS:
        parser.error(f"invalid log level {args.log_level!r}: choose from {', '.join(LOG_LEVELS)}")

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.rules is None:
        parser.error("--rules is required (or set FACTRULES_RULES_PATH)")

    if args.validate:
        is_valid, message = validate_rule_set(args.rules)
        print(message)
        return EXIT_PASS if is_valid else EXIT_FAIL

    try:
        engine = Engine.from_file(args.rules)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR
    except ParseError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        for err in e.errors:
            print(f"  - {err}", file=sys.stderr)
        return EXIT_ERROR

    if args.stringify:
        print(engine.stringify())
        return EXIT_PASS

    try:
        facts = load_facts(args.facts)
    except (OSError, ValueError) as e:
        # ValueError covers both JSONDecodeError and UnicodeDecodeError
        print(f"ERROR: could not read facts: {e}", file=sys.stderr)
        return EXIT_ERROR

    if not isinstance(facts, dict):
        print("ERROR: facts must be a JSON object", file=sys.stderr)
        return EXIT_ERROR

    passed = engine.evaluate(facts)
    logger.info("Rule set %s evaluated to %s", args.rules, passed)
    print("PASS" if passed else "FAIL")
    return EXIT_PASS if passed else EXIT_FAIL


if __name__ == "__main__":
    sys.exit(main())

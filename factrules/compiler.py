"""Rule set compiler and validator.

Parses rule set documents from JSON, validates structure, and computes
rule set hashes. Structural problems surface here as ParseError, once,
so evaluation never has to raise.
"""

import hashlib
import json
import logging
from pathlib import Path
from typing import List, Tuple, Union

from pydantic import ValidationError

from .comparators import DEFAULT_COMPARATORS
from .errors import ParseError
from .types import Composite, Operator, RuleSet

logger = logging.getLogger(__name__)


def parse_rule_set(raw: Union[bytes, str]) -> RuleSet:
    """Parse a rule set document.

    Args:
        raw: JSON document, as bytes or text

    Returns:
        Validated RuleSet

    Composites nest to a depth of roughly 250 levels; deeper documents
    exceed pydantic's validation recursion limit and are rejected with
    ParseError.

    Raises:
        ParseError: If the JSON is malformed or has the wrong structure
    """
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise ParseError("Invalid rule set document: malformed JSON", errors=[f"<root>: {e}"]) from e

    try:
        rule_set = RuleSet.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ParseError(f"Invalid rule set document: {len(errors)} error(s)", errors=errors) from e
    except RecursionError as e:
        raise ParseError("Invalid rule set document: composites nested too deeply", errors=[f"<root>: {e}"]) from e

    logger.debug("Parsed rule set with %d top-level composite(s)", len(rule_set.composites))
    return rule_set


def load_rule_set(path: Union[str, Path]) -> RuleSet:
    """Load and parse a rule set from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ParseError: If the document is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Rule set not found: {path}")

    return parse_rule_set(path.read_bytes())


def compute_rule_set_hash(rule_set: RuleSet) -> str:
    """Compute SHA256 hash of the canonical JSON representation.

    Returns:
        Hex-encoded SHA256 hash
    """
    # Canonical JSON: sorted keys, no extra whitespace
    canonical = json.dumps(rule_set.model_dump(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _lint_composite(composite: Composite, where: str, problems: List[str]) -> None:
    if composite.operator not in [o.value for o in Operator]:
        problems.append(f"{where}: unknown operator '{composite.operator}'")

    for i, rule in enumerate(composite.rules):
        if rule.comparator not in DEFAULT_COMPARATORS:
            problems.append(f"{where}.rules.{i}: unknown comparator '{rule.comparator}'")
        if not rule.path:
            problems.append(f"{where}.rules.{i}: empty path")

    for i, child in enumerate(composite.composites):
        _lint_composite(child, f"{where}.composites.{i}", problems)


def validate_rule_set(path: Union[str, Path]) -> Tuple[bool, str]:
    """Validate a rule set file without building an engine.

    Unknown operators and comparators parse fine (they only make rules
    fail at evaluation time) but are reported here.

    Returns:
        (is_valid, message)
    """
    path = Path(path)

    if not path.exists():
        return False, f"File not found: {path}"

    try:
        rule_set = parse_rule_set(path.read_bytes())
    except ParseError as e:
        logger.debug("Rejected rule set %s: %s", path, e.errors)
        return False, f"{e.message}: {'; '.join(e.errors)}"

    problems: List[str] = []
    for i, composite in enumerate(rule_set.composites):
        _lint_composite(composite, f"composites.{i}", problems)

    if problems:
        logger.debug("Rejected rule set %s: %s", path, problems)
        return False, "; ".join(problems)

    return True, "Valid"

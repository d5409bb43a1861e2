"""factrules - embeddable boolean rule engine.

Evaluates nested, untyped fact bags against AND/OR rule sets and
renders rule sets in human-readable form. Evaluation is fail-closed:
anything that cannot be evaluated is False, never an exception.
"""

from .fields import resolve, split_path
from .comparators import Comparator, DEFAULT_COMPARATORS, default_comparators, value_kind
from .types import Rule, Composite, RuleSet, Operator
from .errors import ParseError
from .compiler import parse_rule_set, load_rule_set, validate_rule_set, compute_rule_set_hash
from .evaluator import evaluate_rule, evaluate_composite, render_rule, render_composite, format_value
from .engine import Engine

__version__ = "1.0.0"

__all__ = [
    "resolve",
    "split_path",
    "Comparator",
    "DEFAULT_COMPARATORS",
    "default_comparators",
    "value_kind",
    "Rule",
    "Composite",
    "RuleSet",
    "Operator",
    "ParseError",
    "parse_rule_set",
    "load_rule_set",
    "validate_rule_set",
    "compute_rule_set_hash",
    "evaluate_rule",
    "evaluate_composite",
    "render_rule",
    "render_composite",
    "format_value",
    "Engine",
]

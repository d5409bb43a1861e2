"""Rule and composite evaluation.

Depth-first, short-circuiting evaluation in declared order:
a composite's own rules first, then its nested composites. Every failure
mode (missing field, unknown comparator, unknown operator, mismatched
types) evaluates to False instead of raising.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any, Dict, Optional

from .comparators import BOOL, MAPPING, NULL, NUMBER, SEQUENCE, value_kind
from .fields import resolve
from .types import Composite, Operator, Rule

logger = logging.getLogger(__name__)


def evaluate_rule(rule: Rule, facts: Mapping, comparators: Mapping) -> bool:
    """Check a single rule against the facts.

    Missing fields: returns False (a rule is never true about a field
    that doesn't exist)
    """
    field_value = resolve(facts, rule.path)
    if field_value is None:
        return False

    comparator = comparators.get(rule.comparator)
    if comparator is None:
        logger.debug("Unknown comparator %r in rule on %r", rule.comparator, rule.path)
        return False

    try:
        return bool(comparator(field_value, rule.value))
    except (TypeError, ValueError) as e:
        # Type mismatch = rule doesn't match
        logger.debug("Comparator %r failed on %r: %s", rule.comparator, rule.path, e)
        return False


def _evaluate_own_rules(composite: Composite, facts: Mapping, comparators: Mapping) -> Optional[bool]:
    """Settle a composite from its own rules, or None to go on to its children."""
    if composite.operator == Operator.AND.value:
        for rule in composite.rules:
            if not evaluate_rule(rule, facts, comparators):
                return False
        return None

    if composite.operator == Operator.OR.value:
        for rule in composite.rules:
            if evaluate_rule(rule, facts, comparators):
                return True
        return None

    logger.debug("Unknown operator %r; composite does not match", composite.operator)
    return False


def _settles(composite: Composite, child_result: bool) -> bool:
    # A false child settles an AND, a true child settles an OR
    if composite.operator == Operator.AND.value:
        return not child_result
    return child_result


def evaluate_composite(composite: Composite, facts: Mapping, comparators: Mapping) -> bool:
    """Evaluate a composite: all children for AND, any child for OR.

    Walks the tree with an explicit stack, so nesting depth is bounded
    only by memory, never by the interpreter's recursion limit.
    """
    result = _evaluate_own_rules(composite, facts, comparators)
    if result is not None:
        return result

    stack = [(composite, iter(composite.composites))]
    while stack:
        parent, children = stack[-1]
        child = next(children, None)
        if child is None:
            # Every child checked, none settled it: AND holds, OR doesn't
            result = parent.operator == Operator.AND.value
            stack.pop()
        else:
            result = _evaluate_own_rules(child, facts, comparators)
            if result is None:
                stack.append((child, iter(child.composites)))
                continue

        while stack and _settles(stack[-1][0], result):
            stack.pop()

    return result


def format_value(value: Any) -> str:
    """Render a rule literal in its natural textual form.

    Strings are bare, whole floats drop the ".0" so 1234.0 reads 1234
    (large ones keep Python's exponent form, 1e+20), infinities read
    +Inf/-Inf, sequences render as [a b c] and mappings as map[k:v] with sorted keys.
    """
    kind = value_kind(value)
    if kind == NULL:
        return "null"
    if kind == BOOL:
        return "true" if value else "false"
    if kind == NUMBER:
        if isinstance(value, float):
            if math.isnan(value):
                return "NaN"
            if math.isinf(value):
                return "+Inf" if value > 0 else "-Inf"
            text = str(value)
            # 1234.0 -> 1234; exponent forms like 1e+20 are kept as they are
            return text[:-2] if text.endswith(".0") else text
        return str(value)
    if kind == SEQUENCE:
        return "[" + " ".join(format_value(item) for item in value) + "]"
    if kind == MAPPING:
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "map[" + " ".join(f"{k}:{format_value(v)}" for k, v in items) + "]"
    return str(value)


def render_rule(rule: Rule) -> str:
    return "{" + f"{rule.path} {rule.comparator} {format_value(rule.value)}" + "}"


def render_composite(composite: Composite) -> str:
    """Render a composite as "(part op part ...)".

    The operator is inserted verbatim, known or not. Nested composites
    are rendered bottom-up from an explicit stack.
    """
    rendered: Dict[int, str] = {}
    stack = [(composite, False)]
    while stack:
        node, children_done = stack.pop()
        if not children_done:
            stack.append((node, True))
            stack.extend((child, False) for child in node.composites)
            continue
        parts = [render_rule(rule) for rule in node.rules]
        parts.extend(rendered[id(child)] for child in node.composites)
        rendered[id(node)] = "(" + f" {node.operator} ".join(parts) + ")"
    return rendered[id(composite)]

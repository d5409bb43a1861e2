"""Built-in comparators.

A comparator is a pure function ``(fact_value, literal_value) -> bool``.
Comparators are total: any shape mismatch yields False, never an exception.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Dict, Optional

Comparator = Callable[[Any, Any], bool]

# Value shapes
NULL = "null"
BOOL = "bool"
NUMBER = "number"
STRING = "string"
SEQUENCE = "sequence"
MAPPING = "mapping"


def value_kind(value: Any) -> Optional[str]:
    """Classify a value into one of the fact data shapes.

    Returns None for anything that is not fact data (functions, sets,
    arbitrary objects), which makes it incomparable with everything.
    """
    if value is None:
        return NULL
    # bool before number: bool is an int subclass but never a number here
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, (list, tuple)):
        return SEQUENCE
    if isinstance(value, Mapping):
        return MAPPING
    return None


def _comparable(a: Any, b: Any) -> bool:
    kind = value_kind(a)
    return kind is not None and kind == value_kind(b)


def _deep_equal(a: Any, b: Any) -> bool:
    if not _comparable(a, b):
        return False

    kind = value_kind(a)
    if kind == SEQUENCE:
        return len(a) == len(b) and all(_deep_equal(x, y) for x, y in zip(a, b))
    if kind == MAPPING:
        if set(a.keys()) != set(b.keys()):
            return False
        return all(_deep_equal(a[key], b[key]) for key in a)
    return a == b


def _is_number(value: Any) -> bool:
    return value_kind(value) == NUMBER


def _is_sequence(value: Any) -> bool:
    return value_kind(value) == SEQUENCE


def equal(fact: Any, literal: Any) -> bool:
    return _deep_equal(fact, literal)


def not_equal(fact: Any, literal: Any) -> bool:
    """Negation of equal, but False when the shapes cannot be compared."""
    if not _comparable(fact, literal):
        return False
    return not _deep_equal(fact, literal)


def greater_than(fact: Any, literal: Any) -> bool:
    return _is_number(fact) and _is_number(literal) and fact > literal


def greater_than_equal(fact: Any, literal: Any) -> bool:
    return _is_number(fact) and _is_number(literal) and fact >= literal


def less_than(fact: Any, literal: Any) -> bool:
    return _is_number(fact) and _is_number(literal) and fact < literal


def less_than_equal(fact: Any, literal: Any) -> bool:
    return _is_number(fact) and _is_number(literal) and fact <= literal


def contains(fact: Any, literal: Any) -> bool:
    """True if the fact is a sequence holding the literal."""
    if not _is_sequence(fact):
        return False
    return any(_deep_equal(item, literal) for item in fact)


def not_contains(fact: Any, literal: Any) -> bool:
    """True if the fact is a sequence without the literal.

    A fact that is not a sequence is False here too, not True.
    """
    if not _is_sequence(fact):
        return False
    return not contains(fact, literal)


def one_of(fact: Any, literal: Any) -> bool:
    """True if the literal is a sequence holding the fact."""
    if not _is_sequence(literal):
        return False
    return any(_deep_equal(fact, item) for item in literal)


DEFAULT_COMPARATORS: Mapping = MappingProxyType({
    "eq": equal,
    "neq": not_equal,
    "gt": greater_than,
    "gte": greater_than_equal,
    "lt": less_than,
    "lte": less_than_equal,
    "contains": contains,
    "ncontains": not_contains,
    "oneof": one_of,
})


def default_comparators() -> Dict[str, Comparator]:
    """Fresh, mutable copy of the built-in comparators for a new engine."""
    return dict(DEFAULT_COMPARATORS)

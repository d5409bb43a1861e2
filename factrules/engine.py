"""Rule engine: the entry point callers evaluate facts against."""

import json
from collections.abc import Mapping
from types import MappingProxyType
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .comparators import Comparator, default_comparators
from .compiler import compute_rule_set_hash, load_rule_set, parse_rule_set
from .evaluator import evaluate_composite, render_composite
from .types import Composite, RuleSet


class Engine:
    """A list of composites plus the comparators they are evaluated with.

    All composites must be true for evaluate() to return True; an engine
    with no composites accepts everything. Each engine owns its own
    comparator table, so register() on one engine never affects another.
    Registering while another thread evaluates needs external locking.

    evaluate() and stringify() walk composites iteratively, so any nesting
    depth works. Documents parsed by from_document() nest to roughly 250
    levels (pydantic's validation limit), and to_document()/rule_set_hash()
    serialize through pydantic with the same bound.

    Example:
        >>> engine = Engine.from_document(
        ...     '{"composites": [{"operator": "and", "rules": '
        ...     '[{"comparator": "eq", "path": "first_name", "value": "Trevor"}]}]}'
        ... )
        >>> engine.evaluate({"first_name": "Trevor"})
        True
    """

    def __init__(
        self,
        composites: Optional[List[Composite]] = None,
        comparators: Optional[Mapping] = None,
    ):
        self.composites: List[Composite] = list(composites or [])
        self._comparators: Dict[str, Comparator] = (
            dict(comparators) if comparators is not None else default_comparators()
        )

    @classmethod
    def from_document(cls, raw: Union[bytes, str]) -> "Engine":
        """Build an engine with the default comparators from a JSON document.

        Raises:
            ParseError: If the document is malformed
        """
        return cls(parse_rule_set(raw).composites)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Engine":
        return cls(load_rule_set(path).composites)

    @property
    def comparators(self) -> Mapping:
        """Read-only view of the registered comparators."""
        return MappingProxyType(self._comparators)

    def register(self, name: str, comparator: Comparator) -> "Engine":
        """Add or replace a comparator; returns the engine for chaining."""
        self._comparators[name] = comparator
        return self

    def evaluate(self, facts: Mapping) -> bool:
        """True iff every top-level composite matches the facts."""
        for composite in self.composites:
            if not evaluate_composite(composite, facts, self._comparators):
                return False
        return True

    def stringify(self) -> str:
        """Human readable rule set, composites joined by " && "."""
        return " && ".join(render_composite(c) for c in self.composites)

    def to_rule_set(self) -> RuleSet:
        return RuleSet(composites=self.composites)

    def to_document(self) -> Dict[str, Any]:
        return self.to_rule_set().model_dump()

    def to_json(self) -> str:
        return json.dumps(self.to_document())

    def rule_set_hash(self) -> str:
        return compute_rule_set_hash(self.to_rule_set())

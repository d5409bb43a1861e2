"""Rule set type definitions (Pydantic models).

Defines rules, composites and the rule set document. All structures are
JSON-serializable so a rule set can be loaded, rendered and hashed.
"""

from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Operator(str, Enum):
    """Logical operators joining the children of a composite."""
    AND = "and"
    OR = "or"


def _none_as_empty(v: Any) -> Any:
    return [] if v is None else v


class Rule(BaseModel):
    """Single rule: the value at path, compared against value."""
    model_config = ConfigDict(frozen=True)

    comparator: str = Field(..., description="Comparator name, e.g. eq or contains")
    path: str = Field(..., description="Dot-separated path into the facts")
    value: Any = Field(default=None, description="Literal the fact is compared against")


class Composite(BaseModel):
    """Group of rules and nested composites joined by AND or OR.

    The operator is kept as a plain string: an unknown operator is not a
    parse error, the composite simply never matches.
    """
    operator: str = Field(..., description="and | or")
    rules: List[Rule] = Field(default_factory=list)
    composites: List["Composite"] = Field(default_factory=list)

    @field_validator("rules", "composites", mode="before")
    @classmethod
    def null_children_are_empty(cls, v: Any) -> Any:
        return _none_as_empty(v)


class RuleSet(BaseModel):
    """Rule set document: every top-level composite must match."""
    composites: List[Composite] = Field(default_factory=list)

    @field_validator("composites", mode="before")
    @classmethod
    def null_composites_are_empty(cls, v: Any) -> Any:
        return _none_as_empty(v)


Composite.model_rebuild()

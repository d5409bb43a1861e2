"""
factrules/errors.py

Errors raised while turning a rule set document into an engine.
Evaluation itself never raises.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(eq=False)
class ParseError(ValueError):
    """Rule set document is malformed JSON or has the wrong structure."""
    message: str
    errors: List[str] = field(default_factory=list)
    error_code: str = "PARSE_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "errors": self.errors,
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

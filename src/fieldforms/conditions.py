"""
Conditional visibility rules.

A field may carry one rule referencing another field's answer:

    {"field": "smoker", "value": "Non", "operator": "equals"}

The operator vocabulary is closed. Anything the remote definition sends
outside of it is read as `equals`, which is also the meaning of an
absent operator.

ARCHITECTURAL RULE:
    Rules are structure only. Evaluation against live answers
    belongs in `fieldforms.visibility`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


SECTION_SEPARATOR = "."


class ConditionalOperator(Enum):
    """
    Operators a conditional rule may use.

    EQUALS and NOT_EQUALS are strict comparisons.
    CONTAINS is membership for list answers and substring for text answers.
    """

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"

    @classmethod
    def parse(cls, raw: Any) -> "ConditionalOperator":
        """Map a raw operator string to the enum, defaulting to EQUALS."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            return cls.EQUALS


@dataclass(frozen=True)
class ConditionalRule:
    """
    Predicate over another field's answer controlling a field's visibility.

    Properties:
        field:
            Referenced field key. Either fully qualified
            ("household.smoker") or local to the owning field's
            section ("smoker").

        value:
            Value compared against the referenced answer.

        operator:
            ConditionalOperator, EQUALS when the source omitted it.
    """

    field: str
    value: Any = None
    operator: ConditionalOperator = ConditionalOperator.EQUALS

    def resolve_field_id(self, section: Optional[str]) -> str:
        """
        Return the answer key this rule reads.

        Qualified references are used verbatim; bare references are
        qualified with the owning field's section when it has one.
        """
        if SECTION_SEPARATOR in self.field:
            return self.field
        if section:
            return f"{section}{SECTION_SEPARATOR}{self.field}"
        return self.field

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["ConditionalRule"]:
        """
        Build a rule from its wire shape.

        Returns None when `raw` is empty or has no referenced field,
        so malformed rules make the field unconditionally visible.
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, dict):
            return None
        field_ref = raw.get("field")
        if not field_ref or not isinstance(field_ref, str):
            return None
        return cls(
            field=field_ref,
            value=raw.get("value"),
            operator=ConditionalOperator.parse(raw.get("operator")),
        )

    def to_raw(self) -> Dict[str, Any]:
        return {"field": self.field, "value": self.value, "operator": self.operator.value}

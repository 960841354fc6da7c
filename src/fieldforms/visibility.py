"""
Conditional visibility evaluation.

Visibility is always recomputed from the current answers snapshot.
Rules may chain (a visible field's answer can gate another field), but
no dependency walk is needed: filtering the canonical field list with
one snapshot gives the visible set.
"""

from typing import Any, Iterable, List, Mapping

from fieldforms.conditions import ConditionalOperator
from fieldforms.model import FieldDefinition


def _strict_equals(a: Any, b: Any) -> bool:
    # Booleans never equal numbers, even though Python says True == 1.
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def _contains(answer: Any, value: Any) -> bool:
    if isinstance(answer, (list, tuple, set, frozenset)):
        return any(_strict_equals(item, value) for item in answer)
    if isinstance(answer, str):
        if not isinstance(value, str):
            return False
        return value in answer
    return False


def is_visible(field: FieldDefinition, answers: Mapping[str, Any]) -> bool:
    """
    Decide whether `field` is shown given the current answers.

    Fields without a conditional rule are always visible. A missing
    referenced answer compares as None.
    """
    rule = field.conditional
    if rule is None:
        return True

    answer = answers.get(rule.resolve_field_id(field.section))

    if rule.operator is ConditionalOperator.NOT_EQUALS:
        return not _strict_equals(answer, rule.value)
    if rule.operator is ConditionalOperator.CONTAINS:
        return _contains(answer, rule.value)
    return _strict_equals(answer, rule.value)


def visible_fields(fields: Iterable[FieldDefinition], answers: Mapping[str, Any]) -> List[FieldDefinition]:
    """Filter the canonical field list, preserving order."""
    return [f for f in fields if is_visible(f, answers)]

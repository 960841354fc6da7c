"""
Submission Transformer (live AnswerState → submission payload).

Rules, applied to a shallow copy of the answers:
    1. Transient keys (geo-derived locality) are dropped
    2. Checkbox answers are always lists ([] when unanswered)
    3. Ranking answers are kept only when they are a mapping
    4. Everything else passes through untouched

Wire shape:

    {"formData": {...}, "submitterName": "...", "submitterContact": "..."}

Submitter keys are omitted when empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional

from fieldforms.model import FieldDefinition, FieldType, is_transient_key

logger = logging.getLogger(__name__)


@dataclass
class SubmissionPayload:
    """Submission-ready answers plus optional submitter identity."""

    form_data: Dict[str, Any] = field(default_factory=dict)
    submitter_name: Optional[str] = None
    submitter_contact: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"formData": self.form_data}
        if self.submitter_name:
            out["submitterName"] = self.submitter_name
        if self.submitter_contact:
            out["submitterContact"] = self.submitter_contact
        return out


def transform_answers(answers: Mapping[str, Any], fields: Iterable[FieldDefinition]) -> Dict[str, Any]:
    """
    Convert live answers into the `formData` mapping.

    Never raises; the input mapping is not modified.
    """
    data: Dict[str, Any] = {k: v for k, v in (answers or {}).items() if not is_transient_key(k)}

    for fdef in fields:
        if fdef.type is FieldType.CHECKBOX:
            value = data.get(fdef.id)
            if value is None or value == "":
                data[fdef.id] = []
            elif isinstance(value, (list, tuple)):
                data[fdef.id] = list(value)
            else:
                data[fdef.id] = [value]

        elif fdef.type is FieldType.RANKING:
            value = data.get(fdef.id)
            if isinstance(value, Mapping):
                data[fdef.id] = dict(value)
            elif fdef.id in data:
                logger.warning("Dropping malformed ranking answer for %s", fdef.id)
                del data[fdef.id]

    return data


def build_payload(
    answers: Mapping[str, Any],
    fields: Iterable[FieldDefinition],
    submitter_name: Optional[str] = None,
    submitter_contact: Optional[str] = None,
) -> SubmissionPayload:
    return SubmissionPayload(
        form_data=transform_answers(answers, fields),
        submitter_name=submitter_name or None,
        submitter_contact=submitter_contact or None,
    )

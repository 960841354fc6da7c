"""
Form session: one normalized template plus its live AnswerState.

All answer mutations go through the named operations below, so the
ranking invariant and checkbox shapes hold without any rendering
layer. Derived values (visible fields, help notes, payload) are
recomputed from the current answers on every call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fieldforms.errors import SubmissionError
from fieldforms.model import AnswerState, FieldDefinition, FieldType, FormTemplate
from fieldforms.ranking import RankingManager
from fieldforms.submission import SubmissionPayload, build_payload
from fieldforms.transport import SubmissionTransport
from fieldforms.visibility import visible_fields

logger = logging.getLogger(__name__)


class FormSession:
    """Live answers for one form, from opening to submission or reset."""

    def __init__(self, template: FormTemplate):
        self.template = template
        self.answers: AnswerState = {}
        self.submitter_name: Optional[str] = None
        self.submitter_contact: Optional[str] = None

    def _require_field(self, field_id: str, *types: FieldType) -> FieldDefinition:
        fdef = self.template.get_field(field_id)
        if fdef is None:
            raise KeyError(f"Unknown field: {field_id}")
        if types and fdef.type not in types:
            raise ValueError(f"Field {field_id} is {fdef.type.value}, expected {', '.join(t.value for t in types)}")
        return fdef

    def set_answer(self, field_id: str, value: Any) -> None:
        """Record a raw answer. Transient keys are accepted as-is."""
        self.answers[field_id] = value

    def get_answer(self, field_id: str, default: Any = None) -> Any:
        return self.answers.get(field_id, default)

    def clear_answer(self, field_id: str) -> None:
        self.answers.pop(field_id, None)

    def toggle_choice(self, field_id: str, option: str, checked: bool) -> List[str]:
        """Add or remove `option` from a checkbox answer, keeping option order of selection."""
        self._require_field(field_id, FieldType.CHECKBOX)
        current = self.answers.get(field_id)
        values = list(current) if isinstance(current, (list, tuple)) else []
        if checked and option not in values:
            values.append(option)
        elif not checked:
            values = [v for v in values if v != option]
        self.answers[field_id] = values
        return values

    def ranking(self, field_id: str) -> RankingManager:
        """
        RankingManager over a copy of the recorded mapping.

        Reading through it never changes the answers; only toggle_rank
        and set_rank write the mapping back, and only once they succeed.
        """
        fdef = self._require_field(field_id, FieldType.RANKING)
        current = self.answers.get(field_id)
        rankings = dict(current) if isinstance(current, dict) else {}
        return RankingManager.for_field(fdef, rankings)

    def toggle_rank(self, field_id: str, option: str, checked: bool) -> Dict[str, str]:
        manager = self.ranking(field_id)
        manager.toggle(option, checked)
        self.answers[field_id] = manager.as_dict()
        return manager.as_dict()

    def set_rank(self, field_id: str, option: str, rank: str) -> Dict[str, str]:
        """
        Raises:
            RankingError: If `rank` is not one of the field's rank labels
        """
        manager = self.ranking(field_id)
        manager.set_rank(option, rank)
        self.answers[field_id] = manager.as_dict()
        return manager.as_dict()

    def visible_fields(self) -> List[FieldDefinition]:
        return visible_fields(self.template.fields, self.answers)

    def help_notes(self) -> Dict[str, str]:
        """Help texts triggered by a "Non" answer, keyed by visible field id."""
        notes: Dict[str, str] = {}
        for fdef in self.visible_fields():
            note = fdef.help_note_for(self.answers.get(fdef.id))
            if note:
                notes[fdef.id] = note
        return notes

    def build_payload(self) -> SubmissionPayload:
        return build_payload(
            self.answers,
            self.template.fields,
            submitter_name=self.submitter_name,
            submitter_contact=self.submitter_contact,
        )

    def submit(self, transport: SubmissionTransport) -> SubmissionPayload:
        """
        Send the payload and clear the answers once accepted.

        Raises:
            SubmissionError: Delivery failed; answers are left untouched
        """
        payload = self.build_payload()
        try:
            transport.send(payload)
        except SubmissionError:
            logger.warning("Submission of form %s failed; keeping %d answers", self.template.id, len(self.answers))
            raise
        self.reset()
        return payload

    def reset(self) -> None:
        self.answers = {}
        self.submitter_name = None
        self.submitter_contact = None

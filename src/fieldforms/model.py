"""
Core Form Model Objects

Defines the canonical structures every other layer consumes:
    - FieldType (closed vocabulary of question kinds)
    - FieldDefinition (one question or structural marker)
    - FormTemplate (ordered, immutable field sequence)
    - AnswerState (live answers for one form session)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about how a template was delivered
        - Are immutable once a template is normalized
        - Are fully serializable
        - Represent structure, not behavior
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from fieldforms.conditions import ConditionalRule

logger = logging.getLogger(__name__)


DEFAULT_RANKING_OPTIONS: Tuple[str, ...] = ("1er", "2e", "3e", "4e", "5e")

# Answer keys ending with this suffix are display aids written by geo capture.
TRANSIENT_SUFFIX = "_province"

# Answer value that makes a field's help text show up as a note.
HELP_NOTE_TRIGGER = "Non"

AnswerState = Dict[str, Any]


class FieldType(Enum):
    """
    Kinds of field a template may declare.

    The vocabulary is closed: unknown type strings delivered by a
    remote definition are read as TEXT.
    """

    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    DATE = "date"
    GPS = "gps"
    RANKING = "ranking"
    SECTION = "section"
    INFO = "info"

    @classmethod
    def parse(cls, raw: Any) -> "FieldType":
        if isinstance(raw, cls):
            return raw
        if raw is None or raw == "":
            return cls.TEXT
        try:
            return cls(raw)
        except ValueError:
            logger.warning("Unknown field type %r, treating as text", raw)
            return cls.TEXT

    @property
    def is_choice(self) -> bool:
        return self in (FieldType.SELECT, FieldType.RADIO, FieldType.CHECKBOX, FieldType.RANKING)

    @property
    def is_structural(self) -> bool:
        """Section markers and info blocks carry no answer."""
        return self in (FieldType.SECTION, FieldType.INFO)


def is_transient_key(key: str) -> bool:
    return key.endswith(TRANSIENT_SUFFIX)


def transient_key_for(field_id: str) -> str:
    """Companion key holding the locality derived from a GPS field."""
    return f"{field_id}{TRANSIENT_SUFFIX}"


@dataclass
class FieldDefinition:
    """
    Canonical description of one question or structural marker.

    Properties:
        id:
            Unique within a template. "<section>.<key>" for leaf fields
            of a section, "section_<section>" for section markers, free
            form for legacy flat templates.

        label:
            Question text.

        type:
            FieldType.

        required:
            Whether an answer is expected before submission.

        options:
            Ordered choices (choice-based types only).

        placeholder, description:
            Optional display text.

        help_text:
            Explanatory note, also shown when a Yes/No answer is "Non".

        section:
            Originating section key, None for flat/legacy fields and
            for section markers.

        conditional:
            Optional ConditionalRule gating visibility.

        ranking_options:
            Assignable rank labels in priority order (ranking only).
            None means DEFAULT_RANKING_OPTIONS.
    """

    id: str
    label: str = ""
    type: FieldType = FieldType.TEXT
    required: bool = False
    options: List[str] = field(default_factory=list)
    placeholder: Optional[str] = None
    description: Optional[str] = None
    help_text: Optional[str] = None
    section: Optional[str] = None
    conditional: Optional[ConditionalRule] = None
    ranking_options: Optional[List[str]] = None

    @property
    def effective_ranking_options(self) -> List[str]:
        if self.ranking_options is not None:
            return list(self.ranking_options)
        return list(DEFAULT_RANKING_OPTIONS)

    def help_note_for(self, answer: Any) -> Optional[str]:
        """Return the help text to display under the given answer, if any."""
        if self.help_text and answer == HELP_NOTE_TRIGGER:
            return self.help_text
        return None


@dataclass(frozen=True)
class FormTemplate:
    """
    Root container for one normalized survey form.

    Created once by the normalizer from a raw remote template and
    immutable thereafter. An empty `fields` tuple means no usable
    form was delivered; callers render a "no form available" state.

    INVARIANTS:
        - Field ids are unique
        - Field order is significant: a section marker immediately
          precedes its own fields, sections keep source key order
    """

    id: str = ""
    name: str = ""
    description: str = ""
    fields: Tuple[FieldDefinition, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.fields

    def get_field(self, field_id: str) -> Optional[FieldDefinition]:
        """
        Retrieve a field by id.

        Returns:
            FieldDefinition or None if not found
        """
        for fdef in self.fields:
            if fdef.id == field_id:
                return fdef
        return None

    def field_ids(self) -> List[str]:
        return [fdef.id for fdef in self.fields]

    def answerable_fields(self) -> List[FieldDefinition]:
        return [fdef for fdef in self.fields if not fdef.type.is_structural]

    def sections(self) -> List[str]:
        """Section keys in template order."""
        seen: List[str] = []
        for fdef in self.fields:
            if fdef.section and fdef.section not in seen:
                seen.append(fdef.section)
        return seen

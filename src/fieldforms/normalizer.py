"""
Template Normalizer (Raw remote template → canonical FormTemplate).

A remote form definition delivers its `fields` attribute in one of
three shapes:

    - a JSON-encoded string of either shape below
    - an already-flat list of field records (legacy)
    - a mapping of section key → section record:

        {"household": {"type": "object", "label": "Ménage",
                       "fields": {"size": {"type": "number", ...}}}}

The shape is classified once into a RawFields variant and then
flattened into an ordered tuple of FieldDefinition objects.

ARCHITECTURAL RULE:
    Normalization never raises. A template whose fields cannot be
    read yields an empty FormTemplate.
"""

import json
import logging
import os
import warnings
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from fieldforms.conditions import ConditionalRule
from fieldforms.model import FieldDefinition, FieldType, FormTemplate
from fieldforms.serialization import field_from_dict

logger = logging.getLogger(__name__)


SECTION_TYPE = "object"
SECTION_MARKER_PREFIX = "section_"

# Commune/quarter is always captured as free text, whatever the template says.
RESERVED_LOCALITY_KEY = "communeQuartier"
RESERVED_LOCALITY_PLACEHOLDER = "Entrez votre commune/quartier"


@dataclass(frozen=True)
class JsonText:
    """Fields delivered as a JSON document still to be decoded."""
    text: str


@dataclass(frozen=True)
class FlatFields:
    """Fields delivered as an ordered list of field records."""
    records: Tuple[Any, ...]


@dataclass(frozen=True)
class SectionMap:
    """Fields delivered grouped by section, in source key order."""
    sections: Tuple[Tuple[str, Any], ...]


@dataclass(frozen=True)
class Unusable:
    """Fields that cannot be interpreted (missing, malformed, wrong type)."""
    reason: str


RawFields = Union[JsonText, FlatFields, SectionMap, Unusable]


def classify_raw_fields(value: Any) -> RawFields:
    """
    Resolve the shape of a raw `fields` value.

    JSON text is decoded here, so the result is never a JsonText
    wrapping another JsonText.
    """
    if isinstance(value, JsonText):
        value = value.text
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError as e:
            return Unusable(f"invalid JSON: {e}")
        if isinstance(decoded, str):
            return Unusable("JSON document is a bare string")
        return classify_raw_fields(decoded)
    if isinstance(value, (list, tuple)):
        return FlatFields(tuple(value))
    if isinstance(value, Mapping):
        return SectionMap(tuple(value.items()))
    if value is None:
        return Unusable("no fields")
    return Unusable(f"unsupported fields type {type(value).__name__}")


def _is_section(section: Any) -> bool:
    return (
        isinstance(section, Mapping)
        and section.get("type") == SECTION_TYPE
        and isinstance(section.get("fields"), Mapping)
    )


def _leaf_field(section_key: str, field_key: str, spec: Mapping[str, Any]) -> FieldDefinition:
    """Build one leaf FieldDefinition from a section's field spec."""
    reserved = field_key == RESERVED_LOCALITY_KEY
    if reserved:
        ftype = FieldType.TEXT
    else:
        raw_type = spec.get("type") or FieldType.TEXT.value
        ftype = FieldType.parse(raw_type)
        if ftype.value != raw_type:
            warnings.warn(
                f"Unknown type {raw_type!r} for {section_key}.{field_key}, using text",
                UserWarning,
            )

    options: List[str] = []
    if ftype is not FieldType.TEXT and isinstance(spec.get("options"), list):
        options = list(spec["options"])

    ranking_options = spec.get("rankingOptions")
    return FieldDefinition(
        id=f"{section_key}.{field_key}",
        label=spec.get("label") or field_key,
        type=ftype,
        required=bool(spec.get("required", False)),
        options=options,
        placeholder=RESERVED_LOCALITY_PLACEHOLDER if reserved else spec.get("placeholder"),
        description=spec.get("helpText"),
        help_text=spec.get("helpText"),
        section=section_key,
        conditional=ConditionalRule.from_raw(spec.get("conditional")),
        ranking_options=list(ranking_options) if isinstance(ranking_options, list) else None,
    )


def _flatten_sections(sections: Tuple[Tuple[str, Any], ...]) -> List[FieldDefinition]:
    out: List[FieldDefinition] = []
    for section_key, section in sections:
        if not _is_section(section):
            logger.debug("Skipping non-section entry %r", section_key)
            continue

        out.append(FieldDefinition(
            id=f"{SECTION_MARKER_PREFIX}{section_key}",
            label=section.get("label") or section_key,
            type=FieldType.SECTION,
        ))
        for field_key, spec in section["fields"].items():
            if not isinstance(spec, Mapping):
                spec = {}
            out.append(_leaf_field(section_key, field_key, spec))
    return out


def _flat_records(records: Tuple[Any, ...]) -> List[FieldDefinition]:
    out: List[FieldDefinition] = []
    for index, record in enumerate(records):
        if isinstance(record, FieldDefinition):
            out.append(record)
        elif isinstance(record, Mapping) and record.get("id"):
            out.append(field_from_dict(record))
        else:
            logger.warning("Dropping flat field record %d without an id", index)
    return out


def normalize_fields(fields: Any) -> Tuple[FieldDefinition, ...]:
    """
    Flatten a raw `fields` value into the canonical field sequence.

    Returns:
        Ordered tuple of FieldDefinition; empty when the value is unusable
    """
    shape = classify_raw_fields(fields)

    if isinstance(shape, Unusable):
        logger.warning("Form fields unusable (%s); no form available", shape.reason)
        return ()
    if isinstance(shape, SectionMap):
        return tuple(_flatten_sections(shape.sections))
    if isinstance(shape, FlatFields):
        return tuple(_flat_records(shape.records))
    raise TypeError(f"Unhandled raw fields shape: {type(shape)}")


def _raw_attr(raw: Any, name: str, default: Any = None) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name, default)
    return getattr(raw, name, default)


def normalize_template(raw: Any) -> FormTemplate:
    """
    Normalize one raw template into a FormTemplate.

    Args:
        raw: Mapping (or object) with id, name, description and fields

    Returns:
        FormTemplate, with an empty field tuple when nothing usable
        was delivered. Never raises.
    """
    if isinstance(raw, FormTemplate):
        return raw
    if raw is None:
        return FormTemplate()

    template_id = _raw_attr(raw, "id")
    return FormTemplate(
        id="" if template_id is None else str(template_id),
        name=_raw_attr(raw, "name") or "",
        description=_raw_attr(raw, "description") or "",
        fields=normalize_fields(_raw_attr(raw, "fields")),
    )


def load_template_file(filepath: str) -> FormTemplate:
    """
    Read a raw template from a JSON or YAML file and normalize it.

    Args:
        filepath: Path to a .json, .yaml or .yml file

    Returns:
        FormTemplate

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Template file not found: {filepath}")

    ext = os.path.splitext(filepath)[1].lower()
    try:
        if ext in (".yaml", ".yml"):
            raw: Optional[Dict[str, Any]] = yaml.safe_load(content)
        else:
            raw = json.loads(content)
    except (ValueError, yaml.YAMLError) as e:
        logger.warning("Template file %s is unreadable: %s", filepath, e)
        return FormTemplate()

    if not isinstance(raw, Mapping):
        logger.warning("Template file %s does not hold a template object", filepath)
        return FormTemplate()
    if not raw.get("name"):
        raw = dict(raw, name=os.path.splitext(os.path.basename(filepath))[0])
    return normalize_template(raw)


__all__ = [
    "RawFields",
    "JsonText",
    "FlatFields",
    "SectionMap",
    "Unusable",
    "classify_raw_fields",
    "normalize_fields",
    "normalize_template",
    "load_template_file",
]

"""
Serialization helpers for fieldforms objects (FieldDefinition, FormTemplate, SubmissionPayload).

Canonical objects are written with the same camelCase keys the remote
definitions use (`helpText`, `rankingOptions`), so a serialized
template is itself a valid flat raw template.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Mapping

import yaml

from fieldforms.conditions import ConditionalRule
from fieldforms.model import FieldDefinition, FieldType, FormTemplate
from fieldforms.submission import SubmissionPayload


def conditional_to_dict(rule: ConditionalRule | None) -> Dict[str, Any] | None:
    if rule is None:
        return None
    return rule.to_raw()


def conditional_from_dict(d: Any) -> ConditionalRule | None:
    return ConditionalRule.from_raw(d)


def field_to_dict(f: FieldDefinition) -> Dict[str, Any]:
    return {
        "id": f.id,
        "label": f.label,
        "type": f.type.value,
        "required": f.required,
        "options": list(f.options),
        "placeholder": f.placeholder,
        "description": f.description,
        "helpText": f.help_text,
        "section": f.section,
        "conditional": conditional_to_dict(f.conditional),
        "rankingOptions": list(f.ranking_options) if f.ranking_options is not None else None,
    }


def field_from_dict(d: Mapping[str, Any]) -> FieldDefinition:
    ranking_options = d.get("rankingOptions")
    options = d.get("options")
    return FieldDefinition(
        id=str(d["id"]),
        label=d.get("label") or "",
        type=FieldType.parse(d.get("type")),
        required=bool(d.get("required", False)),
        options=list(options) if isinstance(options, list) else [],
        placeholder=d.get("placeholder"),
        description=d.get("description"),
        help_text=d.get("helpText"),
        section=d.get("section"),
        conditional=conditional_from_dict(d.get("conditional")),
        ranking_options=list(ranking_options) if isinstance(ranking_options, list) else None,
    )


def template_to_dict(t: FormTemplate) -> Dict[str, Any]:
    return {
        "id": t.id,
        "name": t.name,
        "description": t.description,
        "fields": [field_to_dict(f) for f in t.fields],
    }


def template_from_dict(d: Mapping[str, Any]) -> FormTemplate:
    return FormTemplate(
        id=str(d.get("id", "")),
        name=d.get("name", ""),
        description=d.get("description", ""),
        fields=tuple(field_from_dict(f) for f in d.get("fields", [])),
    )


def template_to_json(t: FormTemplate) -> str:
    return json.dumps(template_to_dict(t), sort_keys=True, ensure_ascii=False)


def template_from_json(s: str) -> FormTemplate:
    d = json.loads(s)
    return template_from_dict(d)


def template_to_yaml(t: FormTemplate) -> str:
    return yaml.safe_dump(template_to_dict(t), allow_unicode=True, sort_keys=False)


def template_from_yaml(s: str) -> FormTemplate:
    d = yaml.safe_load(s)
    return template_from_dict(d)


def payload_to_json(p: SubmissionPayload) -> str:
    return json.dumps(p.to_dict(), ensure_ascii=False)

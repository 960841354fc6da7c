"""
Example raw template for demos and tests.

Mirrors the shape delivered by the collection API for a household
energy survey: two sections, a GPS field, a reserved commune/quarter
field, a Yes/No question gating a follow-up, and a ranking question.
"""
import json
from typing import Any, Dict


def build_example_household_template(as_json: bool = False) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        "identification": {
            "type": "object",
            "label": "Identification",
            "fields": {
                "nomOuCode": {"type": "text", "label": "Nom ou code du ménage", "required": True},
                "communeQuartier": {
                    "type": "select",
                    "label": "Commune / Quartier",
                    "options": ["Gombe", "Limete"],
                },
                "geolocalisation": {"type": "gps", "label": "Position GPS", "required": True},
            },
        },
        "modeCuisson": {
            "type": "object",
            "label": "Mode de cuisson",
            "fields": {
                "combustibles": {
                    "type": "checkbox",
                    "label": "Combustibles utilisés",
                    "options": ["Bois", "Charbon", "Gaz", "Électricité"],
                },
                "connaitSolutionsPropres": {
                    "type": "radio",
                    "label": "Connaissez-vous les solutions de cuisson propre ?",
                    "options": ["Oui", "Non"],
                    "helpText": "Les solutions propres incluent le gaz et les foyers améliorés.",
                },
                "solutionsConnues": {
                    "type": "checkbox",
                    "label": "Lesquelles ?",
                    "options": ["Gaz", "Foyer amélioré", "Électricité"],
                    "conditional": {"field": "connaitSolutionsPropres", "value": "Oui"},
                },
                "preferences": {
                    "type": "ranking",
                    "label": "Classez vos combustibles préférés",
                    "options": ["Bois", "Charbon", "Gaz"],
                    "rankingOptions": ["1er", "2e", "3e"],
                },
            },
        },
    }
    template: Dict[str, Any] = {
        "id": "household-energy",
        "name": "Enquête ménage énergie",
        "description": "Usage des combustibles de cuisson",
        "fields": fields,
    }
    if as_json:
        template["fields"] = json.dumps(fields, ensure_ascii=False)
    return template

"""
Template Analyzer — diagnostics and inventory of normalized form templates.

This module provides lightweight analysis of FormTemplate objects:
    - Field inventory by type and section
    - Conditional dependency map
    - Reference checks (unknown or self-referencing conditionals)
    - Ranking capacity and empty-choice checks

IMPORTANT: This is read-only. It does NOT modify the template.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Set

from fieldforms.model import FieldType, FormTemplate


@dataclass
class TemplateReport:
    """Analysis report for one template."""

    template_name: str
    total_fields: int = 0
    total_sections: int = 0
    answerable_fields: int = 0
    required_fields: int = 0

    fields_by_type: Dict[str, int] = field(default_factory=dict)
    fields_by_section: Dict[str, int] = field(default_factory=dict)

    # referenced field id -> ids of the fields it gates
    dependencies: Dict[str, List[str]] = field(default_factory=dict)
    conditional_fields: int = 0

    duplicate_ids: Set[str] = field(default_factory=set)
    unknown_references: Set[str] = field(default_factory=set)

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_template(template: FormTemplate) -> TemplateReport:
    """
    Perform analysis of a FormTemplate.

    Checks for:
    - Duplicate field ids
    - Conditionals referencing unknown fields or the field itself
    - Ranking fields with more options than rank labels
    - Choice fields delivered without options

    Returns a TemplateReport with counts and warnings.
    """
    report = TemplateReport(template_name=template.name or template.id)
    report.total_fields = len(template.fields)

    if template.is_empty:
        report.add_warning("Template has no usable fields")
        return report

    # =========================================================================
    # 1. INVENTORY
    # =========================================================================

    by_type = Counter(f.type.value for f in template.fields)
    report.fields_by_type = dict(by_type)
    report.total_sections = by_type.get(FieldType.SECTION.value, 0)

    by_section: Dict[str, int] = defaultdict(int)
    for f in template.fields:
        if f.section:
            by_section[f.section] += 1
    report.fields_by_section = dict(by_section)

    answerable = template.answerable_fields()
    report.answerable_fields = len(answerable)
    report.required_fields = sum(1 for f in answerable if f.required)

    id_counts = Counter(f.id for f in template.fields)
    report.duplicate_ids = {fid for fid, n in id_counts.items() if n > 1}

    # =========================================================================
    # 2. CONDITIONAL DEPENDENCIES
    # =========================================================================

    known_ids = set(id_counts)
    dependencies: Dict[str, List[str]] = defaultdict(list)

    for f in template.fields:
        if f.conditional is None:
            continue
        report.conditional_fields += 1
        target = f.conditional.resolve_field_id(f.section)
        dependencies[target].append(f.id)

        if target == f.id:
            report.add_warning(f"Field {f.id} is conditional on itself")
        elif target not in known_ids:
            report.unknown_references.add(target)

    report.dependencies = dict(dependencies)

    # =========================================================================
    # 3. CHOICE FIELDS
    # =========================================================================

    for f in template.fields:
        if f.type.is_choice and not f.options:
            report.add_warning(f"Choice field {f.id} has no options")
        if f.type is FieldType.RANKING:
            ranks = f.effective_ranking_options
            if len(f.options) > len(ranks):
                report.add_warning(
                    f"Ranking field {f.id} has {len(f.options)} options but only {len(ranks)} ranks"
                )

    # =========================================================================
    # 4. WARNING FLAGS
    # =========================================================================

    if report.duplicate_ids:
        report.add_warning(f"Duplicate field ids: {', '.join(sorted(report.duplicate_ids))}")

    if report.unknown_references:
        report.add_warning(
            f"Conditionals reference unknown fields: {', '.join(sorted(report.unknown_references))}"
        )

    return report

"""
Tests for fieldforms Core Model Objects

These tests verify:
    - Closed type and operator vocabularies
    - Field defaults
    - Template lookups
    - Transient key helpers
"""

import pytest

from fieldforms.conditions import ConditionalOperator, ConditionalRule
from fieldforms.model import (
    DEFAULT_RANKING_OPTIONS,
    FieldDefinition,
    FieldType,
    FormTemplate,
    is_transient_key,
    transient_key_for,
)


class TestFieldType:
    """Test the field type vocabulary."""

    def test_parse_known(self):
        """Should parse a known type name."""
        assert FieldType.parse("ranking") is FieldType.RANKING

    @pytest.mark.parametrize("raw", [None, "", "slider"])
    def test_parse_unknown_is_text(self, raw):
        """Should read missing or unknown types as text."""
        assert FieldType.parse(raw) is FieldType.TEXT

    def test_choice_types(self):
        """Should mark option-bearing types as choices."""
        assert FieldType.CHECKBOX.is_choice
        assert FieldType.RANKING.is_choice
        assert not FieldType.GPS.is_choice

    def test_structural_types(self):
        """Should mark sections and info as structural."""
        assert FieldType.SECTION.is_structural
        assert FieldType.INFO.is_structural
        assert not FieldType.TEXT.is_structural


class TestFieldDefinition:
    """Test FieldDefinition objects."""

    def test_minimal_field(self):
        """Should create a field with defaults."""
        fdef = FieldDefinition(id="q")
        assert fdef.type is FieldType.TEXT
        assert fdef.required is False
        assert fdef.options == []
        assert fdef.conditional is None

    def test_default_ranking_options(self):
        """Should default rank labels when absent."""
        fdef = FieldDefinition(id="r", type=FieldType.RANKING)
        assert fdef.effective_ranking_options == list(DEFAULT_RANKING_OPTIONS)
        assert DEFAULT_RANKING_OPTIONS == ("1er", "2e", "3e", "4e", "5e")

    def test_custom_ranking_options(self):
        """Should use declared rank labels."""
        fdef = FieldDefinition(id="r", type=FieldType.RANKING, ranking_options=["A", "B"])
        assert fdef.effective_ranking_options == ["A", "B"]

    def test_empty_ranking_options_not_defaulted(self):
        """Should apply the default vocabulary only when rank labels are absent."""
        fdef = FieldDefinition(id="r", type=FieldType.RANKING, ranking_options=[])
        assert fdef.effective_ranking_options == []

    def test_help_note_only_on_non(self):
        """Should show help text only for a "Non" answer."""
        fdef = FieldDefinition(id="q", type=FieldType.RADIO, help_text="Expliquez")
        assert fdef.help_note_for("Non") == "Expliquez"
        assert fdef.help_note_for("Oui") is None
        assert FieldDefinition(id="p").help_note_for("Non") is None


class TestConditionalRule:
    """Test conditional rule parsing and resolution."""

    def test_from_raw(self):
        """Should parse a raw conditional mapping."""
        rule = ConditionalRule.from_raw({"field": "a", "value": 2, "operator": "not_equals"})
        assert rule == ConditionalRule(field="a", value=2, operator=ConditionalOperator.NOT_EQUALS)

    def test_resolve(self):
        """Should qualify bare references with the section."""
        rule = ConditionalRule(field="smoker", value="Non")
        assert rule.resolve_field_id("demo") == "demo.smoker"
        assert rule.resolve_field_id(None) == "smoker"
        assert ConditionalRule(field="x.smoker").resolve_field_id("demo") == "x.smoker"

    def test_to_raw(self):
        """Should serialize the rule with its operator."""
        rule = ConditionalRule(field="a", value="b")
        assert rule.to_raw() == {"field": "a", "value": "b", "operator": "equals"}


class TestFormTemplate:
    """Test template lookups."""

    def make_template(self):
        return FormTemplate(
            id="t",
            name="T",
            fields=(
                FieldDefinition(id="section_s", type=FieldType.SECTION),
                FieldDefinition(id="s.a", section="s"),
                FieldDefinition(id="s.b", section="s"),
                FieldDefinition(id="section_u", type=FieldType.SECTION),
                FieldDefinition(id="u.c", section="u", type=FieldType.INFO),
            ),
        )

    def test_get_field(self):
        """Should retrieve fields by id."""
        template = self.make_template()
        assert template.get_field("s.b").id == "s.b"
        assert template.get_field("missing") is None

    def test_sections_in_order(self):
        """Should list sections in template order."""
        assert self.make_template().sections() == ["s", "u"]

    def test_answerable_fields(self):
        """Should exclude structural fields."""
        assert [f.id for f in self.make_template().answerable_fields()] == ["s.a", "s.b"]

    def test_empty(self):
        """Should report an empty template."""
        assert FormTemplate().is_empty
        assert not self.make_template().is_empty

    def test_immutable(self):
        """Should not allow template attributes to change."""
        template = self.make_template()
        with pytest.raises(AttributeError):
            template.name = "other"


def test_transient_keys():
    """Should recognise province companion keys."""
    assert transient_key_for("s.gps") == "s.gps_province"
    assert is_transient_key("s.gps_province")
    assert not is_transient_key("s.province")

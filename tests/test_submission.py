"""
Tests for the submission transformer.
"""

from fieldforms.model import FieldDefinition, FieldType
from fieldforms.submission import SubmissionPayload, build_payload, transform_answers


FIELDS = [
    FieldDefinition(id="section_s", type=FieldType.SECTION),
    FieldDefinition(id="s.name", type=FieldType.TEXT),
    FieldDefinition(id="s.fuels", type=FieldType.CHECKBOX, options=["Bois", "Gaz"]),
    FieldDefinition(id="s.prefs", type=FieldType.RANKING, options=["Bois", "Gaz"]),
    FieldDefinition(id="s.gps", type=FieldType.GPS),
]


class TestTransform:
    """Test per-type coercion of answers."""

    def test_unanswered_checkbox_is_empty_list(self):
        """Should send an empty list for an unanswered checkbox."""
        data = transform_answers({}, FIELDS)
        assert data["s.fuels"] == []

    def test_scalar_checkbox_is_wrapped(self):
        """Should wrap a scalar checkbox answer."""
        data = transform_answers({"s.fuels": "Gaz"}, FIELDS)
        assert data["s.fuels"] == ["Gaz"]

    def test_list_checkbox_passes_through(self):
        """Should keep a list checkbox answer."""
        data = transform_answers({"s.fuels": ["Bois", "Gaz"]}, FIELDS)
        assert data["s.fuels"] == ["Bois", "Gaz"]

    def test_missing_ranking_omitted(self):
        """Should omit a ranking with no mapping."""
        data = transform_answers({}, FIELDS)
        assert "s.prefs" not in data

    def test_malformed_ranking_omitted(self):
        """Should omit a ranking that is not a mapping."""
        data = transform_answers({"s.prefs": "Bois"}, FIELDS)
        assert "s.prefs" not in data

    def test_ranking_mapping_kept_even_if_unranked(self):
        """Should keep a mapping with unranked options."""
        data = transform_answers({"s.prefs": {"Bois": ""}}, FIELDS)
        assert data["s.prefs"] == {"Bois": ""}

    def test_transient_keys_dropped(self):
        """Should drop province companion keys."""
        data = transform_answers({"s.gps": "-4.3, 15.3", "s.gps_province": "Kinshasa"}, FIELDS)
        assert data == {"s.gps": "-4.3, 15.3", "s.fuels": []}

    def test_other_values_untouched(self):
        """Should pass other answers through."""
        data = transform_answers({"s.name": "  Mbala ", "extra": 3}, FIELDS)
        assert data["s.name"] == "  Mbala "
        assert data["extra"] == 3
        assert "s.gps" not in data

    def test_input_not_modified(self):
        """Should not modify the answers it is given."""
        answers = {"s.fuels": "Gaz", "s.gps_province": "Kinshasa"}
        transform_answers(answers, FIELDS)
        assert answers == {"s.fuels": "Gaz", "s.gps_province": "Kinshasa"}


class TestPayload:
    """Test the outgoing payload shape."""

    def test_submitter_fields_omitted_when_empty(self):
        """Should omit empty submitter fields."""
        payload = build_payload({"s.name": "x"}, FIELDS, submitter_name="", submitter_contact=None)
        assert payload.to_dict() == {"formData": {"s.name": "x", "s.fuels": []}}

    def test_submitter_fields_included(self):
        """Should include submitter fields when set."""
        payload = build_payload({}, FIELDS, submitter_name="Amani", submitter_contact="+243 81 000 0000")
        body = payload.to_dict()
        assert body["submitterName"] == "Amani"
        assert body["submitterContact"] == "+243 81 000 0000"

    def test_default_payload(self):
        """Should build an empty payload by default."""
        assert SubmissionPayload().to_dict() == {"formData": {}}

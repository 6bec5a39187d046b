"""Tests for prdsmith.transform.fields module."""

import pytest

from prdsmith.transform import fields
from prdsmith.transform.fields import FieldReader, is_present, pick_list, pick_text


class TestIsPresent:
    @pytest.mark.parametrize("value", ["x", 1, -2.5, [], {}, True])
    def test_present(self, value):
        assert is_present(value)

    @pytest.mark.parametrize("value", [None, "", 0, 0.0, False])
    def test_absent(self, value):
        assert not is_present(value)


class TestPickText:
    def test_first_non_empty_wins(self):
        obj = {"featureName": "", "feature_name": "Export", "name": "Other"}
        assert pick_text(obj, *fields.FEATURE_NAME) == ("Export", "feature_name")

    def test_wrong_type_skipped(self):
        obj = {"featureName": 3, "title": "Export"}
        assert pick_text(obj, *fields.FEATURE_NAME) == ("Export", "title")

    def test_nothing_found(self):
        assert pick_text({}, "a", "b") == ("", None)


class TestPickList:
    def test_non_strings_dropped(self):
        assert pick_list({"inScope": ["a", 1, None, "b"]}, "inScope") == (["a", "b"], "inScope")

    def test_empty_list_falls_through(self):
        obj = {"successMetrics": [], "success_metrics": ["fast"]}
        assert pick_list(obj, *fields.SUCCESS_METRICS) == (["fast"], "success_metrics")

    def test_camel_case_criteria_first(self):
        item = {"acceptance_criteria": ["snake"], "acceptanceCriteria": ["camel"]}
        assert pick_list(item, *fields.ACCEPTANCE_CRITERIA) == (["camel"], "acceptanceCriteria")


class TestFieldReader:
    def test_records_alias_notes(self):
        reader = FieldReader({"feature_name": "Export"})
        assert reader.text(fields.FEATURE_NAME) == "Export"
        assert reader.notes == ["Field: feature_name -> featureName"]

    def test_canonical_name_no_note(self):
        reader = FieldReader({"featureName": "Export"})
        reader.text(fields.FEATURE_NAME)
        assert reader.notes == []

    def test_problem_statement_falls_back_to_description(self):
        reader = FieldReader({"description": "Slow exports"})
        assert reader.text(fields.PROBLEM_STATEMENT) == "Slow exports"
        assert reader.notes == ["Field: description -> problemStatement"]

    def test_consumed_keys_include_unused_aliases(self):
        reader = FieldReader({"successMetrics": [], "success_metrics": ["fast"], "owner": "ana"})
        reader.text_list(fields.SUCCESS_METRICS)
        assert reader.unconsumed() == ["owner"]

    def test_raw_marks_consumed(self):
        reader = FieldReader({"requirements": [1], "other": 2})
        assert reader.raw("requirements") == [1]
        assert reader.raw("missing") is None
        assert reader.unconsumed() == ["other"]

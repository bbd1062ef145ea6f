"""Test response normalization and schema validation."""

import json
import pytest

from testcase_generator.validation import (
    clean_response,
    normalize,
    validate_story_test_cases,
    validate_test_cases,
)
from testcase_generator.exceptions import (
    EmptyAIContentError,
    MalformedAIResponseError,
    SchemaValidationError,
)


class TestNormalize:
    """Test fence stripping and strict JSON parsing."""

    def test_strips_language_tagged_fence(self):
        assert normalize("```json\n[1,2,3]\n```") == [1, 2, 3]

    def test_strips_bare_fence(self):
        assert normalize("```\n{\"a\": 1}\n```") == {"a": 1}

    @pytest.mark.parametrize("text", [
        "[1, 2, 3]",
        '{"id": 1, "title": "t"}',
        '[{"nested": {"list": [true, null, 1.5]}}]',
        '"just a string"',
        "42",
    ])
    def test_clean_json_parses_unchanged(self, text):
        assert normalize(text) == json.loads(text)

    def test_strips_every_fence(self):
        raw = "```json\n[1,\n```\n2]\n```"

        assert normalize(raw) == [1, 2]

    def test_surrounding_whitespace(self):
        assert normalize("\n\n   ```json [\"a\"] ```   \n") == ["a"]

    @pytest.mark.parametrize("raw", ["", "   ", "```json\n```", "``````", "\n\t"])
    def test_blank_content(self, raw):
        with pytest.raises(EmptyAIContentError):
            normalize(raw)

    @pytest.mark.parametrize("raw", [
        "{not json",
        "Here are your test cases: [1, 2]",
        "[1, 2,]",
        "{'single': 'quotes'}",
    ])
    def test_malformed_json(self, raw):
        with pytest.raises(MalformedAIResponseError) as exc_info:
            normalize(raw)

        assert exc_info.value.raw_response == raw
        assert exc_info.value.details

    def test_malformed_keeps_original_text_with_fences(self):
        raw = "```json\n{not json\n```"

        with pytest.raises(MalformedAIResponseError) as exc_info:
            normalize(raw)

        assert exc_info.value.raw_response == raw

    def test_clean_response_leaves_inner_backticks(self):
        assert clean_response("```json\n[\"use `code`\"]\n```") == '["use `code`"]'


class TestValidateTestCases:
    """Test decoding of the story-path payload."""

    def test_valid_payload(self, story_test_cases):
        test_cases = validate_test_cases(story_test_cases)

        assert len(test_cases) == 1
        assert test_cases[0].id == 1
        assert test_cases[0].expected_result == story_test_cases[0]["expectedResult"]
        assert test_cases[0].model_dump(by_alias=True) == story_test_cases[0]

    def test_snake_case_expected_result_accepted(self):
        payload = [{"id": 2, "title": "t", "description": "d", "expected_result": "r"}]

        assert validate_test_cases(payload)[0].expected_result == "r"

    def test_empty_array(self):
        assert validate_test_cases([]) == []

    def test_top_level_object_rejected(self, story_test_cases):
        with pytest.raises(SchemaValidationError, match="expected a JSON array, got dict"):
            validate_test_cases({"test_cases": story_test_cases})

    def test_missing_field_reported_with_location(self, story_test_cases):
        payload = [
            story_test_cases[0],
            {"id": 2, "title": "No expected result", "description": "d"},
        ]

        with pytest.raises(SchemaValidationError) as exc_info:
            validate_test_cases(payload)

        error = exc_info.value
        assert any(e.startswith("1.expectedResult") for e in error.errors)
        assert error.payload == payload

    def test_wrong_type_rejected(self):
        payload = [{"id": "first", "title": "t", "description": "d", "expectedResult": "r"}]

        with pytest.raises(SchemaValidationError) as exc_info:
            validate_test_cases(payload)

        assert any(e.startswith("0.id") for e in exc_info.value.errors)


class TestValidateStoryTestCases:
    """Test decoding of the document-path payload."""

    def test_valid_payload_keeps_order(self, document_stories):
        stories = validate_story_test_cases(document_stories)

        assert [s.story_title for s in stories] == ["User can log in", "User can export a report"]
        assert [tc.id for tc in stories[0].test_cases] == ["TC-001", "TC-002"]
        assert stories[0].test_cases[0].steps[0] == "Go to login page"
        assert [s.model_dump() for s in stories] == document_stories

    def test_id_convention_is_advisory(self):
        payload = [{
            "story_title": "Search",
            "test_cases": [{"id": "search-1", "title": "t", "steps": ["s"], "expected_result": "r"}]
        }]

        stories = validate_story_test_cases(payload)

        assert stories[0].test_cases[0].follows_id_convention is False

    def test_flat_test_cases_rejected(self, story_test_cases):
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_story_test_cases(story_test_cases)

        assert any("story_title" in e for e in exc_info.value.errors)

    def test_steps_must_be_list(self):
        payload = [{
            "story_title": "Login",
            "test_cases": [{"id": "TC-001", "title": "t", "steps": "one step", "expected_result": "r"}]
        }]

        with pytest.raises(SchemaValidationError) as exc_info:
            validate_story_test_cases(payload)

        assert any(e.startswith("0.test_cases.0.steps") for e in exc_info.value.errors)

"""
Normalization and schema validation for LLM responses.

`normalize` turns raw model text into a JSON value: code fences are stripped
and the remainder must parse cleanly. Nothing is repaired. The validate_*
helpers then decode that value into typed models.
"""

from __future__ import annotations
import json
import re
from typing import Any, List, Type, TypeVar
from pydantic import BaseModel, TypeAdapter, ValidationError
import logging

from .exceptions import EmptyAIContentError, MalformedAIResponseError, SchemaValidationError
from .models import StoryWithTestCases, TestCase

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)

CODE_FENCE = re.compile(r"```json|```")


def clean_response(raw: str) -> str:
    """Remove every ```json and ``` marker and surrounding whitespace."""
    return CODE_FENCE.sub("", raw).strip()


def normalize(raw: str) -> Any:
    """
    Parse an LLM response into a JSON value.

    Raises:
        EmptyAIContentError: If nothing is left after removing code fences
        MalformedAIResponseError: If the cleaned text is not valid JSON
    """
    cleaned = clean_response(raw)
    if not cleaned:
        raise EmptyAIContentError("No valid content in AI response")

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON from cleaned response: {cleaned[:500]}")
        raise MalformedAIResponseError(raw, str(e)) from e


def _format_errors(error: ValidationError) -> List[str]:
    messages = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        messages.append(f"{loc}: {err.get('msg', 'invalid')}")
    return messages


def validate_list(data: Any, model_class: Type[T]) -> List[T]:
    """
    Decode a JSON array into a list of ``model_class`` instances.

    Raises:
        SchemaValidationError: If the value is not a list or any item has
            missing or mistyped fields
    """
    if not isinstance(data, list):
        raise SchemaValidationError(
            [f"<root>: expected a JSON array, got {type(data).__name__}"], data
        )

    try:
        return TypeAdapter(List[model_class]).validate_python(data)
    except ValidationError as e:
        messages = _format_errors(e)
        logger.warning(f"{model_class.__name__} validation failed: {messages}")
        raise SchemaValidationError(messages, data) from e


def validate_test_cases(data: Any) -> List[TestCase]:
    """Validate the story-path payload."""
    return validate_list(data, TestCase)


def validate_story_test_cases(data: Any) -> List[StoryWithTestCases]:
    """Validate the document-path payload."""
    stories = validate_list(data, StoryWithTestCases)

    drifted = [
        tc.id for story in stories for tc in story.test_cases
        if not tc.follows_id_convention
    ]
    if drifted:
        logger.info(f"Test case IDs not following TC-NNN: {drifted}")

    return stories

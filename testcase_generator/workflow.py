"""
Test Case Generation Workflow

Two straight-line pipelines:
  story:    build prompt -> LLM -> normalize -> validate
  document: extract text -> build prompt -> LLM -> normalize -> validate

The first failure aborts the request; nothing is retried or defaulted.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, List, Optional, Union
import logging

from pydantic import ValidationError

from .config import Settings, load_settings
from .exceptions import InvalidInputError
from .extraction import ensure_supported, extract, resolve_extension
from .models import DocumentFile, SourceInput, UserStory
from .prompts import build_extraction_prompt, build_story_prompt
from .runtime import LLMRuntime, create_runtime
from .validation import normalize, validate_story_test_cases, validate_test_cases

logger = logging.getLogger(__name__)


class TestCaseWorkflow:
    """
    Orchestrates prompt building, LLM invocation and response parsing.

    Holds no per-request state, so one instance can serve concurrent callers.
    """
    __test__ = False

    def __init__(
        self,
        runtime: LLMRuntime,
        settings: Optional[Settings] = None,
        validate_schema: bool = True
    ):
        """
        Args:
            runtime: LLM runtime used for every request
            settings: Resolved settings (defaults if None)
            validate_schema: Decode responses into models; False returns raw JSON
        """
        self.runtime = runtime
        self.settings = settings or Settings()
        self.validate_schema = validate_schema

    def generate_test_cases(self, user_story: str) -> List[Any]:
        """
        Generate test cases for a single user story.

        Returns:
            List of TestCase, or the parsed JSON array when schema
            validation is off

        Raises:
            InvalidInputError: If the story is blank
        """
        try:
            story = UserStory(text=user_story)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid user story: {e.errors()[0]['msg']}") from e
        logger.info(f"Generating test cases for user story ({len(story.text)} chars)")

        prompt = build_story_prompt(story.text, self.settings.prompt_warn_chars)
        data = self._invoke(prompt)

        if not self.validate_schema:
            return data
        test_cases = validate_test_cases(data)
        logger.info(f"Generated {len(test_cases)} test cases")
        return test_cases

    def extract_user_stories(
        self,
        file_path: Union[str, Path],
        original_filename: Optional[str] = None
    ) -> List[Any]:
        """
        Generate test cases for every user story in a document.

        Args:
            file_path: Stored upload (.pdf, .docx or .txt)
            original_filename: Upload's client-side name, used for the extension

        Returns:
            List of StoryWithTestCases in document order, or the parsed JSON
            array when schema validation is off
        """
        document = DocumentFile(
            path=str(file_path),
            extension=resolve_extension(file_path, original_filename)
        )
        return self._process_document(document)

    def run(self, source: SourceInput) -> List[Any]:
        """Dispatch on the input variant."""
        if isinstance(source, UserStory):
            return self.generate_test_cases(source.text)
        return self._process_document(source)

    def _process_document(self, document: DocumentFile) -> List[Any]:
        ext = ensure_supported(document.extension)

        logger.info(f"Extracting user stories from {document.path}")
        text = extract(document.path, ext)

        prompt = build_extraction_prompt(text, self.settings.prompt_warn_chars)
        data = self._invoke(prompt)

        if not self.validate_schema:
            return data
        stories = validate_story_test_cases(data)
        logger.info(
            f"Generated {sum(len(s.test_cases) for s in stories)} test cases "
            f"across {len(stories)} user stories"
        )
        return stories

    def _invoke(self, prompt: str) -> Any:
        try:
            raw = self.runtime.generate(prompt)
            logger.debug(f"Raw LLM response:\n{raw}")
            return normalize(raw)
        except Exception as e:
            logger.error(f"Failed to generate content using {self.runtime.get_model_info()['name']}: {e}")
            raise


# Convenience functions for common workflows

def _default_workflow(runtime: Optional[LLMRuntime], validate_schema: bool) -> TestCaseWorkflow:
    settings = load_settings()
    return TestCaseWorkflow(runtime or create_runtime(settings), settings, validate_schema)


def generate_test_cases(
    user_story: str,
    runtime: Optional[LLMRuntime] = None,
    validate_schema: bool = True
) -> List[Any]:
    """Generate test cases for a user story with the configured runtime."""
    return _default_workflow(runtime, validate_schema).generate_test_cases(user_story)


def extract_user_stories(
    file_path: Union[str, Path],
    original_filename: Optional[str] = None,
    runtime: Optional[LLMRuntime] = None,
    validate_schema: bool = True
) -> List[Any]:
    """Generate per-story test cases for a document with the configured runtime."""
    return _default_workflow(runtime, validate_schema).extract_user_stories(
        file_path, original_filename
    )

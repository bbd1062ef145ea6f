"""
Data models for the test case generator.

Inputs are a tagged union of a user story or an uploaded document. Outputs are
the two shapes the LLM is asked to produce: flat test cases for a single story,
and per-story test case groups for a document.
"""

from __future__ import annotations
import re
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


TEST_CASE_ID_PATTERN = re.compile(r"^TC-\d{3,}$")


# ==================== Input Models ====================

class UserStory(BaseModel):
    """A natural-language requirement to generate test cases from."""
    kind: Literal["story"] = "story"
    text: str = Field(..., description="User story text, embedded verbatim in the prompt")

    @field_validator('text')
    @classmethod
    def validate_non_blank(cls, v):
        if not v.strip():
            raise ValueError("User story must not be blank")
        return v


class DocumentFile(BaseModel):
    """An already-persisted upload to extract user stories from."""
    kind: Literal["document"] = "document"
    path: str = Field(..., description="Path of the stored file")
    extension: str = Field(..., description="Lower-case extension with leading dot")

    @field_validator('extension')
    @classmethod
    def normalize_extension(cls, v):
        v = v.strip().lower()
        if v and not v.startswith('.'):
            v = '.' + v
        return v

    @classmethod
    def from_path(cls, path: Union[str, Path], original_filename: Optional[str] = None) -> "DocumentFile":
        """Build from a stored path, preferring the upload's original filename for the extension."""
        source = original_filename or str(path)
        return cls(path=str(path), extension=Path(source).suffix)


SourceInput = Annotated[Union[UserStory, DocumentFile], Field(discriminator="kind")]


# ==================== Output Models ====================

class TestCase(BaseModel):
    """Test case generated from a single user story."""
    __test__ = False

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., description="Sequential test case number")
    title: str = Field(..., description="Short test case title")
    description: str = Field(..., description="What the test does")
    expected_result: str = Field(..., alias="expectedResult", description="Observable outcome")


class StoryTestCase(BaseModel):
    """Test case attached to a user story found in a document."""
    id: str = Field(..., description="Test case ID, conventionally TC-001, TC-002, ...")
    title: str = Field(..., description="Brief description of the test case")
    steps: List[str] = Field(..., description="Ordered instructions")
    expected_result: str = Field(..., description="Outcome that should be observed")

    @property
    def follows_id_convention(self) -> bool:
        """True when the ID matches TC-NNN. The model is asked for it but not forced."""
        return bool(TEST_CASE_ID_PATTERN.match(self.id))


class StoryWithTestCases(BaseModel):
    """One user story discovered in a document with its test cases."""
    story_title: str = Field(..., description="Title of the user story")
    test_cases: List[StoryTestCase] = Field(..., description="Test cases in generation order")

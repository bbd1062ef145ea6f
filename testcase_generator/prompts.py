"""
Prompt templates for test case generation.

Each builder fills a fixed template with one input string, verbatim. Inputs are
neither escaped nor truncated.
"""

from __future__ import annotations
import logging

logger = logging.getLogger(__name__)

DEFAULT_WARN_CHARS = 100_000


def _check_length(kind: str, text: str, warn_chars: int) -> None:
    if warn_chars and len(text) > warn_chars:
        logger.warning(f"{kind} is {len(text)} characters (over {warn_chars}); sending it untruncated")


def build_story_prompt(user_story: str, warn_chars: int = DEFAULT_WARN_CHARS) -> str:
    """Prompt asking for a flat JSON array of test cases for one user story."""
    _check_length("User story", user_story, warn_chars)

    return f"""You are a QA engineer. Given the following user story, generate all possible relevant test cases in JSON array format.
Each test case should include edge cases, negative scenarios, and boundary conditions where applicable.

Each test case should have the following fields:
- id (number)
- title (string)
- description (string)
- expectedResult (string)

User Story:
"{user_story}"

Respond only with the raw JSON array. Do not include any markdown, explanations, or formatting.
"""


def build_extraction_prompt(document_text: str, warn_chars: int = DEFAULT_WARN_CHARS) -> str:
    """Prompt asking for test cases grouped by each user story found in a document."""
    _check_length("Document text", document_text, warn_chars)

    return f"""You are a QA test engineer.

Given a document with multiple user stories, generate functional test cases for each user story.

For each user story, output a JSON object that contains:
- "story_title": the title of the user story
- "test_cases": an array of test case objects

Each test case object must have:
- "id": a unique test case identifier (e.g., TC-001, TC-002, etc.)
- "title": a brief description of the test case
- "steps": an ordered list of instructions to execute the test
- "expected_result": the outcome that should be observed

Input Document:
{document_text}

Output Format:
Respond only with a JSON array where each item corresponds to a user story and includes its test cases.

Example:
[
  {{
    "story_title": "User can login",
    "test_cases": [
      {{
        "id": "TC-001",
        "title": "Successful login with valid credentials",
        "steps": ["Go to login page", "Enter valid username", "Enter valid password", "Click login"],
        "expected_result": "User is redirected to the dashboard"
      }}
    ]
  }}
]

Respond only with raw JSON. Do not include any markdown, explanation, or additional formatting.

Begin:
"""

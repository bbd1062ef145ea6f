"""Pytest configuration and fixtures for test case generator tests."""

import json
import pytest
import fitz
from docx import Document

from testcase_generator.config import Settings
from testcase_generator.runtime import MockLLMRuntime


STORY_TEST_CASES = [
    {
        "id": 1,
        "title": "Reset password with registered email",
        "description": "Request a reset link for a registered email and set a new password",
        "expectedResult": "Password is updated and the user can log in with it"
    }
]

DOCUMENT_STORIES = [
    {
        "story_title": "User can log in",
        "test_cases": [
            {
                "id": "TC-001",
                "title": "Successful login with valid credentials",
                "steps": ["Go to login page", "Enter valid username", "Enter valid password", "Click login"],
                "expected_result": "User is redirected to the dashboard"
            },
            {
                "id": "TC-002",
                "title": "Login rejected with wrong password",
                "steps": ["Go to login page", "Enter valid username", "Enter wrong password", "Click login"],
                "expected_result": "Error message 'Invalid credentials' is shown"
            }
        ]
    },
    {
        "story_title": "User can export a report",
        "test_cases": [
            {
                "id": "TC-003",
                "title": "Export report as CSV",
                "steps": ["Open reports", "Select a report", "Click Export CSV"],
                "expected_result": "A CSV file is downloaded"
            }
        ]
    }
]

TWO_STORY_DOCUMENT = """Story 1: User can log in
As a registered user, I want to log in with my username and password so that I can see my dashboard.

Story 2: User can export a report
As an analyst, I want to export any report as CSV so that I can work with it in a spreadsheet.
"""


def fenced(payload) -> str:
    """Wrap a JSON payload the way models often do."""
    return f"```json\n{json.dumps(payload, indent=2)}\n```"


@pytest.fixture
def settings():
    """Settings for the mock provider."""
    return Settings(provider="mock", request_timeout=5.0)


@pytest.fixture
def mock_runtime():
    """Mock runtime answering both prompt templates with fenced JSON."""
    responses = {
        "User Story:": fenced(STORY_TEST_CASES),
        "Input Document:": fenced(DOCUMENT_STORIES),
    }
    return MockLLMRuntime(responses)


@pytest.fixture
def txt_document(tmp_path):
    path = tmp_path / "stories.txt"
    path.write_text(TWO_STORY_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def docx_document(tmp_path):
    path = tmp_path / "stories.docx"
    doc = Document()
    doc.add_heading("Login requirements", level=1)
    doc.add_paragraph("As a registered user, I want to log in so that I can see my dashboard.")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Field"
    table.cell(0, 1).text = "Rule"
    table.cell(1, 0).text = "Password"
    table.cell(1, 1).text = "At least 8 characters"
    doc.save(str(path))
    return path


@pytest.fixture
def pdf_document(tmp_path):
    path = tmp_path / "stories.pdf"
    doc = fitz.open()
    for line in (
        "As a registered user, I want to log in.",
        "As an analyst, I want to export reports.",
    ):
        page = doc.new_page()
        page.insert_text((72, 72), line)
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def story_test_cases():
    """Decoded JSON the mock model returns for a user story."""
    return json.loads(json.dumps(STORY_TEST_CASES))


@pytest.fixture
def document_stories():
    """Decoded JSON the mock model returns for the two-story document."""
    return json.loads(json.dumps(DOCUMENT_STORIES))

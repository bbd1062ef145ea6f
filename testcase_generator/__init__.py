"""
QA Test Case Generator

Turns user stories and requirement documents (.pdf, .docx, .txt) into
structured QA test cases using a hosted LLM (Google Gemini by default).
"""

__version__ = "0.1.0"
__all__ = [
    "TestCaseWorkflow",
    "generate_test_cases",
    "extract_user_stories",
    "TestCase",
    "StoryWithTestCases",
]

from .models import TestCase, StoryWithTestCases
from .workflow import TestCaseWorkflow, generate_test_cases, extract_user_stories

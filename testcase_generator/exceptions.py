"""Custom exceptions for the test case generator."""

from typing import Any, Iterable, List, Optional


class TestCaseGeneratorError(Exception):
    """Base exception for test case generator errors."""
    pass


class UnsupportedFormatError(TestCaseGeneratorError):
    """
    Raised when a document's extension has no extractor.

    Attributes:
        extension: The rejected extension (e.g. '.xyz')
        supported: Extensions that would have been accepted
    """

    def __init__(self, extension: str, supported: Iterable[str] = ()):
        self.extension = extension
        self.supported = sorted(supported)
        allowed = ", ".join(self.supported) if self.supported else "none"
        super().__init__(
            f"Unsupported file format '{extension or '<none>'}'. Allowed: {allowed}"
        )


class EmptyDocumentError(TestCaseGeneratorError):
    """Raised when a supported document yields no text."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No text could be extracted from {path}")


class DocumentExtractionError(TestCaseGeneratorError):
    """Raised when a supported document cannot be read or decoded."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not extract text from {path}: {cause}")


class InvalidInputError(TestCaseGeneratorError, ValueError):
    """Raised when a request input is rejected before any provider call."""
    pass


class AIProviderError(TestCaseGeneratorError):
    """Raised when the LLM provider cannot be reached or rejects the request."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class EmptyAIResponseError(TestCaseGeneratorError):
    """Raised when the provider returns no candidate or no text part."""
    pass


class EmptyAIContentError(TestCaseGeneratorError):
    """Raised when the AI response is blank once code fences are removed."""
    pass


class MalformedAIResponseError(TestCaseGeneratorError):
    """Raised when the cleaned AI response is not valid JSON."""

    def __init__(self, raw_response: str, details: str):
        self.raw_response = raw_response
        self.details = details
        super().__init__(f"AI response is not valid JSON: {details}")


class SchemaValidationError(TestCaseGeneratorError):
    """
    Raised when well-formed JSON does not match the expected shape.

    Attributes:
        errors: One human-readable entry per failing field
        payload: The decoded JSON value that failed validation
    """

    def __init__(self, errors: List[str], payload: Any = None):
        self.errors = errors
        self.payload = payload
        super().__init__(f"AI response failed schema validation: {'; '.join(errors)}")


class ConfigurationError(TestCaseGeneratorError):
    """Raised when configuration is invalid or missing."""
    pass

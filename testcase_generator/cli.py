"""
Command Line Interface for the test case generator

Two subcommands mirror the two pipelines:
- story: generate test cases from a user story
- extract: generate per-story test cases from a .pdf, .docx or .txt document

Prints JSON to stdout on success; on failure prints a machine-readable error
report to stderr and exits non-zero.
"""

from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional
import logging

from pydantic import BaseModel, ValidationError

from .config import load_settings, init_default_config
from .extraction import SUPPORTED_EXTENSIONS
from .runtime import create_runtime
from .workflow import TestCaseWorkflow
from .exceptions import (
    AIProviderError,
    ConfigurationError,
    DocumentExtractionError,
    EmptyAIContentError,
    EmptyAIResponseError,
    EmptyDocumentError,
    InvalidInputError,
    MalformedAIResponseError,
    SchemaValidationError,
    TestCaseGeneratorError,
    UnsupportedFormatError,
)

EXIT_INPUT_ERROR = 2
EXIT_PROVIDER_ERROR = 3
EXIT_RESPONSE_ERROR = 4


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr
    )

    # Reduce noise from some libraries
    logging.getLogger('google_genai').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('openai').setLevel(logging.WARNING)


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""

    parser = argparse.ArgumentParser(
        prog="testcase-generator",
        description="Generate QA test cases from user stories or requirement documents using an LLM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Test cases for one user story
  testcase-generator story "As a user, I want to reset my password so I can regain access."

  # Test cases for every user story in a document
  testcase-generator extract requirements.docx --output test_cases.json

  # Using an OpenAI-compatible server
  testcase-generator --provider openai --base-url http://localhost:8080/v1 \\
    extract stories.txt
        """
    )

    # LLM Runtime options
    runtime_group = parser.add_argument_group('LLM runtime options')
    runtime_group.add_argument(
        '--provider',
        choices=['gemini', 'openai', 'mock'],
        help='LLM provider (default: gemini, or TESTCASE_GEN_PROVIDER)'
    )
    runtime_group.add_argument('--model', help='Model identifier')
    runtime_group.add_argument(
        '--api-key',
        help='API key (default: GEMINI_API_KEY / OPENAI_API_KEY from the environment)'
    )
    runtime_group.add_argument('--base-url', help='Base URL for the openai provider')
    runtime_group.add_argument(
        '--timeout',
        type=float,
        help='Upper bound in seconds on one provider round trip (default: 60)'
    )
    runtime_group.add_argument(
        '--env-file',
        type=Path,
        help='.env file to load before reading the environment'
    )

    # Output options
    output_group = parser.add_argument_group('output options')
    output_group.add_argument(
        '--raw',
        action='store_true',
        help='Return the parsed JSON without schema validation'
    )
    output_group.add_argument('--output', '-o', type=Path, help='Write JSON to this file instead of stdout')
    output_group.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    story = subparsers.add_parser('story', help='Generate test cases from a user story')
    story_source = story.add_mutually_exclusive_group(required=True)
    story_source.add_argument('text', nargs='?', help='User story text')
    story_source.add_argument('--story-file', type=Path, help='Read the user story from a file')

    extract = subparsers.add_parser('extract', help='Generate test cases for each user story in a document')
    extract.add_argument('file', type=Path, help=f"Document ({', '.join(sorted(SUPPORTED_EXTENSIONS))})")
    extract.add_argument(
        '--original-filename',
        help='Client-side filename, when the stored file has lost its extension'
    )

    subparsers.add_parser('init-config', help='Write a default user config file')

    return parser


def validate_inputs(args: argparse.Namespace) -> None:
    """Validate command line inputs."""

    if args.command == 'story' and args.story_file and not args.story_file.exists():
        raise FileNotFoundError(f"User story file not found: {args.story_file}")

    if args.command == 'extract' and not args.file.exists():
        raise FileNotFoundError(f"Document not found: {args.file}")


def to_jsonable(results: Any) -> Any:
    """Dump models by alias so output matches the wire shapes."""
    if not isinstance(results, list):
        return results
    return [r.model_dump(by_alias=True) if isinstance(r, BaseModel) else r for r in results]


def print_error_summary(error: Exception) -> None:
    """Print machine-readable error summary to stderr."""

    error_report = {
        "error_type": type(error).__name__,
        "message": str(error),
    }

    if isinstance(error, UnsupportedFormatError):
        error_report["extension"] = error.extension
        error_report["supported"] = error.supported
    elif isinstance(error, MalformedAIResponseError):
        error_report["details"] = error.details
        error_report["raw_response"] = error.raw_response
    elif isinstance(error, SchemaValidationError):
        error_report["details"] = error.errors

    print(json.dumps(error_report, indent=2), file=sys.stderr)


def exit_code_for(error: Exception) -> int:
    if isinstance(error, (UnsupportedFormatError, EmptyDocumentError, DocumentExtractionError,
                          InvalidInputError, ConfigurationError, ValidationError, ValueError, FileNotFoundError)):
        return EXIT_INPUT_ERROR
    if isinstance(error, AIProviderError):
        return EXIT_PROVIDER_ERROR
    if isinstance(error, (EmptyAIResponseError, EmptyAIContentError,
                          MalformedAIResponseError, SchemaValidationError)):
        return EXIT_RESPONSE_ERROR
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""

    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.command == 'init-config':
        print(init_default_config())
        return 0

    try:
        validate_inputs(args)

        settings = load_settings(
            env_file=args.env_file,
            provider=args.provider,
            model=args.model,
            api_key=args.api_key,
            base_url=args.base_url,
            request_timeout=args.timeout,
        )
        runtime = create_runtime(settings)
        workflow = TestCaseWorkflow(runtime, settings, validate_schema=not args.raw)

        if args.command == 'story':
            text = args.story_file.read_text(encoding='utf-8') if args.story_file else args.text
            results = workflow.generate_test_cases(text)
        else:
            results = workflow.extract_user_stories(args.file, args.original_filename)

        output = json.dumps(to_jsonable(results), indent=2, ensure_ascii=False)
        if args.output:
            args.output.write_text(output + "\n", encoding='utf-8')
            logger.info(f"Wrote results to {args.output}")
        else:
            print(output)

        return 0

    except (TestCaseGeneratorError, ValueError, FileNotFoundError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        print_error_summary(e)
        return exit_code_for(e)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130  # Standard Unix exit code for SIGINT

    except Exception as e:
        logger.exception("Unexpected error occurred")
        print_error_summary(e)
        return 1


if __name__ == '__main__':
    sys.exit(main())

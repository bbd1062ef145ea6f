"""
Document text extraction.

Turns an uploaded file into a single plain-text blob, dispatching on the file
extension:

  - PDF: PyMuPDF (fitz), page text in page order
  - DOCX: python-docx, paragraph text followed by table cell text
  - TXT: UTF-8 decode

Layout, headings and images are not preserved.
"""

from __future__ import annotations
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union
import logging

import fitz
from docx import Document

from .exceptions import DocumentExtractionError, EmptyDocumentError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def extract_pdf_text(path: PathLike) -> str:
    pages: List[str] = []
    with fitz.open(path) as doc:
        for page in doc:
            text = page.get_text("text")
            if text and text.strip():
                pages.append(text.strip())
    logger.debug(f"PDF {path}: {len(pages)} pages with text")
    return "\n\n".join(pages)


def extract_docx_text(path: PathLike) -> str:
    doc = Document(str(path))
    blocks = [para.text for para in doc.paragraphs if para.text.strip()]

    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                blocks.append(" | ".join(cells))

    logger.debug(f"DOCX {path}: {len(doc.paragraphs)} paragraphs, {len(doc.tables)} tables")
    return "\n".join(blocks)


def extract_plain_text(path: PathLike) -> str:
    return Path(path).read_text(encoding="utf-8")


EXTENSION_MAP: Dict[str, Callable[[PathLike], str]] = {
    ".pdf": extract_pdf_text,
    ".docx": extract_docx_text,
    ".txt": extract_plain_text,
}

SUPPORTED_EXTENSIONS = frozenset(EXTENSION_MAP)


def resolve_extension(path: PathLike, original_filename: Optional[str] = None) -> str:
    """Lower-case extension (with dot) of the original filename, or of the stored path."""
    return Path(original_filename or str(path)).suffix.lower()


def ensure_supported(extension: str) -> str:
    """Return the normalised extension, or raise UnsupportedFormatError."""
    ext = extension.lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    if ext not in EXTENSION_MAP:
        raise UnsupportedFormatError(extension, SUPPORTED_EXTENSIONS)
    return ext


def extract(path: PathLike, extension: Optional[str] = None) -> str:
    """
    Extract the full text of a document.

    Args:
        path: Location of the file. It is read, never modified or removed.
        extension: Extension to dispatch on; defaults to the suffix of ``path``.

    Returns:
        The document text as one string

    Raises:
        UnsupportedFormatError: If the extension is not .pdf, .docx or .txt
        EmptyDocumentError: If the document contains no text
        DocumentExtractionError: If the file is corrupt, unreadable or not UTF-8 text
    """
    ext = ensure_supported(extension if extension is not None else resolve_extension(path))

    logger.info(f"Extracting text from {path} ({ext})")
    try:
        text = EXTENSION_MAP[ext](path)
    except Exception as e:
        raise DocumentExtractionError(str(path), e) from e

    if not text.strip():
        raise EmptyDocumentError(str(path))

    logger.info(f"Extracted {len(text)} characters from {path}")
    return text

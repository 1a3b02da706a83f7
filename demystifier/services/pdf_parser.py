"""Upload text extraction.

Pure functions on bytes: PDFs go through pdfplumber, plain text is decoded
as UTF-8. No disk I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

import pdfplumber

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
TEXT_CONTENT_TYPE = "text/plain"
SUPPORTED_CONTENT_TYPES = (TEXT_CONTENT_TYPE, PDF_CONTENT_TYPE)


class PDFError(Exception):
    """Base class for PDF-related errors."""

    pass


class PDFValidationError(PDFError):
    """Pre-parse validation failures: not a PDF, too large, too many pages, scanned."""

    pass


class PDFParseError(PDFError):
    """Corrupted or unparseable PDF content."""

    pass


class UnsupportedUploadError(ValueError):
    """The upload is neither plain text nor PDF, or cannot be decoded."""

    pass


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Text of a PDF upload.

    ``blank_pages`` lists the 1-based numbers of pages that yielded no text;
    they are left out of ``text``.
    """

    text: str
    page_count: int
    blank_pages: tuple[int, ...] = ()


def _check_pdf_bytes(data: bytes, max_size_mb: int) -> None:
    if not data.startswith(b"%PDF"):
        raise PDFValidationError("unsupported content: missing PDF header")

    max_size_bytes = max_size_mb * 1024 * 1024
    if len(data) > max_size_bytes:
        raise PDFValidationError(
            f"file too large: {len(data) / 1024 / 1024:.1f}MB > {max_size_mb}MB"
        )


def extract_text_and_pages(
    data: bytes,
    *,
    max_size_mb: int = 25,
    max_pages: int = 100,
) -> ParseResult:
    """Extract the text of a PDF, page by page.

    Pages with text are joined with a blank line. A contract whose pages all
    come back empty is most likely a scan, which the analyzers cannot read.

    Raises:
        PDFValidationError: Not a PDF, too large, too many pages, or scanned.
        PDFParseError: Corrupted, encrypted or unparseable PDF.
    """
    _check_pdf_bytes(data, max_size_mb)

    try:
        with pdfplumber.open(BytesIO(data)) as pdf:
            page_count = len(pdf.pages)
            if page_count > max_pages:
                raise PDFValidationError(f"too many pages: {page_count} > {max_pages}")

            texts: list[str] = []
            blank: list[int] = []
            for number, page in enumerate(pdf.pages, start=1):
                text = (page.extract_text() or "").strip()
                if text:
                    texts.append(text)
                else:
                    blank.append(number)
    except PDFValidationError:
        raise
    except Exception as e:
        logger.warning("PDF parse failed: %s", e, exc_info=True)
        raise PDFParseError(f"failed to parse PDF: {type(e).__name__}") from e

    if not texts:
        raise PDFValidationError(
            "no text content: PDF may be scanned/image-only (OCR not supported)"
        )
    return ParseResult(text="\n\n".join(texts), page_count=page_count, blank_pages=tuple(blank))


def extract_upload_text(
    file_name: str,
    content_type: Optional[str],
    data: bytes,
    *,
    max_pages: int = 100,
    max_size_mb: int = 25,
) -> str:
    """Return the text of an uploaded ``.txt`` or ``.pdf`` file.

    Raises:
        UnsupportedUploadError: Any other content type, or undecodable text.
        PDFError: The PDF could not be read.
    """
    if content_type == TEXT_CONTENT_TYPE:
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise UnsupportedUploadError(f"{file_name} is not valid UTF-8 text") from e

    if content_type == PDF_CONTENT_TYPE:
        result = extract_text_and_pages(data, max_size_mb=max_size_mb, max_pages=max_pages)
        logger.info("Extracted %d pages (%d chars) from %s", result.page_count, len(result.text), file_name)
        if result.blank_pages:
            # Obligations on these pages will be missing from the analysis
            logger.warning(
                "%s: no text on page(s) %s",
                file_name,
                ", ".join(str(number) for number in result.blank_pages),
            )
        return result.text

    raise UnsupportedUploadError(
        f"File type for {file_name} is not supported. Please use .txt or .pdf."
    )


__all__ = [
    "PDFError",
    "PDFValidationError",
    "PDFParseError",
    "ParseResult",
    "SUPPORTED_CONTENT_TYPES",
    "UnsupportedUploadError",
    "extract_text_and_pages",
    "extract_upload_text",
]

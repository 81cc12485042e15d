"""Text extraction from uploaded resumes."""

import io
from typing import Optional

import structlog
from pypdf import PdfReader

from pipeline.errors import CollaboratorFailure

logger = structlog.get_logger()


def extract_text_from_file(
    content: bytes,
    filename: str,
    content_type: Optional[str] = None,
) -> str:
    """Extract text content from a file.

    Args:
        content: File content as bytes
        filename: Original filename (for extension detection)
        content_type: MIME type (optional)

    Returns:
        Extracted text content

    Raises:
        ExtractionError: If the document cannot be parsed
    """
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""

    if content_type == "text/plain" or ext == "txt":
        return content.decode("utf-8", errors="ignore")
    if content_type not in (None, "application/pdf") and ext != "pdf":
        logger.warning(
            "Unknown file type, attempting PDF extraction",
            filename=filename,
            content_type=content_type,
        )
    return _extract_from_pdf(content)


def _extract_from_pdf(content: bytes) -> str:
    """Extract text from a PDF file."""
    try:
        reader = PdfReader(io.BytesIO(content))
        text_parts = []

        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)

        text = "\n\n".join(text_parts)

        logger.info(
            "PDF text extracted",
            pages=len(reader.pages),
            chars=len(text),
        )

        return text

    except Exception as e:
        logger.error("PDF extraction failed", error=str(e))
        raise ExtractionError(f"PDF extraction failed: {str(e)}") from e


class PdfTextExtractor:
    """Best-effort text extractor: any failure yields empty text."""

    def extract_text(self, content: bytes, filename: str, content_type: Optional[str] = None) -> str:
        try:
            return extract_text_from_file(content, filename, content_type)
        except ExtractionError:
            return ""


class ExtractionError(CollaboratorFailure):
    """Raised when text extraction fails."""

    def __init__(self, message: str):
        super().__init__(message, retryable=False, collaborator="extractor")

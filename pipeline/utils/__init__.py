"""Utility modules for the pipeline."""

from .pdf_extractor import PdfTextExtractor, extract_text_from_file, ExtractionError

__all__ = ["PdfTextExtractor", "extract_text_from_file", "ExtractionError"]

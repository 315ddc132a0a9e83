"""PDF text extraction adapters."""

from src.providers.pdf.pymupdf_provider import PyMuPDFTextProvider

__all__ = ["PyMuPDFTextProvider"]

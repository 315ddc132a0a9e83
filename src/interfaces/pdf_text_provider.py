"""Abstract base class for PDF text extraction.

Used as the second strategy when a PDF cannot be read by the AI model
directly: the embedded text layer is pulled out and sent as plain text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: PyMuPDFTextProvider (src/providers/pdf/)
class IPdfTextProvider(ABC):
    """Contract for turning PDF bytes into plain text."""

    @abstractmethod
    async def extract_text(self, pdf_bytes: bytes) -> str:
        """Return the concatenated text of every page.

        Returns an empty string for scanned PDFs with no text layer.

        Raises
        ------
        src.utils.errors.UnreadableDocumentError
            If the bytes cannot be opened as a PDF at all.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"pymupdf"``."""

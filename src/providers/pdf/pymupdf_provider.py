"""PDF text extraction using PyMuPDF (fitz).

Parsing runs in a worker thread so a large notice does not stall the
event loop while other Discord events are waiting.
"""

from __future__ import annotations

import asyncio

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from src.interfaces.pdf_text_provider import IPdfTextProvider
from src.utils.errors import UnreadableDocumentError

logger = structlog.get_logger(logger_name=__name__)


class PyMuPDFTextProvider(IPdfTextProvider):
    """Reads the text layer of in-memory PDFs page by page."""

    async def extract_text(self, pdf_bytes: bytes) -> str:
        return await asyncio.to_thread(self._extract_sync, pdf_bytes)

    def get_provider_name(self) -> str:
        return "pymupdf"

    def _extract_sync(self, pdf_bytes: bytes) -> str:
        try:
            doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        except Exception as exc:
            raise UnreadableDocumentError(
                message=f"Cannot open PDF: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        try:
            pages = [page.get_text("text") for page in doc]
        finally:
            doc.close()

        text = "\n".join(page.strip() for page in pages if page.strip())
        logger.debug("pdf_text_extracted", pages=len(pages), chars=len(text))
        return text

"""Text extraction from staged PDF uploads using pdfplumber."""

import asyncio
import io
import logging
from typing import List

import pdfplumber

from core.exceptions import ExtractionError
from .object_stage import ObjectStage

logger = logging.getLogger(__name__)

PAGE_BOUNDARY = "\n\f\n"


def pdf_bytes_to_text(raw_bytes: bytes) -> str:
    """Extract text page by page and join it in page order."""
    pages: List[str] = []
    with pdfplumber.open(io.BytesIO(raw_bytes)) as pdf:
        for page in pdf.pages:
            pages.append(page.extract_text() or "")
    return PAGE_BOUNDARY.join(pages)


class PdfTextExtractor:
    """Reads a staged upload and returns its plain text."""

    def __init__(self, stage: ObjectStage):
        self.stage = stage

    async def extract(self, staged_key: str) -> str:
        """Extract the text of the PDF staged at ``staged_key``.

        Raises:
            ExtractionError: If the entry is absent, the bytes are not a
                readable PDF, or the document carries no text
            StageUnavailableError: If the stage cannot be reached
        """
        raw_bytes = await self.stage.get(staged_key)
        if raw_bytes is None:
            logger.warning(f"No staged file found at {staged_key}")
            raise ExtractionError("No file found for extraction")

        try:
            text = await asyncio.to_thread(pdf_bytes_to_text, raw_bytes)
        except Exception as e:
            # pdfminer raises a wide range of types for malformed input
            logger.warning(f"PDF parsing failed for {staged_key}: {type(e).__name__}: {e}")
            raise ExtractionError("Failed to extract text from PDF provided") from e

        if not text.strip():
            logger.warning(f"PDF at {staged_key} contains no extractable text")
            raise ExtractionError("No text could be extracted from the PDF")

        logger.info(f"Extracted {len(text)} characters from {staged_key}")
        return text

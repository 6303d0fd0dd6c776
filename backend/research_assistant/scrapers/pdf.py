"""Full-text extraction from arXiv PDFs."""
import io
import logging
import re
from typing import Optional

import httpx
from pypdf import PdfReader

from ..config import Settings, settings as default_settings
from ..models import ArxivId

logger = logging.getLogger(__name__)

USER_AGENT = "ResearchPaperAssistant/1.0"
MAX_PDF_BYTES = 50 * 1024 * 1024
EXTRACTION_ERROR_PREFIX = "Unable to extract PDF content."


def sanitize_text(text: str) -> str:
    """Drop NUL and other control characters, keeping tabs and newlines."""
    if not text:
        return text
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)


def extract_pdf_text(pdf_bytes: bytes) -> str:
    reader = PdfReader(io.BytesIO(pdf_bytes))
    raw_text = "\n".join(page.extract_text() or "" for page in reader.pages)
    return sanitize_text(raw_text)


class PdfTextScraper:
    """Downloads a paper's PDF from arXiv and extracts its text."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.Client] = None):
        self.settings = settings or default_settings
        self.client = client or httpx.Client(
            timeout=self.settings.request_timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    def pdf_url(self, arxiv_id: ArxivId) -> str:
        return f"{self.settings.arxiv_pdf_base_url}{arxiv_id}.pdf"

    def extract(self, arxiv_id: ArxivId) -> str:
        """
        Extract the paper text.

        Download and parse errors are reported in the returned string rather
        than raised, so the caller can carry on with degraded content.
        """
        url = self.pdf_url(arxiv_id)
        logger.info(f"Extracting text from PDF {url}")

        try:
            response = self.client.get(url)
            response.raise_for_status()
            if len(response.content) > MAX_PDF_BYTES:
                raise ValueError(f"PDF larger than {MAX_PDF_BYTES} bytes")
            text = extract_pdf_text(response.content)
        except Exception as e:
            logger.error(f"Error extracting PDF text for {arxiv_id}: {e}")
            return f"{EXTRACTION_ERROR_PREFIX} Error: {e}"

        logger.info(f"Extracted {len(text)} characters from PDF")
        return text

    def close(self):
        self.client.close()

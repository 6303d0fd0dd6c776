"""Paper metadata and full-text sources."""
from .arxiv import ArxivScraper
from .base import MetadataSource, TextSource
from .mock import MockArxivScraper
from .pdf import PdfTextScraper

__all__ = ["ArxivScraper", "MetadataSource", "MockArxivScraper", "PdfTextScraper", "TextSource"]

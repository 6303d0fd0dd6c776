"""Interfaces for the sources the analysis pipeline reads from."""
from typing import Optional, Protocol

from ..models import ArxivId, Paper


class MetadataSource(Protocol):
    def fetch(self, arxiv_id: ArxivId) -> Optional[Paper]:
        """Resolve metadata; None when the paper is unknown or unreachable."""
        ...


class TextSource(Protocol):
    def extract(self, arxiv_id: ArxivId) -> str:
        """Full document text, or a diagnostic string if extraction failed."""
        ...

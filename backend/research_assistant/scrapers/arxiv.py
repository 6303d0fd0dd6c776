"""arXiv metadata lookup for single papers."""
import logging
from typing import Optional

import arxiv

from ..models import ArxivId, Paper

logger = logging.getLogger(__name__)


def _clean(text: str) -> str:
    """Collapse the line breaks arXiv leaves in titles and abstracts."""
    return " ".join((text or "").split())


class ArxivScraper:
    """Fetches paper metadata from the arXiv API."""

    def __init__(self, client: Optional[arxiv.Client] = None):
        self.client = client or arxiv.Client(num_retries=2)

    def _result_to_paper(self, arxiv_id: ArxivId, result: arxiv.Result) -> Paper:
        """Convert arXiv result to Paper model."""
        return Paper(
            arxiv_id=arxiv_id,
            title=_clean(result.title),
            authors=", ".join(str(a) for a in result.authors),
            abstract=_clean(result.summary),
            published=result.published,
        )

    def fetch(self, arxiv_id: ArxivId) -> Optional[Paper]:
        """
        Look up a single paper by identifier.

        Args:
            arxiv_id: Validated arXiv identifier

        Returns:
            Paper, or None if arXiv has no such entry or the request failed
        """
        logger.info(f"Fetching metadata from arXiv for {arxiv_id}")
        search = arxiv.Search(id_list=[str(arxiv_id)], max_results=1)

        try:
            result = next(self.client.results(search), None)
        except Exception as e:
            logger.error(f"Error fetching {arxiv_id} from arXiv API: {e}")
            return None

        if result is None:
            logger.warning(f"No arXiv entry found for {arxiv_id}")
            return None

        paper = self._result_to_paper(arxiv_id, result)
        logger.info(f"Fetched paper: {paper.title}")
        return paper

"""In-memory storage for papers and their analyses."""
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from .models import Paper, PaperAnalysis
from .models.analysis import FRESHNESS_WINDOW

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPaperStore:
    """
    Latest paper metadata and analysis per arXiv identifier.

    Analyses older than the freshness window are treated as missing and
    removed when they are next looked up. Contents are lost on restart.
    """

    def __init__(
        self,
        freshness_window: timedelta = FRESHNESS_WINDOW,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.freshness_window = freshness_window
        self.clock = clock
        self._papers: Dict[str, Paper] = {}
        self._analyses: Dict[str, PaperAnalysis] = {}
        self._lock = threading.Lock()

    def save_paper(self, paper: Paper) -> Paper:
        logger.debug(f"Saving paper {paper.arxiv_id}")
        with self._lock:
            self._papers[str(paper.arxiv_id)] = paper
        return paper

    def get_paper(self, arxiv_id) -> Optional[Paper]:
        with self._lock:
            return self._papers.get(str(arxiv_id))

    def save_analysis(self, analysis: PaperAnalysis) -> PaperAnalysis:
        logger.debug(f"Saving analysis for {analysis.arxiv_id}")
        with self._lock:
            self._analyses[str(analysis.arxiv_id)] = analysis
        return analysis

    def get_analysis(self, arxiv_id) -> Optional[PaperAnalysis]:
        """Return the analysis if it is still fresh, evicting it otherwise."""
        key = str(arxiv_id)
        now = self.clock()
        with self._lock:
            analysis = self._analyses.get(key)
            if analysis is None:
                return None
            if analysis.is_fresh(now, self.freshness_window):
                return analysis
            del self._analyses[key]

        logger.info(f"Removed stale analysis for {key} (analyzed {analysis.analyzed_at.isoformat()})")
        return None

    def has_analysis_entry(self, arxiv_id) -> bool:
        """Whether any analysis, fresh or stale, is currently held."""
        with self._lock:
            return str(arxiv_id) in self._analyses

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"papers": len(self._papers), "analyses": len(self._analyses)}

    def clear(self):
        with self._lock:
            self._papers.clear()
            self._analyses.clear()
        logger.info("Cleared all papers and analyses from memory")

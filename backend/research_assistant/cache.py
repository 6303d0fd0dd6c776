"""Bounded TTL caches for extracted paper text and generated summaries."""
import logging
import threading
import time
from datetime import timedelta
from typing import Callable, Hashable, TypeVar

from cachetools import TTLCache

from .analysis import SummaryEngine
from .analysis.summarizer import SUMMARY_FALLBACK
from .models import ArxivId, DifficultyLevel
from .scrapers import TextSource
from .scrapers.pdf import EXTRACTION_ERROR_PREFIX

logger = logging.getLogger(__name__)

CACHE_TTL = timedelta(days=30)
CACHE_MAX_ENTRIES = 100

T = TypeVar("T")


class TTLMemo:
    """A ``TTLCache`` shared between threads; values are computed outside the lock."""

    def __init__(
        self,
        name: str,
        maxsize: int = CACHE_MAX_ENTRIES,
        ttl: timedelta = CACHE_TTL,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl.total_seconds(), timer=timer)
        self._lock = threading.Lock()

    def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], T],
        keep: Callable[[T], bool] = lambda value: True,
    ) -> T:
        with self._lock:
            try:
                return self._cache[key]
            except KeyError:
                pass

        value = compute()
        if keep(value):
            with self._lock:
                self._cache[key] = value
        else:
            logger.debug(f"Not caching {self.name} entry for {key!r}")
        return value

    def __len__(self):
        with self._lock:
            return len(self._cache)

    def clear(self):
        with self._lock:
            self._cache.clear()


class CachedTextSource:
    """
    Keeps extracted text per arXiv identifier.

    Diagnostic strings from a failed extraction are returned but not cached,
    so the next request tries the download again.
    """

    def __init__(self, source: TextSource, maxsize: int = CACHE_MAX_ENTRIES, ttl: timedelta = CACHE_TTL):
        self.source = source
        self.memo = TTLMemo("pdfText", maxsize, ttl)

    def extract(self, arxiv_id: ArxivId) -> str:
        return self.memo.get_or_compute(
            str(arxiv_id),
            lambda: self.source.extract(arxiv_id),
            keep=lambda text: not text.startswith(EXTRACTION_ERROR_PREFIX),
        )


class CachedSummaryEngine:
    """Caches abstract and full-text summaries by input text; other calls pass through."""

    def __init__(self, engine: SummaryEngine, maxsize: int = CACHE_MAX_ENTRIES, ttl: timedelta = CACHE_TTL):
        self.engine = engine
        self.summaries = TTLMemo("summaries", maxsize, ttl)
        self.full_summaries = TTLMemo("fullSummaries", maxsize, ttl)

    @staticmethod
    def _is_real_summary(summary: str) -> bool:
        return summary != SUMMARY_FALLBACK

    def summarize_abstract(self, abstract: str) -> str:
        return self.summaries.get_or_compute(
            abstract,
            lambda: self.engine.summarize_abstract(abstract),
            keep=self._is_real_summary,
        )

    def summarize_paper(self, full_text: str) -> str:
        return self.full_summaries.get_or_compute(
            full_text,
            lambda: self.engine.summarize_paper(full_text),
            keep=self._is_real_summary,
        )

    def estimate_difficulty(self, text: str) -> DifficultyLevel:
        return self.engine.estimate_difficulty(text)

    def estimate_reading_time(self, text: str) -> int:
        return self.engine.estimate_reading_time(text)

    def answer_question(self, paper_text: str, question: str) -> str:
        return self.engine.answer_question(paper_text, question)

"""Entry point to the analysis core for the API layer and the CLI."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from .analysis import LLMSummaryEngine, MockSummaryEngine, SummaryEngine
from .cache import CachedSummaryEngine, CachedTextSource
from .config import Settings, settings as default_settings
from .errors import PaperNotFoundError
from .jobs import JobRegistry
from .llm import LLMClient
from .models import ArxivId, JobStage, Paper, PaperAnalysis
from .pipeline import AnalysisPipeline, JobEventManager
from .scrapers import ArxivScraper, MetadataSource, MockArxivScraper, PdfTextScraper, TextSource
from .store import InMemoryPaperStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobStatusView:
    """What a poller sees for a job token."""

    job_id: str
    stage: JobStage
    arxiv_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def description(self) -> str:
        return self.stage.description

    @property
    def progress_percentage(self) -> int:
        return self.stage.progress


class PaperAssistant:
    """
    Owns the store, job registry, collaborators and pipeline.

    Any collaborator can be injected; the rest are built from settings
    (mock sources when ``use_mock_arxiv`` / ``use_mock_ai`` are set).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        metadata_source: Optional[MetadataSource] = None,
        text_source: Optional[TextSource] = None,
        engine: Optional[SummaryEngine] = None,
        store: Optional[InMemoryPaperStore] = None,
    ):
        self.settings = settings or default_settings
        self._owned = []

        mock_arxiv = MockArxivScraper() if self.settings.use_mock_arxiv else None
        if metadata_source is None:
            metadata_source = mock_arxiv or ArxivScraper()
        if text_source is None and mock_arxiv is not None:
            text_source = mock_arxiv
        elif text_source is None:
            text_source = PdfTextScraper(self.settings)
            self._owned.append(text_source)
        if engine is None:
            engine = self._build_engine()

        cache_ttl = timedelta(days=self.settings.cache_ttl_days)
        self.metadata_source = metadata_source
        self.text_source = CachedTextSource(text_source, self.settings.cache_max_entries, cache_ttl)
        self.engine = CachedSummaryEngine(engine, self.settings.cache_max_entries, cache_ttl)
        self.events = JobEventManager()
        self.store = store or InMemoryPaperStore(freshness_window=timedelta(days=self.settings.analysis_ttl_days))
        self.jobs = JobRegistry(listener=self.events.publish_job)
        self.pipeline = AnalysisPipeline(
            store=self.store,
            registry=self.jobs,
            metadata_source=self.metadata_source,
            text_source=self.text_source,
            engine=self.engine,
            max_workers=self.settings.max_workers,
        )

    def _build_engine(self) -> SummaryEngine:
        if self.settings.use_mock_ai:
            return MockSummaryEngine(self.settings.mock_min_delay_ms, self.settings.mock_max_delay_ms)
        llm = LLMClient(self.settings)
        self._owned.append(llm)
        return LLMSummaryEngine(llm)

    # ============================================================================
    # Jobs
    # ============================================================================

    def submit(self, raw_id) -> str:
        return self.pipeline.submit(raw_id)

    def job_status(self, token: str) -> JobStatusView:
        """Status for a token; unknown tokens read as FAILED."""
        job = self.jobs.get(token)
        if job is None:
            return JobStatusView(job_id=token, stage=JobStage.FAILED)
        return JobStatusView(job_id=token, stage=job.stage, arxiv_id=str(job.arxiv_id), error=job.error)

    # ============================================================================
    # Results
    # ============================================================================

    def get_analysis(self, raw_id) -> Optional[PaperAnalysis]:
        return self.pipeline.get_analysis(ArxivId.parse(raw_id))

    def get_paper(self, raw_id) -> Optional[Paper]:
        return self.store.get_paper(ArxivId.parse(raw_id))

    def get_result(self, raw_id) -> Optional[Tuple[Paper, PaperAnalysis]]:
        """Fresh analysis joined with its paper, or None."""
        arxiv_id = ArxivId.parse(raw_id)
        analysis = self.pipeline.get_analysis(arxiv_id)
        if analysis is None:
            return None
        paper = self.store.get_paper(arxiv_id)
        if paper is None:
            return None
        return paper, analysis

    def paper_cached(self, raw_id) -> bool:
        return self.get_paper(raw_id) is not None

    def analysis_exists(self, raw_id) -> bool:
        return self.get_analysis(raw_id) is not None

    # ============================================================================
    # Paper text and questions
    # ============================================================================

    def _resolve_paper(self, arxiv_id: ArxivId) -> Paper:
        paper = self.store.get_paper(arxiv_id)
        if paper is None:
            paper = self.metadata_source.fetch(arxiv_id)
            if paper is None:
                raise PaperNotFoundError(f"Paper not found on arXiv: {arxiv_id}")
            self.store.save_paper(paper)
        return paper

    def raw_text(self, raw_id) -> Tuple[Paper, str]:
        """Extracted full text, fetching and caching the paper if needed."""
        arxiv_id = ArxivId.parse(raw_id)
        paper = self._resolve_paper(arxiv_id)
        return paper, self.text_source.extract(arxiv_id)

    def ask_question(self, raw_id, question: str) -> str:
        """Answer a question about a paper that has already been fetched."""
        arxiv_id = ArxivId.parse(raw_id)
        if self.store.get_paper(arxiv_id) is None:
            raise PaperNotFoundError(f"Paper {arxiv_id} has not been analyzed yet")
        logger.info(f"Question for paper {arxiv_id}: {question}")
        paper_text = self.text_source.extract(arxiv_id)
        return self.engine.answer_question(paper_text, question)

    # ============================================================================
    # Maintenance
    # ============================================================================

    def purge_jobs(self, max_age: timedelta) -> int:
        return self.jobs.purge(datetime.now(timezone.utc) - max_age)

    def stats(self) -> Dict[str, object]:
        return {
            **self.store.stats(),
            "jobs": self.jobs.counts(),
            "in_flight": self.pipeline.in_flight,
        }

    def close(self, wait: bool = True):
        self.pipeline.shutdown(wait=wait)
        for resource in self._owned:
            resource.close()

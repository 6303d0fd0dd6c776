"""Background analysis pipeline and job event broadcasting."""
import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from .analysis import SummaryEngine, generate_citation
from .errors import CollaboratorError, PaperNotFoundError
from .jobs import JobRegistry
from .models import ArxivId, Job, JobStage, PaperAnalysis
from .scrapers import MetadataSource, TextSource
from .store import InMemoryPaperStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobEventManager:
    """Fans job updates out to SSE listeners."""

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._listeners: List[Tuple[asyncio.Queue, asyncio.AbstractEventLoop]] = []
        self._lock = threading.Lock()

    def add_listener(self) -> asyncio.Queue:
        """Add a new listener bound to the running event loop and return its queue."""
        queue = asyncio.Queue(maxsize=self.max_queue_size)
        loop = asyncio.get_running_loop()
        with self._lock:
            self._listeners.append((queue, loop))
        return queue

    def remove_listener(self, queue: asyncio.Queue):
        """Remove a listener."""
        with self._lock:
            self._listeners = [(q, loop) for q, loop in self._listeners if q is not queue]

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    @staticmethod
    def _offer(queue: asyncio.Queue, event: Dict[str, Any]):
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            pass  # Slow consumer, drop the event

    def broadcast(self, event: Dict[str, Any]):
        """Broadcast an event to all listeners; safe to call from any thread."""
        with self._lock:
            listeners = list(self._listeners)
        for queue, loop in listeners:
            try:
                loop.call_soon_threadsafe(self._offer, queue, event)
            except RuntimeError:
                # Listener's loop is closed
                self.remove_listener(queue)

    def publish_job(self, job: Job):
        self.broadcast({"type": "job_updated", **job.to_event()})


class AnalysisPipeline:
    """
    Runs paper analyses in the background.

    ``submit`` returns a job token straight away; the work itself runs on a
    shared thread pool and reports progress through the job registry.
    """

    def __init__(
        self,
        store: InMemoryPaperStore,
        registry: JobRegistry,
        metadata_source: MetadataSource,
        text_source: TextSource,
        engine: SummaryEngine,
        max_workers: int = 8,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.registry = registry
        self.metadata_source = metadata_source
        self.text_source = text_source
        self.engine = engine
        self.clock = clock
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="analysis")
        self._futures: Dict[str, Future] = {}
        self._futures_lock = threading.Lock()

    def submit(self, raw_id) -> str:
        """
        Accept a paper for analysis and return its job token.

        Raises InvalidPaperIdError before any job exists if the identifier is
        malformed. A fresh stored analysis completes the job immediately.
        """
        arxiv_id = ArxivId.parse(raw_id)

        if self.store.get_analysis(arxiv_id) is not None:
            job = self.registry.create(arxiv_id, stage=JobStage.COMPLETED)
            logger.info(f"Using cached analysis for {arxiv_id} (job {job.token})")
            return job.token

        job = self.registry.create(arxiv_id)
        logger.info(f"Submitted {arxiv_id} for analysis (job {job.token})")

        future = self._executor.submit(self.run, job.token, arxiv_id)
        with self._futures_lock:
            self._futures[job.token] = future
        future.add_done_callback(lambda _f, token=job.token: self._forget(token))
        return job.token

    def _forget(self, token: str):
        with self._futures_lock:
            self._futures.pop(token, None)

    def status(self, token: str) -> JobStage:
        """Current stage of a job; unknown tokens report FAILED."""
        job = self.registry.get(token)
        return job.stage if job else JobStage.FAILED

    def get_analysis(self, arxiv_id) -> Optional[PaperAnalysis]:
        return self.store.get_analysis(arxiv_id)

    def wait(self, token: str, timeout: Optional[float] = None) -> JobStage:
        """Block until a background job finishes (or the timeout passes)."""
        with self._futures_lock:
            future = self._futures.get(token)
        if future is not None:
            future.result(timeout=timeout)
        return self.status(token)

    @property
    def in_flight(self) -> int:
        with self._futures_lock:
            return len(self._futures)

    def run(self, token: str, arxiv_id: ArxivId) -> Optional[PaperAnalysis]:
        """Execute every stage for one job, recording failure on the job."""
        try:
            analysis = self._execute(token, arxiv_id)
        except PaperNotFoundError as e:
            logger.warning(f"Analysis failed for {arxiv_id}: {e}")
            self.registry.fail(token, str(e))
            return None
        except Exception as e:
            logger.exception(f"Analysis failed for {arxiv_id}: {e}")
            self.registry.fail(token, str(e) or e.__class__.__name__)
            return None

        self.registry.advance(token, JobStage.COMPLETED)
        logger.info(f"Analysis completed for {arxiv_id}")
        return analysis

    def _call(self, step: str, func, *args):
        try:
            return func(*args)
        except Exception as e:
            raise CollaboratorError(f"{step} failed: {e}") from e

    def _execute(self, token: str, arxiv_id: ArxivId) -> PaperAnalysis:
        self.registry.advance(token, JobStage.FETCHING_METADATA)
        paper = self._call("Metadata fetch", self.metadata_source.fetch, arxiv_id)
        if paper is None:
            raise PaperNotFoundError(f"Paper not found on arXiv: {arxiv_id}")
        self.store.save_paper(paper)

        self.registry.advance(token, JobStage.EXTRACTING_TEXT)
        full_text = self._call("Text extraction", self.text_source.extract, arxiv_id)

        self.registry.advance(token, JobStage.ANALYZING)

        self.registry.advance(token, JobStage.GENERATING_SUMMARY)
        abstract_summary = self._call("Abstract summary", self.engine.summarize_abstract, paper.abstract)
        full_summary = self._call("Full text summary", self.engine.summarize_paper, full_text)
        difficulty = self._call("Difficulty estimate", self.engine.estimate_difficulty, full_text)
        reading_time = self._call("Reading time estimate", self.engine.estimate_reading_time, full_text)

        self.registry.advance(token, JobStage.FORMATTING_CITATIONS)
        citation = generate_citation(paper)

        analysis = PaperAnalysis(
            arxiv_id=paper.arxiv_id,
            abstract_summary=abstract_summary,
            full_text_summary=full_summary,
            difficulty=difficulty,
            reading_time_minutes=reading_time,
            citation=citation,
            analyzed_at=self.clock(),
        )
        return self.store.save_analysis(analysis)

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

"""Tests for the background analysis pipeline."""
import asyncio
import threading
from datetime import datetime, timedelta, timezone

import pytest
from conftest import FakeEngine, FakeMetadataSource, FakeTextSource, make_paper

from research_assistant.analysis import generate_citation
from research_assistant.errors import InvalidPaperIdError
from research_assistant.jobs import JobRegistry
from research_assistant.models import ArxivId, DifficultyLevel, JobStage, PaperAnalysis
from research_assistant.pipeline import AnalysisPipeline, JobEventManager
from research_assistant.store import InMemoryPaperStore

_STAGE_ORDER = [
    JobStage.PENDING,
    JobStage.FETCHING_METADATA,
    JobStage.EXTRACTING_TEXT,
    JobStage.ANALYZING,
    JobStage.GENERATING_SUMMARY,
    JobStage.FORMATTING_CITATIONS,
    JobStage.COMPLETED,
]


class _Recorder:
    """Registry listener collecting the stages seen per job."""

    def __init__(self):
        self.stages = {}
        self._lock = threading.Lock()

    def __call__(self, job):
        with self._lock:
            self.stages.setdefault(job.token, []).append(job.stage)


@pytest.fixture
def recorder():
    return _Recorder()


@pytest.fixture
def build(recorder, metadata_source, text_source, engine):
    pipelines = []

    def _build(metadata=None, text=None, summary_engine=None, store=None):
        pipeline = AnalysisPipeline(
            store=store or InMemoryPaperStore(),
            registry=JobRegistry(listener=recorder),
            metadata_source=metadata or metadata_source,
            text_source=text or text_source,
            engine=summary_engine or engine,
            max_workers=4,
        )
        pipelines.append(pipeline)
        return pipeline

    yield _build
    for pipeline in pipelines:
        pipeline.shutdown(wait=True)


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------

def test_submit_runs_every_stage_in_order(build, recorder) -> None:
    pipeline = build()
    token = pipeline.submit("2301.00001")

    assert pipeline.wait(token, timeout=5) is JobStage.COMPLETED
    assert recorder.stages[token] == _STAGE_ORDER


def test_completed_job_has_fresh_analysis(build) -> None:
    pipeline = build()
    before = datetime.now(timezone.utc)
    token = pipeline.submit("2301.00001")
    pipeline.wait(token, timeout=5)

    analysis = pipeline.get_analysis(ArxivId.parse("2301.00001"))
    assert analysis is not None
    assert analysis.abstract_summary.startswith("Abstract summary:")
    assert analysis.full_text_summary == "Full summary"
    assert analysis.difficulty is DifficultyLevel.ADVANCED
    assert analysis.reading_time_minutes == 10
    assert analysis.citation.apa.startswith("Smith & Lee (2023).")
    assert timedelta(0) <= analysis.analyzed_at - before < timedelta(seconds=5)


def test_fetched_paper_is_stored(build) -> None:
    pipeline = build()
    pipeline.wait(pipeline.submit("2301.00001"), timeout=5)

    assert pipeline.store.get_paper("2301.00001").title == "Attention Is Mostly What You Need"


def test_submit_returns_before_work_finishes(build) -> None:
    gate = threading.Event()
    pipeline = build(summary_engine=FakeEngine(gate=gate))

    token = pipeline.submit("2301.00001")
    try:
        assert not pipeline.status(token).is_terminal
        assert pipeline.in_flight == 1
    finally:
        gate.set()

    assert pipeline.wait(token, timeout=5) is JobStage.COMPLETED


# ---------------------------------------------------------------------------
# Cached results
# ---------------------------------------------------------------------------

def test_fresh_analysis_short_circuits(build, metadata_source, recorder) -> None:
    pipeline = build()
    pipeline.wait(pipeline.submit("2301.00001"), timeout=5)

    token = pipeline.submit("2301.00001")

    assert pipeline.status(token) is JobStage.COMPLETED
    assert recorder.stages[token] == [JobStage.COMPLETED]
    assert metadata_source.calls == ["2301.00001"]


def test_stale_analysis_is_recomputed(build, metadata_source, paper) -> None:
    store = InMemoryPaperStore()
    store.save_analysis(PaperAnalysis(
        arxiv_id=paper.arxiv_id,
        abstract_summary="old",
        full_text_summary="old",
        difficulty=DifficultyLevel.BEGINNER,
        reading_time_minutes=5,
        citation=generate_citation(paper),
        analyzed_at=datetime.now(timezone.utc) - timedelta(days=31),
    ))
    pipeline = build(store=store)

    token = pipeline.submit("2301.00001")

    assert pipeline.wait(token, timeout=5) is JobStage.COMPLETED
    assert metadata_source.calls == ["2301.00001"]
    assert pipeline.get_analysis("2301.00001").abstract_summary != "old"


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw", [
    "not-an-id",
    " 2301.00001",
    "2301.00001\n",
    "\tcs/0301001 ",
])
def test_invalid_identifier_creates_no_job(build, metadata_source, raw: str) -> None:
    pipeline = build()

    with pytest.raises(InvalidPaperIdError):
        pipeline.submit(raw)
    assert len(pipeline.registry) == 0
    assert pipeline.in_flight == 0
    assert metadata_source.calls == []


def test_unknown_paper_fails_job(build) -> None:
    pipeline = build(metadata=FakeMetadataSource({}))
    token = pipeline.submit("2301.00001")

    assert pipeline.wait(token, timeout=5) is JobStage.FAILED
    assert pipeline.registry.get(token).error == "Paper not found on arXiv: 2301.00001"
    assert pipeline.get_analysis("2301.00001") is None


def test_metadata_exception_fails_job(build, recorder) -> None:
    pipeline = build(metadata=FakeMetadataSource(error=RuntimeError("arXiv down")))
    token = pipeline.submit("2301.00001")

    assert pipeline.wait(token, timeout=5) is JobStage.FAILED
    assert pipeline.registry.get(token).error == "Metadata fetch failed: arXiv down"
    assert recorder.stages[token] == [JobStage.PENDING, JobStage.FETCHING_METADATA, JobStage.FAILED]


def test_engine_exception_fails_job(build) -> None:
    pipeline = build(summary_engine=FakeEngine(error=RuntimeError("quota exceeded")))
    token = pipeline.submit("2301.00001")

    assert pipeline.wait(token, timeout=5) is JobStage.FAILED
    assert pipeline.registry.get(token).error == "Abstract summary failed: quota exceeded"
    assert pipeline.get_analysis("2301.00001") is None


def test_error_text_from_text_source_is_not_a_failure(build) -> None:
    pipeline = build(text=FakeTextSource("Unable to extract PDF content. Error: 404"))
    token = pipeline.submit("2301.00001")

    assert pipeline.wait(token, timeout=5) is JobStage.COMPLETED


def test_unknown_token_reports_failed(build) -> None:
    pipeline = build()

    assert pipeline.status("no-such-token") is JobStage.FAILED
    assert pipeline.wait("no-such-token") is JobStage.FAILED


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

def test_concurrent_jobs_stay_independent(build, recorder) -> None:
    first = make_paper("2301.00001", authors="Alice Smith")
    second = make_paper("cs/0301001", authors="Bob Lee")
    gate = threading.Event()
    pipeline = build(
        metadata=FakeMetadataSource({"2301.00001": first, "cs/0301001": second}),
        summary_engine=FakeEngine(gate=gate),
    )

    token_a = pipeline.submit("2301.00001")
    token_b = pipeline.submit("cs/0301001")
    gate.set()

    assert pipeline.wait(token_a, timeout=5) is JobStage.COMPLETED
    assert pipeline.wait(token_b, timeout=5) is JobStage.COMPLETED
    assert str(pipeline.registry.get(token_a).arxiv_id) == "2301.00001"
    assert str(pipeline.registry.get(token_b).arxiv_id) == "cs/0301001"
    assert pipeline.get_analysis("2301.00001").citation.apa.startswith("Smith")
    assert pipeline.get_analysis("cs/0301001").citation.apa.startswith("Lee")
    assert recorder.stages[token_a] == _STAGE_ORDER
    assert recorder.stages[token_b] == _STAGE_ORDER


def test_many_submissions_all_finish(build) -> None:
    pipeline = build()
    tokens = [pipeline.submit("2301.00001") for _ in range(10)]

    for token in tokens:
        assert pipeline.wait(token, timeout=5) is JobStage.COMPLETED


# ---------------------------------------------------------------------------
# JobEventManager
# ---------------------------------------------------------------------------

def test_event_manager_delivers_from_worker_thread() -> None:
    manager = JobEventManager()

    async def scenario():
        queue = manager.add_listener()
        worker = threading.Thread(target=manager.broadcast, args=({"type": "job_updated"},))
        worker.start()
        worker.join()
        event = await asyncio.wait_for(queue.get(), timeout=2)
        manager.remove_listener(queue)
        return event

    assert asyncio.run(scenario()) == {"type": "job_updated"}
    assert manager.listener_count == 0


def test_event_manager_drops_events_for_full_queue() -> None:
    manager = JobEventManager(max_queue_size=1)

    async def scenario():
        queue = manager.add_listener()
        manager.broadcast({"n": 1})
        manager.broadcast({"n": 2})
        await asyncio.sleep(0)
        return queue.qsize(), queue.get_nowait()

    assert asyncio.run(scenario()) == (1, {"n": 1})

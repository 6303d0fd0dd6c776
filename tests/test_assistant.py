"""Tests for the PaperAssistant query façade."""
from datetime import timedelta

import pytest
from conftest import FakeMetadataSource

from research_assistant.analysis import MockSummaryEngine
from research_assistant.assistant import PaperAssistant
from research_assistant.config import Settings
from research_assistant.errors import InvalidPaperIdError, PaperNotFoundError
from research_assistant.models import JobStage
from research_assistant.scrapers import MockArxivScraper


@pytest.fixture
def assistant(metadata_source, text_source, engine):
    assistant = PaperAssistant(
        Settings(max_workers=2),
        metadata_source=metadata_source,
        text_source=text_source,
        engine=engine,
    )
    yield assistant
    assistant.close()


def test_submit_and_poll(assistant) -> None:
    token = assistant.submit("2301.00001")
    assistant.pipeline.wait(token, timeout=5)

    status = assistant.job_status(token)
    assert status.stage is JobStage.COMPLETED
    assert status.progress_percentage == 100
    assert status.description == "Analysis complete"
    assert status.arxiv_id == "2301.00001"
    assert status.error is None


def test_unknown_token_reads_as_failed(assistant) -> None:
    status = assistant.job_status("nope")

    assert status.stage is JobStage.FAILED
    assert status.progress_percentage == -1
    assert status.arxiv_id is None


def test_invalid_identifier_raises(assistant) -> None:
    with pytest.raises(InvalidPaperIdError):
        assistant.submit("2301")
    with pytest.raises(InvalidPaperIdError):
        assistant.get_result("2301")


def test_result_joins_paper_and_analysis(assistant) -> None:
    assert assistant.get_result("2301.00001") is None
    assert not assistant.analysis_exists("2301.00001")

    assistant.pipeline.wait(assistant.submit("2301.00001"), timeout=5)

    paper, analysis = assistant.get_result("2301.00001")
    assert paper.title == "Attention Is Mostly What You Need"
    assert str(analysis.arxiv_id) == "2301.00001"
    assert assistant.paper_cached("2301.00001")
    assert assistant.analysis_exists("2301.00001")


def test_failed_job_reads_as_not_found(text_source, engine) -> None:
    assistant = PaperAssistant(
        Settings(),
        metadata_source=FakeMetadataSource({}),
        text_source=text_source,
        engine=engine,
    )
    try:
        token = assistant.submit("2301.00001")
        assistant.pipeline.wait(token, timeout=5)

        assert assistant.job_status(token).error == "Paper not found on arXiv: 2301.00001"
        assert assistant.get_result("2301.00001") is None
    finally:
        assistant.close()


def test_raw_text_fetches_and_caches_paper(assistant, metadata_source, text_source) -> None:
    paper, text = assistant.raw_text("2301.00001")

    assert paper.arxiv_id.value == "2301.00001"
    assert text == text_source.text
    assert assistant.paper_cached("2301.00001")

    assistant.raw_text("2301.00001")
    assert metadata_source.calls == ["2301.00001"]


def test_raw_text_unknown_paper(assistant) -> None:
    with pytest.raises(PaperNotFoundError):
        assistant.raw_text("2301.99999")


def test_ask_requires_known_paper(assistant) -> None:
    with pytest.raises(PaperNotFoundError):
        assistant.ask_question("2301.00001", "What is attention?")


def test_ask_uses_engine(assistant, engine) -> None:
    assistant.raw_text("2301.00001")

    assert assistant.ask_question("2301.00001", "What is attention?") == "Answer to What is attention?"
    assert engine.questions == ["What is attention?"]


def test_stats_and_purge(assistant) -> None:
    assistant.pipeline.wait(assistant.submit("2301.00001"), timeout=5)

    stats = assistant.stats()
    assert stats["papers"] == 1
    assert stats["analyses"] == 1
    assert stats["jobs"]["COMPLETED"] == 1

    assert assistant.purge_jobs(timedelta(hours=1)) == 0
    assert assistant.purge_jobs(timedelta(seconds=-1)) == 1


def test_mock_settings_build_mock_collaborators() -> None:
    assistant = PaperAssistant(Settings(use_mock_arxiv=True, use_mock_ai=True))
    try:
        assert isinstance(assistant.metadata_source, MockArxivScraper)
        assert assistant.text_source.source is assistant.metadata_source
        assert isinstance(assistant.engine.engine, MockSummaryEngine)
    finally:
        assistant.close()


def test_text_extracted_once_per_paper(assistant, text_source) -> None:
    assistant.pipeline.wait(assistant.submit("2301.00001"), timeout=5)

    assistant.ask_question("2301.00001", "What is attention?")
    assistant.ask_question("2301.00001", "Why does it work?")
    assistant.raw_text("2301.00001")

    assert text_source.calls == ["2301.00001"]

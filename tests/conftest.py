"""Shared fixtures: in-process collaborators with no network or sleeps."""
import threading
from datetime import datetime, timezone
from typing import Dict, Optional

import pytest

from research_assistant.analysis.summarizer import estimate_reading_time
from research_assistant.models import ArxivId, DifficultyLevel, Paper


def make_paper(raw_id: str = "2301.00001", authors: str = "Alice Smith, Bob Lee") -> Paper:
    return Paper(
        arxiv_id=ArxivId.parse(raw_id),
        title="Attention Is Mostly What You Need",
        authors=authors,
        abstract="We study attention mechanisms for sequence modelling.",
        published=datetime(2023, 1, 2, tzinfo=timezone.utc),
    )


class FakeMetadataSource:
    """Serves papers from a dict; unknown identifiers are not found."""

    def __init__(self, papers: Optional[Dict[str, Paper]] = None, error: Optional[Exception] = None):
        self.papers = papers if papers is not None else {}
        self.error = error
        self.calls = []

    def fetch(self, arxiv_id):
        self.calls.append(str(arxiv_id))
        if self.error is not None:
            raise self.error
        return self.papers.get(str(arxiv_id))


class FakeTextSource:
    def __init__(self, text: str = "word " * 1000):
        self.text = text
        self.calls = []

    def extract(self, arxiv_id):
        self.calls.append(str(arxiv_id))
        return self.text


class FakeEngine:
    """
    Deterministic engine. When ``gate`` is given, summarize_abstract blocks
    until it is set so tests can observe in-flight stages.
    """

    def __init__(self, gate: Optional[threading.Event] = None, error: Optional[Exception] = None):
        self.gate = gate
        self.error = error
        self.questions = []

    def summarize_abstract(self, abstract):
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return f"Abstract summary: {abstract[:20]}"

    def summarize_paper(self, full_text):
        return "Full summary"

    def estimate_difficulty(self, text):
        return DifficultyLevel.ADVANCED

    def estimate_reading_time(self, text):
        return estimate_reading_time(text)

    def answer_question(self, paper_text, question):
        self.questions.append(question)
        return f"Answer to {question}"


@pytest.fixture
def paper() -> Paper:
    return make_paper()


@pytest.fixture
def metadata_source(paper) -> FakeMetadataSource:
    return FakeMetadataSource({str(paper.arxiv_id): paper})


@pytest.fixture
def text_source() -> FakeTextSource:
    return FakeTextSource()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()

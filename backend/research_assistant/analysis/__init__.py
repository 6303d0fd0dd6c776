"""Analysis pipeline components."""
from .citations import generate_citation
from .mock import MockSummaryEngine
from .summarizer import LLMSummaryEngine, SummaryEngine, estimate_reading_time

__all__ = [
    "generate_citation",
    "estimate_reading_time",
    "LLMSummaryEngine",
    "MockSummaryEngine",
    "SummaryEngine",
]

"""Offline summary engine producing templated output after a simulated delay."""
import logging
import random
import time
from datetime import datetime

from ..models import DifficultyLevel
from .summarizer import estimate_reading_time

logger = logging.getLogger(__name__)

SUMMARY_TEMPLATES = [
    "This groundbreaking research explores {topic} with innovative approaches that could revolutionize the field.",
    "The authors present a novel framework for understanding {topic}, making complex concepts accessible to students.",
    "A comprehensive study on {topic} that bridges theoretical foundations with practical applications.",
    "This paper introduces cutting-edge techniques in {topic}, perfect for students beginning their research journey.",
]

FULL_SUMMARY = """**Comprehensive Paper Summary**

**Introduction & Background**
The paper establishes fundamental concepts and provides historical context that helps readers understand the research motivation.

**Methodology**
The authors employ a systematic approach with clear experimental design, making it easy to follow their reasoning.

**Key Findings**
- Significant improvement in efficiency
- Novel theoretical framework validated
- Practical applications demonstrated

**Conclusion**
An excellent paper for students looking to understand advanced concepts through clear explanations and practical examples.
"""

TOPIC_KEYWORDS = [
    ("neural", "neural networks"),
    ("quantum", "quantum computing"),
    ("machine learning", "machine learning"),
    ("algorithm", "algorithmic optimization"),
    ("data", "data science"),
]


def extract_topic(text: str) -> str:
    lower = text.lower()
    for keyword, topic in TOPIC_KEYWORDS:
        if keyword in lower:
            return topic
    return "computational research"


class MockSummaryEngine:
    """Stand-in for the LLM engine when running without API keys."""

    def __init__(self, min_delay_ms: int = 500, max_delay_ms: int = 2000, rng=None):
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max(min_delay_ms, max_delay_ms)
        self.rng = rng or random.Random()

    def _simulate_processing(self):
        delay_ms = self.rng.randint(self.min_delay_ms, self.max_delay_ms)
        if delay_ms > 0:
            time.sleep(delay_ms / 1000)

    def summarize_abstract(self, abstract: str) -> str:
        logger.info(f"MOCK: summarizing abstract ({len(abstract)} characters)")
        self._simulate_processing()
        template = self.rng.choice(SUMMARY_TEMPLATES)
        return (
            f"**Student-Friendly Summary** [Generated: {datetime.now().strftime('%H:%M:%S')}]\n\n"
            f"{template.format(topic=extract_topic(abstract))}\n\n"
            "**Key Points:**\n"
            "- Easy-to-understand methodology\n"
            "- Clear practical applications\n"
            "- Well-structured arguments\n"
        )

    def summarize_paper(self, full_text: str) -> str:
        logger.info(f"MOCK: summarizing full paper ({len(full_text)} characters)")
        self._simulate_processing()
        return FULL_SUMMARY

    def estimate_difficulty(self, text: str) -> DifficultyLevel:
        length = len(text)
        words = len(text.split())
        if length < 10000 or words < 2000:
            return DifficultyLevel.BEGINNER
        if length < 20000 or words < 4000:
            return DifficultyLevel.INTERMEDIATE
        if length < 40000:
            return DifficultyLevel.ADVANCED
        return DifficultyLevel.EXPERT

    def estimate_reading_time(self, text: str) -> int:
        return estimate_reading_time(text)

    def answer_question(self, paper_text: str, question: str) -> str:
        self._simulate_processing()
        return (
            f"MOCK answer to {question!r}: the paper focuses on "
            f"{extract_topic(paper_text)}."
        )

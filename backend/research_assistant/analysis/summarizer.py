"""LLM-backed summarization, difficulty rating and question answering."""
import logging
from typing import Protocol

from ..llm import LLMClient
from ..models import DifficultyLevel

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 150
MIN_READING_MINUTES = 5

SUMMARY_FALLBACK = (
    "Unable to generate summary at this time. "
    "The AI service is temporarily unavailable."
)
ANSWER_FALLBACK = (
    "Unable to answer your question at this time. "
    "The AI service is temporarily unavailable."
)

SYSTEM_PROMPT = "You are a helpful AI assistant that helps students understand research papers."

ABSTRACT_PROMPT = """You are an AI assistant helping students understand research papers.

Summarize the following research paper abstract in a way that's easy for undergraduate students to understand.
Use simple language, explain technical terms, and highlight the main contributions.
Keep it under 200 words.

Abstract:
{text}

Student-Friendly Summary:"""

PAPER_PROMPT = """You are an AI assistant helping students understand research papers.

Create a comprehensive summary of this research paper for students.
Structure it with:
1. Main Idea (1-2 sentences)
2. Key Contributions (bullet points)
3. Methodology (simplified explanation)
4. Results (what they found)
5. Why It Matters (real-world impact)

Keep the language accessible to undergraduate students.

Paper Text:
{text}

Structured Summary:"""

DIFFICULTY_PROMPT = """Analyze the difficulty level of this research paper for students.
Consider: mathematical complexity, required background knowledge, technical jargon, and concept density.

Respond with ONLY ONE of these levels:
- BEGINNER (undergraduate can understand with basic knowledge)
- INTERMEDIATE (requires some domain knowledge)
- ADVANCED (requires significant expertise)
- EXPERT (cutting-edge research level)

Paper excerpt:
{text}

Difficulty Level:"""

QUESTION_PROMPT = """You are an AI assistant helping students understand research papers.
Based on the paper content below, answer the student's question clearly and concisely.
If the answer is not in the paper, say so politely.
Use simple language and explain technical terms.

Paper Content:
{text}

Student's Question: {question}

Answer:"""


class SummaryEngine(Protocol):
    """Anything that can summarize and classify paper text."""

    def summarize_abstract(self, abstract: str) -> str: ...

    def summarize_paper(self, full_text: str) -> str: ...

    def estimate_difficulty(self, text: str) -> DifficultyLevel: ...

    def estimate_reading_time(self, text: str) -> int: ...

    def answer_question(self, paper_text: str, question: str) -> str: ...


def estimate_reading_time(text: str) -> int:
    """
    Reading time in minutes at 150 words per minute.

    Never less than 5 minutes, rounded up to the next multiple of 5.
    """
    word_count = len(text.split())
    minutes = max(MIN_READING_MINUTES, word_count // WORDS_PER_MINUTE)
    return ((minutes + 4) // 5) * 5


def heuristic_difficulty(text: str) -> DifficultyLevel:
    """Length-based difficulty used when the model cannot be asked."""
    length = len(text)
    if length < 10000:
        return DifficultyLevel.BEGINNER
    if length < 20000:
        return DifficultyLevel.INTERMEDIATE
    if length < 40000:
        return DifficultyLevel.ADVANCED
    return DifficultyLevel.EXPERT


def parse_difficulty(response: str) -> DifficultyLevel:
    """Map a free-text model reply onto a difficulty tier."""
    upper = response.strip().upper()
    for level in (
        DifficultyLevel.BEGINNER,
        DifficultyLevel.INTERMEDIATE,
        DifficultyLevel.ADVANCED,
        DifficultyLevel.EXPERT,
    ):
        if level.value in upper:
            return level
    return DifficultyLevel.INTERMEDIATE


def truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class LLMSummaryEngine:
    """Summarizes papers for students using the configured LLM provider."""

    SUMMARY_LIMIT = 15000
    DIFFICULTY_LIMIT = 5000
    QUESTION_LIMIT = 10000

    def __init__(self, llm: LLMClient):
        self.llm = llm

    def summarize_abstract(self, abstract: str) -> str:
        logger.info(f"Summarizing abstract ({len(abstract)} characters)")
        try:
            return self.llm.prompt(ABSTRACT_PROMPT.format(text=abstract), system=SYSTEM_PROMPT)
        except Exception as e:
            logger.error(f"Abstract summary failed, using fallback: {e}")
            return SUMMARY_FALLBACK

    def summarize_paper(self, full_text: str) -> str:
        logger.info(f"Summarizing full paper ({len(full_text)} characters)")
        prompt = PAPER_PROMPT.format(text=truncate(full_text, self.SUMMARY_LIMIT))
        try:
            return self.llm.prompt(prompt, system=SYSTEM_PROMPT)
        except Exception as e:
            logger.error(f"Full paper summary failed, using fallback: {e}")
            return SUMMARY_FALLBACK

    def estimate_difficulty(self, text: str) -> DifficultyLevel:
        prompt = DIFFICULTY_PROMPT.format(text=truncate(text, self.DIFFICULTY_LIMIT))
        try:
            return parse_difficulty(self.llm.prompt(prompt, system=SYSTEM_PROMPT, max_tokens=16))
        except Exception as e:
            logger.error(f"Difficulty estimation failed, using length heuristic: {e}")
            return heuristic_difficulty(text)

    def estimate_reading_time(self, text: str) -> int:
        return estimate_reading_time(text)

    def answer_question(self, paper_text: str, question: str) -> str:
        logger.info(f"Answering question: {question}")
        prompt = QUESTION_PROMPT.format(
            text=truncate(paper_text, self.QUESTION_LIMIT),
            question=question,
        )
        try:
            return self.llm.prompt(prompt, system=SYSTEM_PROMPT)
        except Exception as e:
            logger.error(f"Question answering failed, using fallback: {e}")
            return ANSWER_FALLBACK

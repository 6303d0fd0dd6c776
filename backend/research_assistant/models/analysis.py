"""Analysis results: difficulty tiers, citations and the stored analysis."""
import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .paper import ArxivId

FRESHNESS_WINDOW = timedelta(days=30)


class DifficultyLevel(str, enum.Enum):
    """How much background a reader needs for a paper."""
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"

    @property
    def description(self) -> str:
        return _DIFFICULTY_INFO[self][0]

    @property
    def emoji(self) -> str:
        return _DIFFICULTY_INFO[self][1]


_DIFFICULTY_INFO = {
    DifficultyLevel.BEGINNER: ("Suitable for beginners", "🟢"),
    DifficultyLevel.INTERMEDIATE: ("Requires some background knowledge", "🟡"),
    DifficultyLevel.ADVANCED: ("Requires significant expertise", "🔴"),
    DifficultyLevel.EXPERT: ("Cutting-edge research level", "🟣"),
}


@dataclass(frozen=True)
class Citation:
    """A paper's reference in the four supported styles."""

    apa: str
    mla: str
    chicago: str
    bibtex: str


@dataclass(frozen=True)
class PaperAnalysis:
    """Summaries, difficulty, reading time and citation for one paper."""

    arxiv_id: ArxivId
    abstract_summary: str
    full_text_summary: str
    difficulty: DifficultyLevel
    reading_time_minutes: int
    citation: Citation
    analyzed_at: datetime

    def is_fresh(
        self,
        now: Optional[datetime] = None,
        window: timedelta = FRESHNESS_WINDOW,
    ) -> bool:
        """An analysis is fresh while it is younger than ``window``."""
        if now is None:
            now = datetime.now(timezone.utc)
        return now - self.analyzed_at < window

    def __repr__(self):
        return (
            f"<PaperAnalysis arxiv:{self.arxiv_id} difficulty={self.difficulty.value} "
            f"analyzed_at={self.analyzed_at.isoformat()}>"
        )

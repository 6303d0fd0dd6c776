"""Analysis job model and the fixed stage progression."""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .paper import ArxivId


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStage(str, Enum):
    """Stage of an analysis job, in pipeline order."""
    PENDING = "PENDING"
    FETCHING_METADATA = "FETCHING_METADATA"
    EXTRACTING_TEXT = "EXTRACTING_TEXT"
    ANALYZING = "ANALYZING"
    GENERATING_SUMMARY = "GENERATING_SUMMARY"
    FORMATTING_CITATIONS = "FORMATTING_CITATIONS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def description(self) -> str:
        return _STAGE_INFO[self][0]

    @property
    def progress(self) -> int:
        """Progress percentage; FAILED reports -1."""
        return _STAGE_INFO[self][1]

    @property
    def is_terminal(self) -> bool:
        return self in (JobStage.COMPLETED, JobStage.FAILED)

    def can_advance_to(self, target: "JobStage") -> bool:
        """Forward moves only, plus a jump to FAILED from any non-terminal stage."""
        if self.is_terminal:
            return False
        if target is JobStage.FAILED:
            return True
        return _STAGE_ORDER.index(target) > _STAGE_ORDER.index(self)


_STAGE_INFO = {
    JobStage.PENDING: ("Analysis is queued", 0),
    JobStage.FETCHING_METADATA: ("Fetching paper metadata", 10),
    JobStage.EXTRACTING_TEXT: ("Extracting PDF content", 30),
    JobStage.ANALYZING: ("Analyzing paper content", 50),
    JobStage.GENERATING_SUMMARY: ("Generating summaries", 70),
    JobStage.FORMATTING_CITATIONS: ("Formatting citations", 90),
    JobStage.COMPLETED: ("Analysis complete", 100),
    JobStage.FAILED: ("Analysis failed", -1),
}

_STAGE_ORDER = [
    JobStage.PENDING,
    JobStage.FETCHING_METADATA,
    JobStage.EXTRACTING_TEXT,
    JobStage.ANALYZING,
    JobStage.GENERATING_SUMMARY,
    JobStage.FORMATTING_CITATIONS,
    JobStage.COMPLETED,
]


@dataclass
class Job:
    """A submitted analysis job."""

    token: str
    arxiv_id: ArxivId
    stage: JobStage = JobStage.PENDING
    error: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def snapshot(self) -> "Job":
        return replace(self)

    def to_event(self) -> dict:
        """Serializable form used by the job event stream."""
        return {
            "job_id": self.token,
            "arxiv_id": str(self.arxiv_id),
            "status": self.stage.value,
            "description": self.stage.description,
            "progress_percentage": self.stage.progress,
            "error": self.error,
            "updated_at": self.updated_at.isoformat(),
        }

    def __repr__(self):
        return f"<Job token={self.token} arxiv_id={self.arxiv_id} stage={self.stage.value}>"

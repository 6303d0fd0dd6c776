"""In-memory registry of analysis jobs."""
import logging
import threading
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from .models import ArxivId, Job, JobStage

logger = logging.getLogger(__name__)

JobListener = Callable[[Job], None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRegistry:
    """
    Maps job tokens to job state.

    Callers only ever receive snapshots; all mutation goes through
    ``advance`` and ``fail``, which ignore unknown tokens and refuse
    transitions that would move a job backwards or out of a terminal stage.
    """

    def __init__(self, listener: Optional[JobListener] = None, clock: Callable[[], datetime] = utcnow):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()
        self.listener = listener
        self.clock = clock

    def _notify(self, job: Job):
        if self.listener is None:
            return
        try:
            self.listener(job)
        except Exception as e:
            logger.error(f"Job listener failed for {job.token}: {e}")

    def create(self, arxiv_id: ArxivId, stage: JobStage = JobStage.PENDING) -> Job:
        """Register a new job and return a snapshot of it."""
        now = self.clock()
        job = Job(token=str(uuid.uuid4()), arxiv_id=arxiv_id, stage=stage, created_at=now, updated_at=now)
        with self._lock:
            self._jobs[job.token] = job
            snapshot = job.snapshot()
        self._notify(snapshot)
        return snapshot

    def _transition(self, token: str, stage: JobStage, error: Optional[str] = None) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(token)
            if job is None:
                return None
            if not job.stage.can_advance_to(stage):
                logger.warning(f"Ignoring transition {job.stage.value} -> {stage.value} for job {token}")
                return None
            job.stage = stage
            job.error = error
            job.updated_at = self.clock()
            snapshot = job.snapshot()
        self._notify(snapshot)
        return snapshot

    def advance(self, token: str, stage: JobStage) -> Optional[Job]:
        """Move a job forward; no-op for unknown tokens."""
        return self._transition(token, stage)

    def fail(self, token: str, message: str) -> Optional[Job]:
        """Mark a job FAILED with an error message; no-op for unknown tokens."""
        return self._transition(token, JobStage.FAILED, message)

    def get(self, token: str) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(token)
            return job.snapshot() if job else None

    def purge(self, older_than: datetime) -> int:
        """Drop finished jobs last updated before ``older_than``."""
        with self._lock:
            expired = [
                token for token, job in self._jobs.items()
                if job.stage.is_terminal and job.updated_at < older_than
            ]
            for token in expired:
                del self._jobs[token]
        if expired:
            logger.info(f"Purged {len(expired)} finished jobs")
        return len(expired)

    def counts(self) -> Dict[str, int]:
        with self._lock:
            counter = Counter(job.stage.value for job in self._jobs.values())
        return {stage.value: counter.get(stage.value, 0) for stage in JobStage}

    def __len__(self):
        with self._lock:
            return len(self._jobs)

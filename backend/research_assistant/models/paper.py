"""Paper model and arXiv identifier value object."""
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..errors import InvalidPaperIdError

# New-style (2301.00001) or old-style (cs/0301001) accession numbers
ARXIV_ID_PATTERN = re.compile(r"^(\d{4}\.\d{4,5}|[a-z\-]+/\d{7})$")


@dataclass(frozen=True)
class ArxivId:
    """Validated arXiv identifier. Build it with ``ArxivId.parse``."""

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not ARXIV_ID_PATTERN.fullmatch(self.value):
            raise InvalidPaperIdError(f"Invalid arXiv ID format: {self.value!r}")

    @classmethod
    def parse(cls, raw) -> "ArxivId":
        """Validate raw input and return the canonical identifier."""
        if isinstance(raw, ArxivId):
            return raw
        if not isinstance(raw, str):
            raise InvalidPaperIdError(f"Invalid arXiv ID format: {raw!r}")
        return cls(raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Paper:
    """Research paper metadata as resolved from arXiv."""

    arxiv_id: ArxivId
    title: str
    authors: str  # comma-joined author names
    abstract: str
    published: Optional[datetime] = None

    def __repr__(self):
        return f"<Paper arxiv:{self.arxiv_id} - {self.title[:50]}...>"

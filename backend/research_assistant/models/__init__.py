"""Domain models for the research paper assistant."""
from .paper import ArxivId, Paper
from .analysis import Citation, DifficultyLevel, PaperAnalysis
from .job import Job, JobStage

__all__ = ["ArxivId", "Paper", "Citation", "DifficultyLevel", "PaperAnalysis", "Job", "JobStage"]

"""Paper analysis API endpoints."""
import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from ..assistant import PaperAssistant
from ..errors import InvalidPaperIdError, PaperNotFoundError
from ..models import ArxivId
from .deps import get_assistant

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Pydantic Schemas
# ============================================================================

class AnalyzePaperRequest(BaseModel):
    """Request to analyze a paper."""
    arxiv_id: str = Field(..., examples=["2301.00001", "cs/0301001"])


class SubmitResponse(BaseModel):
    """Response for an accepted analysis request."""
    job_id: str
    message: str
    status_url: str


class JobStatusResponse(BaseModel):
    """Response for job status polling."""
    job_id: str
    status: str
    description: str
    progress_percentage: int
    arxiv_id: Optional[str] = None
    error: Optional[str] = None


class DifficultyInfo(BaseModel):
    level: str
    description: str
    emoji: str


class CitationInfo(BaseModel):
    apa: str
    mla: str
    chicago: str
    bibtex: str


class PaperAnalysisResponse(BaseModel):
    """Stored analysis joined with the paper's metadata."""
    arxiv_id: str
    title: str
    authors: str
    abstract: str
    abstract_summary: str
    full_text_summary: str
    difficulty: DifficultyInfo
    estimated_reading_time_minutes: int
    citations: CitationInfo
    published_date: Optional[datetime] = None
    analyzed_at: datetime


class PaperExistsResponse(BaseModel):
    arxiv_id: str
    paper_cached: bool
    analysis_exists: bool


class RawTextResponse(BaseModel):
    arxiv_id: str
    title: str
    raw_text: str
    text_length: int
    extracted_at: datetime


class AskQuestionRequest(BaseModel):
    """A student's question about a paper."""
    question: str = Field(..., min_length=3, max_length=500)


class QuestionResponse(BaseModel):
    question_id: str
    arxiv_id: str
    question: str
    answer: str
    timestamp: datetime


def _invalid_id(e: InvalidPaperIdError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=f"{e}. Examples: 2301.00001 or cs/0301001",
    )


# ============================================================================
# API Endpoints
# ============================================================================

@router.post("/analyze", response_model=SubmitResponse, status_code=202)
async def analyze_paper(
    request: AnalyzePaperRequest,
    assistant: PaperAssistant = Depends(get_assistant),
):
    """Submit an arXiv paper for analysis. Returns immediately with a job id."""
    logger.info(f"Received analysis request for {request.arxiv_id}")
    try:
        job_id = assistant.submit(request.arxiv_id)
    except InvalidPaperIdError as e:
        raise _invalid_id(e)

    return SubmitResponse(
        job_id=job_id,
        message="Paper submitted for analysis",
        status_url=f"/api/v1/papers/jobs/{job_id}",
    )


@router.get("/jobs/stream")
async def job_stream(assistant: PaperAssistant = Depends(get_assistant)):
    """SSE stream of job updates."""
    async def generate():
        listener = assistant.events.add_listener()
        try:
            yield f"data: {json.dumps({'type': 'status', **assistant.stats()})}\n\n"

            while True:
                try:
                    event = await asyncio.wait_for(listener.get(), timeout=30.0)
                    yield f"data: {json.dumps(event)}\n\n"
                except asyncio.TimeoutError:
                    yield f"data: {json.dumps({'type': 'heartbeat'})}\n\n"
        finally:
            assistant.events.remove_listener(listener)

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job_status(job_id: str, assistant: PaperAssistant = Depends(get_assistant)):
    """Poll an analysis job. Unknown job ids report FAILED."""
    view = assistant.job_status(job_id)
    return JobStatusResponse(
        job_id=view.job_id,
        status=view.stage.value,
        description=view.description,
        progress_percentage=view.progress_percentage,
        arxiv_id=view.arxiv_id,
        error=view.error,
    )


@router.get("/{arxiv_id:path}/exists", response_model=PaperExistsResponse)
async def check_paper_exists(arxiv_id: str, assistant: PaperAssistant = Depends(get_assistant)):
    """Check whether a paper and a fresh analysis are cached."""
    try:
        paper_id = ArxivId.parse(arxiv_id)
    except InvalidPaperIdError as e:
        raise _invalid_id(e)

    return PaperExistsResponse(
        arxiv_id=str(paper_id),
        paper_cached=assistant.paper_cached(paper_id),
        analysis_exists=assistant.analysis_exists(paper_id),
    )


@router.get("/{arxiv_id:path}/raw-text", response_model=RawTextResponse)
def get_raw_text(arxiv_id: str, assistant: PaperAssistant = Depends(get_assistant)):
    """Extract the raw PDF text of a paper."""
    logger.info(f"Extracting raw PDF text for {arxiv_id}")
    try:
        paper, text = assistant.raw_text(arxiv_id)
    except InvalidPaperIdError as e:
        raise _invalid_id(e)
    except PaperNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return RawTextResponse(
        arxiv_id=str(paper.arxiv_id),
        title=paper.title,
        raw_text=text,
        text_length=len(text),
        extracted_at=datetime.now(timezone.utc),
    )


@router.post("/{arxiv_id:path}/ask", response_model=QuestionResponse)
def ask_question(
    arxiv_id: str,
    request: AskQuestionRequest,
    assistant: PaperAssistant = Depends(get_assistant),
):
    """Ask a question about a paper that has been fetched before."""
    try:
        paper_id = ArxivId.parse(arxiv_id)
    except InvalidPaperIdError as e:
        raise _invalid_id(e)

    try:
        answer = assistant.ask_question(paper_id, request.question)
    except PaperNotFoundError as e:
        raise HTTPException(status_code=404, detail=f"{e}. Please analyze this paper first.")

    return QuestionResponse(
        question_id=str(uuid.uuid4()),
        arxiv_id=str(paper_id),
        question=request.question,
        answer=answer,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/{arxiv_id:path}", response_model=PaperAnalysisResponse)
async def get_paper_analysis(arxiv_id: str, assistant: PaperAssistant = Depends(get_assistant)):
    """Get the analysis of a paper, joined with its metadata."""
    try:
        paper_id = ArxivId.parse(arxiv_id)
    except InvalidPaperIdError as e:
        raise _invalid_id(e)

    result = assistant.get_result(paper_id)
    if result is None:
        return JSONResponse(
            status_code=404,
            content={
                "error": "Analysis not found",
                "arxiv_id": str(paper_id),
                "message": "Please submit this paper for analysis first",
            },
        )

    paper, analysis = result
    return PaperAnalysisResponse(
        arxiv_id=str(analysis.arxiv_id),
        title=paper.title,
        authors=paper.authors,
        abstract=paper.abstract,
        abstract_summary=analysis.abstract_summary,
        full_text_summary=analysis.full_text_summary,
        difficulty=DifficultyInfo(
            level=analysis.difficulty.value,
            description=analysis.difficulty.description,
            emoji=analysis.difficulty.emoji,
        ),
        estimated_reading_time_minutes=analysis.reading_time_minutes,
        citations=CitationInfo(
            apa=analysis.citation.apa,
            mla=analysis.citation.mla,
            chicago=analysis.citation.chicago,
            bibtex=analysis.citation.bibtex,
        ),
        published_date=paper.published,
        analyzed_at=analysis.analyzed_at,
    )

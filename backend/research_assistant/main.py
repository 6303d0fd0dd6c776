"""FastAPI application entry point."""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import papers
from .assistant import PaperAssistant
from .config import Settings, settings as default_settings
from .scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


def create_app(
    assistant: Optional[PaperAssistant] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the application.

    An injected assistant is used as-is and left open on shutdown; otherwise
    one is built from settings at startup and closed on shutdown.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Research Paper Assistant",
        description="Asynchronous summaries, difficulty estimates and citations for arXiv papers",
        version=__version__,
    )

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(papers.router, prefix="/api/v1/papers", tags=["papers"])

    app.state.assistant = assistant
    app.state.owns_assistant = assistant is None
    app.state.scheduler = None

    @app.on_event("startup")
    async def startup_event():
        """Build the assistant and optionally start the job purge."""
        if app.state.assistant is None:
            app.state.assistant = PaperAssistant(settings)
            logger.info(
                f"Assistant ready (mock arXiv: {settings.use_mock_arxiv}, mock AI: {settings.use_mock_ai})"
            )
        if settings.enable_scheduler:
            app.state.scheduler = start_scheduler(app.state.assistant, settings)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown."""
        stop_scheduler(app.state.scheduler)
        app.state.scheduler = None
        if app.state.owns_assistant and app.state.assistant is not None:
            app.state.assistant.close(wait=False)
            app.state.assistant = None

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Research Paper Assistant",
            "description": "AI-powered summaries of arXiv papers for students",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "UP",
            "application": settings.app_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/v1/stats")
    async def get_stats(request: Request):
        """Store and job counters."""
        current = request.app.state.assistant
        if current is None:
            return {"status": "starting"}
        return current.stats()

    return app


app = create_app()

"""Shared FastAPI dependencies."""
from fastapi import HTTPException, Request

from ..assistant import PaperAssistant


def get_assistant(request: Request) -> PaperAssistant:
    """Dependency returning the application's PaperAssistant."""
    assistant = getattr(request.app.state, "assistant", None)
    if assistant is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return assistant

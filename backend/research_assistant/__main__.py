"""Entry point for running the assistant as a module.

Usage:
    python -m research_assistant serve [--host HOST] [--port PORT]
    python -m research_assistant analyze 2301.00001
"""
import argparse
import json
import logging
import sys
from concurrent.futures import TimeoutError as FuturesTimeoutError

import uvicorn

from .config import settings


def cmd_serve(args: argparse.Namespace) -> int:
    uvicorn.run(
        "research_assistant.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    """Run one analysis in the foreground and print the result as JSON."""
    from .assistant import PaperAssistant
    from .errors import InvalidPaperIdError

    assistant = PaperAssistant(settings)
    try:
        try:
            token = assistant.submit(args.arxiv_id)
        except InvalidPaperIdError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        try:
            assistant.pipeline.wait(token, timeout=args.timeout)
        except FuturesTimeoutError:
            stage = assistant.job_status(token).stage
            print(
                f"Error: analysis of {args.arxiv_id} timed out after {args.timeout:g}s "
                f"(job {token} still {stage.value})",
                file=sys.stderr,
            )
            return 3
        status = assistant.job_status(token)
        if status.error:
            print(f"Error: {status.error}", file=sys.stderr)
            return 1

        paper, analysis = assistant.get_result(args.arxiv_id)
        print(json.dumps({
            "arxiv_id": str(paper.arxiv_id),
            "title": paper.title,
            "authors": paper.authors,
            "abstract_summary": analysis.abstract_summary,
            "full_text_summary": analysis.full_text_summary,
            "difficulty": analysis.difficulty.value,
            "estimated_reading_time_minutes": analysis.reading_time_minutes,
            "citations": {
                "apa": analysis.citation.apa,
                "mla": analysis.citation.mla,
                "chicago": analysis.citation.chicago,
                "bibtex": analysis.citation.bibtex,
            },
        }, indent=2))
        return 0
    finally:
        # A timed-out job keeps running; do not block on it here
        assistant.close(wait=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="research-assistant", description="arXiv paper analysis service")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=cmd_serve)

    analyze = sub.add_parser("analyze", help="Analyze one paper and print the result")
    analyze.add_argument("arxiv_id")
    analyze.add_argument("--timeout", type=float, default=600.0)
    analyze.set_defaults(func=cmd_analyze)
    return parser


def run() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    run()

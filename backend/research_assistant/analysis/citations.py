"""Citation strings (APA, MLA, Chicago, BibTeX) for arXiv papers."""
import re

from ..models import Citation, Paper

NO_DATE = "n.d."

BIBTEX_TEMPLATE = """@article{{{key}{year},
  title={{{title}}},
  author={{{authors}}},
  journal={{arXiv preprint arXiv:{arxiv_id}}},
  year={{{year}}}
}}"""


def _last_name(full_name: str) -> str:
    parts = full_name.strip().split()
    return parts[-1] if parts else ""


def author_last_names(authors: str) -> str:
    """
    Reduce a comma-separated author list for in-text citation.

    One author gives the surname, two give "A & B", three or more give
    "A et al.".
    """
    author_list = authors.split(",")
    if len(author_list) == 1:
        return _last_name(author_list[0])
    if len(author_list) == 2:
        return f"{_last_name(author_list[0])} & {_last_name(author_list[1])}"
    return f"{_last_name(author_list[0])} et al."


def first_author_key(authors: str) -> str:
    """First author's surname with everything but ASCII letters removed."""
    return re.sub(r"[^a-zA-Z]", "", _last_name(authors.split(",")[0]))


def citation_year(paper: Paper) -> str:
    return str(paper.published.year) if paper.published else NO_DATE


def generate_citation(paper: Paper) -> Citation:
    """Build all four citation formats for a paper."""
    year = citation_year(paper)
    names = author_last_names(paper.authors)
    arxiv_id = str(paper.arxiv_id)

    return Citation(
        apa=f"{names} ({year}). {paper.title}. arXiv:{arxiv_id}",
        mla=f'{names}. "{paper.title}." arXiv preprint arXiv:{arxiv_id} ({year}).',
        chicago=f'{names}. "{paper.title}." arXiv preprint arXiv:{arxiv_id} ({year}).',
        bibtex=BIBTEX_TEMPLATE.format(
            key=first_author_key(paper.authors),
            year=year,
            title=paper.title,
            authors=paper.authors,
            arxiv_id=arxiv_id,
        ),
    )

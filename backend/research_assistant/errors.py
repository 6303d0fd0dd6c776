"""Exceptions raised by the analysis core."""


class InvalidPaperIdError(ValueError):
    """The identifier does not match the arXiv accession grammar."""


class PaperNotFoundError(LookupError):
    """The metadata source has no record for a syntactically valid identifier."""


class CollaboratorError(RuntimeError):
    """An external collaborator (arXiv, PDF download, LLM) failed."""

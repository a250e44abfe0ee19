"""Retrieval exceptions for docqa."""

from .base import DocQAError


class RetrievalError(DocQAError):
    """Error during chunk retrieval."""

    error_code = "DQA_RET_001"


class RetrievalSignalError(RetrievalError):
    """One retrieval signal (semantic or lexical) failed.

    Absorbed by the hybrid retriever, which continues with an empty list.
    """

    error_code = "DQA_RET_002"

"""Document ingestion exceptions for docqa."""

from .base import DocQAError


class IngestionError(DocQAError):
    """Error while turning a source document into indexed chunks."""

    error_code = "DQA_ING_001"


class FetchError(IngestionError):
    """Source document could not be fetched.

    Raised before any document record exists, so nothing is marked failed.
    """

    error_code = "DQA_ING_002"


class PipelineError(IngestionError):
    """A stage of the ingestion pipeline failed.

    The document has been marked ``failed``. ``context`` carries the
    ``document_id`` and the ``stage`` that was running.
    """

    error_code = "DQA_ING_003"

    @property
    def document_id(self) -> str | None:
        return self.extra_context.get("document_id")

    @property
    def stage(self) -> str | None:
        return self.extra_context.get("stage")


class ParseError(PipelineError):
    """Text could not be extracted from the document content.

    Common causes:
    - Corrupt or encrypted file
    - Content type does not match the bytes
    - OCR fallback could not read the image
    """

    error_code = "DQA_ING_004"


class InvalidStatusTransitionError(IngestionError):
    """Document status change is not allowed by the lifecycle."""

    error_code = "DQA_ING_005"

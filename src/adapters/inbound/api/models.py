"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ....adapters.outbound.fetch.http_fetcher import is_local_locator

MetadataValue = str | int | float | bool | None


def _remote_locator(value: str) -> str:
    if is_local_locator(value):
        raise ValueError("only http(s) URLs and data: URIs are accepted")
    return value


class DocumentIngestRequest(BaseModel):
    """Request model for ingesting a document from a URL."""

    url: str = Field(
        ...,
        min_length=1,
        description="http(s) URL or data: URI of the document",
        json_schema_extra={"example": "https://example.com/policy.pdf"},
    )
    metadata: dict[str, MetadataValue] = Field(
        default_factory=dict,
        description="Domain tags stored on the document and its chunks",
        json_schema_extra={"example": {"domain": "insurance"}},
    )

    @field_validator("url")
    @classmethod
    def url_must_be_remote(cls, value: str) -> str:
        return _remote_locator(value)


class DocumentResponse(BaseModel):
    """Current state of an ingested document."""

    id: str = Field(..., description="Document id")
    filename: str = Field(..., description="File name derived from the source")
    content_type: str = Field(..., description="Declared content type")
    source_url: str | None = Field(None, description="Locator the document was fetched from")
    status: str = Field(..., description="Lifecycle status (uploaded ... indexed / failed)")
    chunk_count: int = Field(0, description="Number of indexed chunks")
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)
    created_at: str
    updated_at: str


class QueryRequest(BaseModel):
    """Request model for asking a question."""

    query: str = Field(
        ...,
        description="The question to answer from the indexed documents",
        json_schema_extra={"example": "Does this policy cover knee surgery?"},
    )
    document_id: str | None = Field(None, description="Restrict the search to one document")
    metadata_filters: dict[str, MetadataValue] = Field(
        default_factory=dict,
        description="Equality filters on chunk metadata, combined with AND",
    )


class CitationModel(BaseModel):
    """A validated citation."""

    source_id: str = Field(..., description="Id of the cited document")
    page_number: str | None = Field(None, description="Cited page, when known")


class QueryResponse(BaseModel):
    """Structured answer to a query."""

    answer: str = Field(..., description="Concise answer")
    reasoning: str = Field(..., description="How the answer follows from the context")
    conditions: dict[str, MetadataValue] = Field(
        default_factory=dict, description="Conditions or values found in the context"
    )
    citations: list[CitationModel] = Field(default_factory=list)
    logic_evaluation: str = Field("N/A", description="Annotations from the rule checks")


class RunRequest(BaseModel):
    """Request model for a batch run."""

    documents: str = Field(
        ...,
        min_length=1,
        description="URL of the document to ingest",
        json_schema_extra={"example": "https://example.com/policy.pdf"},
    )
    questions: list[str] = Field(..., min_length=1, description="Questions to answer")

    @field_validator("documents")
    @classmethod
    def documents_must_be_remote(cls, value: str) -> str:
        return _remote_locator(value)


class RunResponse(BaseModel):
    """One answer per question, in request order."""

    answers: list[str]


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")
    database: str = Field(..., description="Document store status")


class ErrorDetail(BaseModel):
    """Structured error detail information."""

    type: str = Field(..., description="Exception type name")
    code: str = Field(..., description="Error code (e.g., DQA_ING_004)")
    message: str = Field(..., description="Human-readable error message")


class ErrorLocation(BaseModel):
    """Source location where error occurred."""

    model_config = ConfigDict(populate_by_name=True)

    class_name: str = Field(..., alias="class", description="Class name or <module>")
    method: str = Field(..., description="Method/function name")
    file: str = Field(..., description="Source file name")
    line: int = Field(..., description="Line number")
    timestamp: str | None = Field(None, description="When the error occurred")


class ErrorResponse(BaseModel):
    """Response model for structured errors.

    Example:
        {
            "error": {"type": "ParseError", "code": "DQA_ING_004", "message": "..."},
            "location": {"class": "DocumentTextExtractor", "method": "extract_text", ...},
            "context": {"content_type": "application/pdf", "document_id": "..."},
            "stack_trace": ["Traceback...", ...]  # Only in debug mode
        }
    """

    error: ErrorDetail = Field(..., description="Error details including type, code, and message")
    location: ErrorLocation | None = Field(None, description="Source location of the error")
    context: dict | None = Field(None, description="Additional debugging context")
    cause: dict | None = Field(None, description="Underlying exception that caused this error")
    stack_trace: list[str] | None = Field(None, description="Stack trace (debug mode only)")

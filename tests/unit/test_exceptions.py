"""Unit tests for exception handling system.

Tests both the exception hierarchy and the exception handler utilities,
including negative tests to verify correct exceptions are raised.
"""

import json
from unittest.mock import patch

import pytest

from src.common.exception_handler import (
    format_exception_json,
    get_http_status_code,
)
from src.core.domain.exceptions import (
    ConfigurationError,
    DocQAError,
    DocumentNotFoundError,
    EmbeddingError,
    EmbeddingRateLimitError,
    EmptyQueryError,
    FetchError,
    GenerationFormatError,
    IngestionError,
    InvalidMetadataError,
    InvalidStatusTransitionError,
    LocalFileAccessError,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    MissingAPIKeyError,
    ParseError,
    PipelineError,
    QueryTooLongError,
    RetrievalSignalError,
    StorageError,
    ValidationError,
    VectorStoreConnectionError,
    VectorStoreQueryError,
)

# Apply @pytest.mark.unit to all tests in this module
pytestmark = pytest.mark.unit


class TestExceptionHierarchy:
    """Tests for the exception class hierarchy."""

    def test_docqa_error_is_base(self):
        """DocQAError should be the base for all custom exceptions."""
        for cls in (ConfigurationError, StorageError, LLMError, ValidationError, EmbeddingError):
            assert issubclass(cls, DocQAError)

    def test_vector_store_errors_are_storage_errors(self):
        assert issubclass(VectorStoreConnectionError, StorageError)
        assert issubclass(VectorStoreQueryError, StorageError)
        assert issubclass(DocumentNotFoundError, StorageError)

    def test_parse_error_is_pipeline_error(self):
        """A parse failure is a pipeline failure at the parsing stage."""
        assert issubclass(ParseError, PipelineError)
        assert issubclass(PipelineError, IngestionError)
        assert issubclass(FetchError, IngestionError)
        assert not issubclass(FetchError, PipelineError)

    def test_query_errors_are_validation_errors(self):
        assert issubclass(EmptyQueryError, ValidationError)
        assert issubclass(QueryTooLongError, ValidationError)
        assert issubclass(InvalidMetadataError, ValidationError)
        assert issubclass(LocalFileAccessError, ValidationError)

    def test_generation_format_error_is_llm_error(self):
        assert issubclass(GenerationFormatError, LLMError)


class TestExceptionCreation:
    """Tests for creating and using exceptions."""

    def test_basic_exception_creation(self):
        """Basic exception should have message and error code."""
        exc = DocQAError("Test error message")
        assert str(exc) == "Test error message"
        assert exc.message == "Test error message"
        assert exc.error_code == "DQA_ERR_001"

    def test_exception_with_context(self):
        exc = VectorStoreConnectionError(
            "Connection failed", context={"url": "https://test.qdrant.io", "timeout": 30}
        )
        assert exc.extra_context["url"] == "https://test.qdrant.io"
        assert exc.extra_context["timeout"] == 30

    def test_exception_with_cause(self):
        original = ConnectionError("Network unreachable")
        exc = VectorStoreConnectionError("Connection failed", cause=original)
        assert exc.cause is original

    def test_exception_captures_location(self):
        """Exception should capture file, method, and line number."""
        exc = DocQAError("Test")
        assert exc.location.file_name is not None
        assert exc.location.method_name is not None
        assert exc.location.line_number > 0

    def test_pipeline_error_exposes_document_and_stage(self):
        exc = PipelineError("failed", context={"document_id": "doc-1", "stage": "embedding"})
        assert exc.document_id == "doc-1"
        assert exc.stage == "embedding"
        assert PipelineError("failed").stage is None

    def test_each_exception_has_unique_error_code(self):
        """Each exception type should have a unique error code."""
        classes = [
            DocQAError,
            ConfigurationError,
            MissingAPIKeyError,
            StorageError,
            VectorStoreConnectionError,
            VectorStoreQueryError,
            DocumentNotFoundError,
            EmbeddingError,
            EmbeddingRateLimitError,
            LLMError,
            LLMConnectionError,
            LLMRateLimitError,
            GenerationFormatError,
            ValidationError,
            EmptyQueryError,
            QueryTooLongError,
            InvalidMetadataError,
            LocalFileAccessError,
            IngestionError,
            FetchError,
            PipelineError,
            ParseError,
            InvalidStatusTransitionError,
            RetrievalSignalError,
        ]
        codes = {cls("test").error_code for cls in classes}
        assert len(codes) == len(classes)
        assert all(code.startswith("DQA_") for code in codes)


class TestExceptionToDict:
    """Tests for exception JSON serialization."""

    def test_to_dict_basic_structure(self):
        result = FetchError("Test error").to_dict()

        assert result["error"] == {
            "type": "FetchError",
            "code": "DQA_ING_002",
            "message": "Test error",
        }
        assert set(result["location"]) == {"class", "method", "file", "line"}

    def test_to_dict_includes_context_and_cause(self):
        exc = ParseError(
            "Bad PDF", cause=ValueError("xref"), context={"content_type": "application/pdf"}
        )
        result = exc.to_dict()

        assert result["context"]["content_type"] == "application/pdf"
        assert result["cause"] == {"type": "ValueError", "message": "xref"}

    def test_to_dict_excludes_trace_by_default(self):
        exc = ValidationError("Invalid input", cause=ValueError("Bad value"))
        assert "stack_trace" not in exc.to_dict()

    def test_to_dict_is_json_serializable(self):
        exc = VectorStoreConnectionError(
            "Connection failed", context={"url": "https://test.qdrant.io", "port": 6333}
        )
        assert isinstance(json.dumps(exc.to_dict()), str)


class TestExceptionHandler:
    """Tests for exception handler utilities."""

    def test_format_custom_exception(self):
        result = format_exception_json(LLMRateLimitError("Slow down"))

        assert result["error"]["type"] == "LLMRateLimitError"
        assert result["error"]["code"] == "DQA_LLM_003"

    def test_format_standard_exception(self):
        try:
            raise ValueError("Standard error")
        except ValueError as e:
            result = format_exception_json(e)

        assert result["error"]["type"] == "ValueError"
        assert result["error"]["code"] == "PYTHON_ERR"
        assert result["error"]["message"] == "Standard error"
        assert result["location"]["method"] == "test_format_standard_exception"

    def test_format_adds_extra_context(self):
        exc = FetchError("Test", context={"url": "original"})
        result = format_exception_json(exc, extra_context={"request_id": "abc123"})

        assert result["context"] == {"url": "original", "request_id": "abc123"}

    def test_format_without_trace_is_client_safe(self):
        result = format_exception_json(StorageError("disk full"))

        assert result["error"]["code"] == "DQA_STO_001"
        assert "stack_trace" not in result


class TestHTTPStatusCodes:
    """Tests for HTTP status code mapping."""

    @pytest.mark.parametrize(
        "exc,status",
        [
            (EmptyQueryError("q"), 400),
            (QueryTooLongError("q"), 400),
            (InvalidMetadataError("m"), 400),
            (LocalFileAccessError("l"), 400),
            (DocumentNotFoundError("d"), 404),
            (ParseError("p"), 422),
            (LLMRateLimitError("r"), 429),
            (EmbeddingRateLimitError("r"), 429),
            (FetchError("f"), 502),
            (GenerationFormatError("g"), 502),
            (LLMConnectionError("c"), 502),
            (VectorStoreConnectionError("v"), 503),
            (StorageError("s"), 503),
            (MissingAPIKeyError("k"), 500),
            (PipelineError("p"), 500),
            (DocQAError("x"), 500),
            (ValueError("v"), 400),
            (ConnectionError("c"), 503),
            (RuntimeError("r"), 500),
        ],
    )
    def test_status_mapping(self, exc, status):
        assert get_http_status_code(exc) == status


class TestNegativeScenarios:
    """Negative tests to verify exceptions are raised correctly."""

    def test_missing_api_key_raises_error(self):
        from src.adapters.outbound.llm.gemini_adapter import GeminiAdapter

        client = GeminiAdapter(api_key="", model="test")

        with pytest.raises(MissingAPIKeyError):
            client._get_client()

    def test_qdrant_connection_failure_raises_error(self):
        from src.adapters.outbound.vector_store.qdrant_adapter import QdrantAdapter

        store = QdrantAdapter(url="https://invalid.qdrant.example.com:6333", api_key="fake_key")

        with patch("qdrant_client.QdrantClient") as mock_client:
            mock_client.side_effect = Exception("Connection refused")

            with pytest.raises(VectorStoreConnectionError) as exc_info:
                store._get_client()

        exc = exc_info.value
        assert exc.error_code == "DQA_STO_002"
        assert "url" in exc.extra_context
        assert "Connection refused" in str(exc.cause)

    def test_catch_by_base_class(self):
        """All docqa errors can be caught with the base class."""
        for exc in (FetchError("a"), LLMRateLimitError("b"), InvalidMetadataError("c")):
            with pytest.raises(DocQAError):
                raise exc

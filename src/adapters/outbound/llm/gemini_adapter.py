"""Google Gemini adapter for generation and OCR using the google-genai SDK."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from google import genai

from ....core.domain.exceptions import (
    LLMConnectionError,
    LLMGenerationError,
    LLMRateLimitError,
    MissingAPIKeyError,
)
from ....core.ports.extractor_port import OCRPort
from ....core.ports.llm_port import LLMPort

logger = logging.getLogger(__name__)

OCR_PROMPT = (
    "Transcribe all text visible in this image exactly as written. "
    "Preserve reading order and line breaks. Return only the transcribed text."
)


class GeminiAdapter(LLMPort, OCRPort):
    """Gemini model used for grounded answers and for reading images."""

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash") -> None:
        """Initialize the adapter.

        Args:
            api_key: Google AI API key.
            model: Model to use for generation and OCR.
        """
        self.api_key = api_key
        self.model_name = model
        self._client = None

    def _get_client(self) -> "genai.Client":
        """Lazy load the Gemini client."""
        if self._client is None:
            if not self.api_key:
                raise MissingAPIKeyError(
                    "Google API key not set. Get one at https://aistudio.google.com/ "
                    "and set GOOGLE_API_KEY in your .env file.",
                    context={"setting": "google_api_key"},
                )

            from google import genai

            self._client = genai.Client(api_key=self.api_key)
            logger.info("Gemini client initialized for model: %s", self.model_name)

        return self._client

    def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.1,
        json_output: bool = False,
    ) -> str:
        from google.genai.types import GenerateContentConfig

        config = GenerateContentConfig(
            temperature=temperature,
            response_mime_type="application/json" if json_output else None,
        )
        return self._call(prompt, config)

    def extract_image_text(self, content: bytes, content_type: str) -> str:
        from google.genai import types

        image = types.Part.from_bytes(data=content, mime_type=content_type)
        return self._call([image, OCR_PROMPT], types.GenerateContentConfig(temperature=0.0))

    def _call(self, contents, config) -> str:
        client = self._get_client()

        try:
            response = client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config,
            )
        except Exception as e:
            error_msg = str(e).lower()
            if "quota" in error_msg or "rate" in error_msg or "429" in error_msg:
                raise LLMRateLimitError(
                    f"Gemini rate limit reached: {e}", cause=e, context={"model": self.model_name}
                ) from e
            if "connect" in error_msg or "timeout" in error_msg or "api key" in error_msg:
                raise LLMConnectionError(
                    f"Could not reach Gemini: {e}", cause=e, context={"model": self.model_name}
                ) from e
            raise LLMGenerationError(
                f"Gemini error: {e}", cause=e, context={"model": self.model_name}
            ) from e

        # Safety filters leave no candidates
        if not response.candidates or response.text is None:
            raise LLMGenerationError(
                "Gemini returned no content (possibly blocked by safety filters)",
                context={"model": self.model_name},
            )
        return response.text

"""LLM Port Interface."""

from abc import ABC, abstractmethod


class LLMPort(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        *,
        temperature: float = 0.1,
        json_output: bool = False,
    ) -> str:
        """Generate a completion for ``prompt``.

        Args:
            prompt: Full prompt text.
            temperature: Sampling temperature.
            json_output: Ask the provider for a JSON response body.
        """
        ...

from typing import Protocol


class LLMProvider(Protocol):
    """A protocol for LLM providers."""

    async def generate(self, prompt: str) -> str:
        """
        Sends a single prompt and returns the text of the reply.

        Returns:
            The reply text, or an empty string when the model returned none.

        Raises:
            ProviderError: On transport or API errors.
        """
        ...

    async def aclose(self) -> None:
        ...

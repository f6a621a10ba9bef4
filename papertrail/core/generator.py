import json
import random
from typing import Optional

from pydantic import ValidationError

from papertrail.config.models import Config
from papertrail.core.contracts.models import AnalysisRecord, GeneratedText
from papertrail.core.contracts.provider import LLMProvider
from papertrail.core.llm.router import get_provider
from papertrail.core.templates import TemplateRenderer
from papertrail.utils.errors import EmptyResponseError, GenerationError, MalformedResponseError
from papertrail.utils.logger import logger

ADJECTIVES = ("Robust", "Swift", "Elegant", "Dynamic", "Stable", "Vivid", "Clear", "Bold")


def generate_stub(analysis: AnalysisRecord, rng: Optional[random.Random] = None) -> GeneratedText:
    """Deterministic offline rendering of an analysis, used in tests and dry runs."""
    adjective = (rng or random).choice(ADJECTIVES)
    filenames = ", ".join(f.filename for f in analysis.files) or "no files"
    stats = analysis.stats
    message = (
        f"Modified files: {filenames}. "
        f"Changes include {stats.added} additions and {stats.deleted} deletions. "
        f"This update improves functionality. [{adjective}]"
    )
    summary = f"Updated {stats.total} files with {stats.added} additions."
    return GeneratedText(message=message, summary=summary)


def parse_reply(text: Optional[str]) -> GeneratedText:
    """
    Parses the provider reply as a ``{"message": ..., "summary": ...}`` object.

    Raises:
        EmptyResponseError: If there is no text.
        MalformedResponseError: If the text is not such an object.
    """
    if not text or not text.strip():
        raise EmptyResponseError("No response from the language model")
    try:
        return GeneratedText.model_validate_json(text.strip())
    except ValidationError as e:
        raise MalformedResponseError(f"Reply is not a valid message/summary object: {e}") from e


class MessageGenerator:
    """
    Turns an analysis record into a commit message and a one-line summary.
    """

    def __init__(
        self,
        config: Config,
        renderer: Optional[TemplateRenderer] = None,
        provider: Optional[LLMProvider] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.renderer = renderer or TemplateRenderer(config.formatter.template_dir)
        self._provider = provider
        self._rng = rng

    @property
    def stub(self) -> bool:
        return self.config.generation.stub

    def create_prompt(self, analysis: AnalysisRecord) -> str:
        return self.renderer.render(
            self.config.formatter.prompt_template,
            analysis_json=json.dumps(analysis.model_dump(), indent=2),
        )

    async def generate(self, analysis: AnalysisRecord) -> GeneratedText:
        """
        Generates the text, offline in stub mode or with one provider call.

        Raises:
            GenerationError: Any failure of the live path, with the message
                prefixed "LLM generation failed:" and the cause chained.
        """
        if self.stub:
            logger.info("Stub mode: generating message without calling the language model.")
            return generate_stub(analysis, self._rng)

        try:
            prompt = self.create_prompt(analysis)
            logger.debug(f"Generated prompt for LLM:\n{prompt}")
            provider = self._provider or get_provider(self.config.model)
            owns_provider = self._provider is None
            try:
                logger.info(f"Calling LLM provider '{self.config.model.provider}' ({self.config.model.name})...")
                reply = await provider.generate(prompt)
            finally:
                if owns_provider:
                    await provider.aclose()
            logger.debug(f"Raw LLM reply: {reply!r}")
            return parse_reply(reply)
        except Exception as e:
            raise GenerationError(f"LLM generation failed: {e}") from e

from typing import Any, Optional

# Importing the packages registers their components.
import papertrail.core.backends  # noqa: F401
import papertrail.core.sources  # noqa: F401

from papertrail.config.models import Config
from papertrail.core.amend import amend
from papertrail.core.appender import append
from papertrail.core.analysis import analyze
from papertrail.core.contracts.backend import Backend
from papertrail.core.contracts.models import AnalysisRecord, CommitDiff, GeneratedText
from papertrail.core.contracts.source import DiffSource
from papertrail.core.generator import MessageGenerator
from papertrail.core.registry import backend_registry, source_registry
from papertrail.core.templates import TemplateRenderer
from papertrail.utils.actions import RunContext
from papertrail.utils.errors import ConfigError
from papertrail.utils.github import GitHubClient
from papertrail.utils.logger import logger


class PapertrailPipeline:
    """
    Documents one commit: fetch its diff, analyze it, generate the text and
    record it. Stages run one after another; nothing is retried.
    """

    def __init__(self, config: Config, context: RunContext, generator: Optional[MessageGenerator] = None):
        self.config = config
        self.context = context
        self.renderer = TemplateRenderer(config.formatter.template_dir)
        self.generator = generator or MessageGenerator(config, renderer=self.renderer)
        self._github: Optional[GitHubClient] = None

    def _github_client(self) -> GitHubClient:
        if self._github is None:
            if not self.context.repository:
                raise ConfigError("No repository configured; set GITHUB_REPOSITORY or pass --repository.")
            self._github = GitHubClient(self.context.repository, self.config.hosting)
        return self._github

    def _create(self, registry, name: str, **options: Any):
        try:
            cls = registry.get(name)
        except KeyError as e:
            raise ConfigError(str(e.args[0])) from e
        github = self._github_client() if getattr(cls, "requires_github", False) else None
        try:
            return cls(self.context, github, **options)
        except TypeError as e:
            raise ConfigError(f"Invalid options for '{name}': {e}") from e

    def create_source(self) -> DiffSource:
        return self._create(source_registry, self.config.source.type, **self.config.source.options)

    def create_backend(self) -> Backend:
        output = self.config.output
        options = {"remote": output.remote, "push": output.push} if output.backend == "local" else {}
        return self._create(backend_registry, output.backend, **options)

    async def fetch(self) -> CommitDiff:
        return await self.create_source().fetch()

    async def build_analysis(self) -> AnalysisRecord:
        """Fetches the commit and returns its analysis without generating anything."""
        try:
            diff = await self.fetch()
            return analyze(diff.files, diff.commit)
        finally:
            await self.aclose()

    async def run(self, dry_run: bool = False) -> GeneratedText:
        """
        Runs all stages and returns the generated text.

        Args:
            dry_run: Generate but do not write the log or rewrite the commit.
        """
        try:
            diff = await self.fetch()
            analysis = analyze(diff.files, diff.commit)
            logger.debug(f"Analysis: {analysis.model_dump_json(indent=2)}")

            generated = await self.generator.generate(analysis)
            logger.debug(f"Generated: message={generated.message!r}, summary={generated.summary!r}")

            if dry_run:
                logger.info("Dry run: nothing is written.")
            elif self.config.output.mode == "amend":
                await amend(
                    diff.commit,
                    generated.message,
                    self.create_backend(),
                    allow_force_push=self.config.output.allow_force_push,
                )
            else:
                await append(
                    self.config.output.path,
                    diff.commit.sha,
                    generated.message,
                    generated.summary,
                    self.create_backend(),
                    timestamp=diff.commit.timestamp or self.context.head_timestamp,
                    header=self.config.output.header,
                    renderer=self.renderer,
                    template=self.config.formatter.entry_template,
                    commit_message=self.config.output.commit_message,
                )
            logger.success("Papertrail run completed.")
            return generated
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._github is not None:
            await self._github.aclose()
            self._github = None

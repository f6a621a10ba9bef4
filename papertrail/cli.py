import asyncio
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from papertrail.config.logic import load_and_merge_configs
from papertrail.config.models import Config
from papertrail.core.pipeline import PapertrailPipeline
from papertrail.utils.actions import RunContext, error_annotation, in_actions, load_context, set_output
from papertrail.utils.errors import PapertrailError
from papertrail.utils.logger import logger, setup_logger


def apply_cli_overrides(
    config: Config,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    source: Optional[str] = None,
    backend: Optional[str] = None,
    path: Optional[str] = None,
    mode: Optional[str] = None,
    stub: bool = False,
    allow_force_push: bool = False,
) -> Config:
    """Applies CLI options on top of the loaded configuration."""
    if provider:
        config.model.provider = provider
        logger.info(f"Using provider override: {provider}")
    if model:
        config.model.name = model
        logger.info(f"Using model override: {model}")
    if source:
        config.source.type = source
    if backend:
        config.output.backend = backend
    if path:
        config.output.path = path
    if mode:
        config.output.mode = mode
    if stub:
        config.generation.stub = True
    if allow_force_push:
        config.output.allow_force_push = True
    return config


def apply_context_overrides(
    context: RunContext,
    repository: Optional[str] = None,
    sha: Optional[str] = None,
    base: Optional[str] = None,
    ref: Optional[str] = None,
) -> RunContext:
    updates = {
        key: value
        for key, value in {"repository": repository, "sha": sha, "before": base, "ref": ref}.items()
        if value
    }
    return context.model_copy(update=updates)


def fail(ctx: click.Context, console: Console, message: str) -> None:
    if in_actions():
        error_annotation(f"Action failed: {message}")
    console.print(f"[bold red]Action failed:[/bold red] {message}")
    ctx.exit(1)


COMMIT_OPTIONS = [
    click.option("-c", "--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to a custom configuration file"),
    click.option("--repository", type=str, help="Repository as owner/repo (default: $GITHUB_REPOSITORY)"),
    click.option("--sha", type=str, help="Commit to document (default: $GITHUB_SHA, or HEAD)"),
    click.option("--base", type=str, help="Base commit for the compare source (default: the push event's 'before')"),
    click.option("--ref", type=str, help="Branch ref (default: $GITHUB_REF)"),
    click.option("--source", type=str, help="Override the diff source (commit, compare, local)"),
]


def commit_options(func):
    """Options shared by the commands that look up a commit."""
    for option in reversed(COMMIT_OPTIONS):
        func = option(func)
    return func


def prepare(config_path, repository, sha, base, ref, **overrides):
    config = load_and_merge_configs(custom_config_path=config_path)
    config = apply_cli_overrides(config, **overrides)
    context = apply_context_overrides(load_context(), repository, sha, base, ref)
    logger.debug(f"Context: {context.model_dump_json()}")
    return config, context


@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@click.pass_context
def cli(ctx, verbose: bool):
    """
    Documents commits with LLM-written messages, in a log file or in place.
    """
    setup_logger(log_level="DEBUG" if verbose else "INFO")
    ctx.obj = {"verbose": verbose}


@cli.command("run")
@commit_options
@click.option("--backend", type=str, help="Override where the result is written (github, local)")
@click.option("--path", type=str, help="Log file path inside the repository")
@click.option("--provider", type=str, help="Override the LLM provider (claude, openai, gemini)")
@click.option("--model", type=str, help="Override the LLM model name")
@click.option("--stub", is_flag=True, default=False, help="Generate offline without calling the LLM")
@click.option("--mode", type=click.Choice(["append", "amend"]), help="Append to the log file, or amend the commit itself")
@click.option("--allow-force-push", is_flag=True, default=False, help="Allow amend mode to force-update the branch")
@click.option("--dry-run", is_flag=True, default=False, help="Generate the text but write nothing")
@click.pass_context
def run(ctx, config_path, repository, sha, base, ref, source, backend, path, provider, model, stub, mode, allow_force_push, dry_run):
    """
    Documents one commit.
    """
    console = Console()
    try:
        config, context = prepare(
            config_path, repository, sha, base, ref,
            provider=provider, model=model, source=source, backend=backend,
            path=path, mode=mode, stub=stub, allow_force_push=allow_force_push,
        )
        generated = asyncio.run(PapertrailPipeline(config, context).run(dry_run=dry_run))
    except PapertrailError as e:
        logger.opt(exception=e).error(f"Run failed: {e}")
        fail(ctx, console, str(e))
        return
    except Exception as e:
        logger.opt(exception=e).error(f"Unexpected error: {e}")
        fail(ctx, console, f"Unexpected error: {e}")
        return

    if set_output("summary", generated.summary):
        logger.debug("Wrote the summary to the step outputs.")

    console.print(Panel(
        f"[bold]{escape(generated.summary)}[/bold]\n\n{escape(generated.message)}",
        title="[bold cyan]Generated commit documentation[/bold cyan]",
        border_style="cyan",
        expand=False,
    ))
    if dry_run:
        console.print("\n[yellow]Dry run: nothing was written.[/yellow]")


@cli.command("analyze")
@commit_options
@click.pass_context
def analyze_command(ctx, config_path, repository, sha, base, ref, source):
    """
    Prints the analysis of one commit as JSON.
    """
    console = Console()
    try:
        config, context = prepare(config_path, repository, sha, base, ref, source=source)
        analysis = asyncio.run(PapertrailPipeline(config, context).build_analysis())
    except PapertrailError as e:
        logger.opt(exception=e).error(f"Analysis failed: {e}")
        fail(ctx, console, str(e))
        return
    except Exception as e:
        logger.opt(exception=e).error(f"Unexpected error: {e}")
        fail(ctx, console, f"Unexpected error: {e}")
        return

    click.echo(analysis.model_dump_json(indent=2))


def main():
    cli()


if __name__ == "__main__":
    main()

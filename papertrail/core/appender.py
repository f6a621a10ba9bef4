"""
Appends generated commit documentation to the running log file.
"""
from datetime import datetime, timezone
from typing import Optional

from papertrail.config.models import DEFAULT_HEADER
from papertrail.core.contracts.backend import Backend
from papertrail.core.templates import TemplateRenderer
from papertrail.utils.errors import ConflictError, UpdateError
from papertrail.utils.logger import logger

ENTRY_TEMPLATE = "entry.md.j2"
DEFAULT_COMMIT_MESSAGE = "docs: append analysis for commit {short_sha} [skip ci]"
SECTION_SEPARATOR = "\n\n"
CONFLICT_MESSAGE = "Conflict updating file; possible concurrent edit. Retry or check branch."


def format_timestamp(timestamp: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """
    Renders ``timestamp`` (ISO-8601) in UTC as ``YYYY-MM-DD HH:MM``. Falls back
    to the current time when it is missing or unparsable.
    """
    moment = None
    if timestamp:
        try:
            moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Ignoring unparsable commit timestamp: {timestamp!r}")
    if moment is None:
        moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M")


def render_entry(
    commit_sha: str,
    message: str,
    summary: str,
    timestamp: str,
    renderer: Optional[TemplateRenderer] = None,
    template: str = ENTRY_TEMPLATE,
) -> str:
    renderer = renderer or TemplateRenderer()
    return renderer.render(
        template,
        short_sha=commit_sha[:7],
        timestamp=timestamp,
        summary=summary,
        message=message,
    )


async def append(
    path: str,
    commit_sha: str,
    message: str,
    summary: str,
    backend: Backend,
    *,
    timestamp: Optional[str] = None,
    header: str = DEFAULT_HEADER,
    renderer: Optional[TemplateRenderer] = None,
    template: str = ENTRY_TEMPLATE,
    commit_message: str = DEFAULT_COMMIT_MESSAGE,
) -> None:
    """
    Appends one entry for ``commit_sha`` to the log at ``path``.

    The write is conditional on the revision read just before, so a concurrent
    writer makes this call fail instead of being overwritten. There is no retry.

    Args:
        path: Log file path inside the repository.
        commit_sha: The documented commit; its first 7 characters head the entry.
        message: Detailed message.
        summary: One-sentence summary.
        backend: Where the file is read and written.
        timestamp: The commit's own ISO-8601 timestamp, if known.
        header: Content of a log file that does not exist yet.

    Raises:
        ConflictError: The file changed between read and write.
        UpdateError: Any other failure.
    """
    try:
        existing = await backend.read_file(path)
        if existing is None:
            logger.info(f"{path} does not exist yet; it will be created.")
            content, revision = header, None
        else:
            content, revision = existing.content, existing.revision

        section = render_entry(
            commit_sha, message, summary, format_timestamp(timestamp), renderer=renderer, template=template
        )
        await backend.write_file(
            path,
            content + SECTION_SEPARATOR + section,
            commit_message.format(short_sha=commit_sha[:7], sha=commit_sha),
            revision,
        )
    except ConflictError as e:
        raise ConflictError(CONFLICT_MESSAGE) from e
    except Exception as e:
        raise UpdateError(f"File update failed: {e}") from e
    logger.info(f"Appended analysis for commit {commit_sha[:7]} to {path}")

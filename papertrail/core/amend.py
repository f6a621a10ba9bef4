from papertrail.core.contracts.backend import Backend
from papertrail.core.contracts.models import CommitInfo
from papertrail.utils.errors import InputError, UpdateError
from papertrail.utils.logger import logger


def combine_messages(generated: str, original: str) -> str:
    return f"{generated} (was: {original.strip()})"


async def amend(commit: CommitInfo, generated_message: str, backend: Backend, *, allow_force_push: bool = False) -> str:
    """
    Replaces the message of ``commit`` with the generated one and force-updates
    the branch. Returns the SHA of the rewritten commit.

    Raises:
        InputError: Force pushing was not explicitly allowed.
        UpdateError: The commit could not be rewritten.
    """
    if not allow_force_push:
        raise InputError(
            "Amend mode rewrites published history and needs an explicit opt-in "
            "(output.allow_force_push or --allow-force-push)."
        )

    new_message = combine_messages(generated_message, commit.message)
    logger.warning(f"Rewriting the message of {commit.sha[:7]} and force-updating the branch.")
    try:
        return await backend.rewrite_commit_message(commit.sha, new_message)
    except InputError:
        raise
    except Exception as e:
        raise UpdateError(f"Commit amend failed: {e}") from e

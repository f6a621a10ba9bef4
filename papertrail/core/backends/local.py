import asyncio
import hashlib
from pathlib import Path
from typing import Optional

from papertrail.core.contracts.backend import Backend, StoredFile
from papertrail.core.registry import backend_registry
from papertrail.utils import git
from papertrail.utils.actions import RunContext
from papertrail.utils.errors import ConflictError, InputError
from papertrail.utils.logger import logger


def content_revision(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


@backend_registry.register("local")
class LocalBackend(Backend):
    """
    Keeps the log in the working tree and rewrites commits with the git CLI.
    Revisions are SHA-256 digests of the file content.
    """

    requires_github = False

    def __init__(
        self,
        context: RunContext,
        github=None,
        root: Optional[str] = None,
        branch: Optional[str] = None,
        remote: str = "origin",
        push: bool = True,
    ):
        self.root = Path(root or ".")
        self.branch = branch or context.branch
        self.remote = remote
        self.push = push

    def _read(self, path: str) -> Optional[StoredFile]:
        file_path = self.root / path
        if not file_path.is_file():
            return None
        content = file_path.read_text(encoding="utf-8")
        return StoredFile(content=content, revision=content_revision(content))

    async def read_file(self, path: str) -> Optional[StoredFile]:
        return self._read(path)

    async def write_file(self, path: str, content: str, commit_message: str, revision: Optional[str]) -> None:
        current = self._read(path)
        current_revision = current.revision if current else None
        if current_revision != revision:
            raise ConflictError(f"{path} changed since it was read (expected {revision}, found {current_revision})")
        file_path = self.root / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        logger.info(f"Updated {file_path}")

    async def rewrite_commit_message(self, commit_sha: str, message: str) -> str:
        cwd = str(self.root)
        head_sha, _ = await asyncio.to_thread(git.resolve_commit, "HEAD", cwd)
        if head_sha != commit_sha:
            raise InputError(f"Only the checked-out HEAD can be amended locally; HEAD is {head_sha[:7]}, not {commit_sha[:7]}.")
        new_sha = await asyncio.to_thread(git.amend_head_message, message, cwd)
        if self.push:
            branch = self.branch or await asyncio.to_thread(git.get_current_branch_name, cwd)
            await asyncio.to_thread(git.force_push, self.remote, branch, cwd)
            logger.info(f"Force-pushed {new_sha[:7]} to {self.remote}/{branch}")
        return new_sha

from typing import Optional

from papertrail.core.contracts.backend import Backend, StoredFile
from papertrail.core.registry import backend_registry
from papertrail.utils.actions import RunContext
from papertrail.utils.errors import ConflictError, HostingAPIError, InputError
from papertrail.utils.github import GitHubClient
from papertrail.utils.logger import logger


@backend_registry.register("github")
class GitHubBackend(Backend):
    """
    Keeps the log in the repository through the contents API and rewrites
    commits through the git data API. Revisions are blob SHAs.
    """

    requires_github = True

    def __init__(self, context: RunContext, github: GitHubClient, branch: Optional[str] = None):
        self.github = github
        self.branch = branch or context.branch

    async def read_file(self, path: str) -> Optional[StoredFile]:
        data = await self.github.get_file(path, ref=self.branch)
        if data is None:
            return None
        return StoredFile(content=data["content"], revision=data["sha"])

    async def write_file(self, path: str, content: str, commit_message: str, revision: Optional[str]) -> None:
        try:
            await self.github.put_file(path, content, commit_message, branch=self.branch, sha=revision)
        except HostingAPIError as e:
            # A create racing another create is rejected as 422 for the missing sha
            if e.status_code == 409 or (e.status_code == 422 and revision is None):
                raise ConflictError(str(e)) from e
            raise
        logger.info(f"Updated {path} on {self.branch or 'the default branch'}")

    async def rewrite_commit_message(self, commit_sha: str, message: str) -> str:
        if not self.branch:
            raise InputError("A branch is required to rewrite a commit; none was found in the run context.")
        tip = await self.github.get_ref(self.branch)
        tip_sha = (tip.get("object") or {}).get("sha")
        if tip_sha != commit_sha:
            raise ConflictError(
                f"{self.branch} is at {str(tip_sha)[:7]}, not {commit_sha[:7]}; only the branch tip can be amended."
            )
        original = await self.github.get_git_commit(commit_sha)
        created = await self.github.create_git_commit(
            message=message,
            tree=original["tree"]["sha"],
            parents=[p["sha"] for p in original.get("parents", [])],
        )
        await self.github.update_ref(self.branch, created["sha"], force=True)
        logger.info(f"Rewrote {commit_sha[:7]} as {created['sha'][:7]} and force-updated {self.branch}")
        return created["sha"]

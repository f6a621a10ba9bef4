from typing import Any, Mapping, Optional

from pydantic import ValidationError

from papertrail.core.contracts.models import ChangedFile, CommitDiff, CommitInfo
from papertrail.core.contracts.source import DiffSource
from papertrail.core.registry import source_registry
from papertrail.utils.actions import RunContext
from papertrail.utils.errors import FetchError, HostingAPIError
from papertrail.utils.github import ZERO_SHA, GitHubClient
from papertrail.utils.logger import logger


def commit_info_from_api(data: Mapping[str, Any]) -> CommitInfo:
    """Converts a REST commit object (from /commits or /compare) to a CommitInfo."""
    commit = data.get("commit") or {}
    committer = commit.get("committer") or commit.get("author") or {}
    return CommitInfo(
        sha=data["sha"],
        message=commit.get("message", ""),
        timestamp=committer.get("date"),
        parents=[p["sha"] for p in data.get("parents") or []],
    )


def _changed_files(data: Mapping[str, Any]) -> list:
    return [ChangedFile.model_validate(f) for f in data.get("files") or []]


@source_registry.register("commit")
class CommitSource(DiffSource):
    """
    Single-commit lookup: the files of one commit against its first parent.
    """

    requires_github = True

    def __init__(self, context: RunContext, github: GitHubClient, sha: Optional[str] = None):
        self.github = github
        self.sha = sha or context.sha

    async def fetch(self) -> CommitDiff:
        logger.info(f"Fetching commit {self.sha} from GitHub...")
        try:
            data = await self.github.get_commit(self.sha)
            diff = CommitDiff(commit=commit_info_from_api(data), files=_changed_files(data))
        except (HostingAPIError, KeyError, ValidationError) as e:
            raise FetchError(f"Failed to fetch commit {self.sha}: {e}") from e
        logger.debug(f"Fetched {len(diff.files)} files, parents={diff.commit.parents}")
        return diff


@source_registry.register("compare")
class CompareSource(DiffSource):
    """
    Range comparison ``base...head``, as pushed in one event. Falls back to the
    single-commit lookup when there is no usable base (first push of a branch).
    """

    requires_github = True

    def __init__(
        self,
        context: RunContext,
        github: GitHubClient,
        base: Optional[str] = None,
        head: Optional[str] = None,
    ):
        self.context = context
        self.github = github
        self.base = base or context.before
        self.head = head or context.sha

    async def fetch(self) -> CommitDiff:
        if not self.base or self.base == ZERO_SHA:
            logger.info("No base commit for comparison; using single-commit lookup.")
            return await CommitSource(self.context, self.github, sha=self.head).fetch()

        logger.info(f"Comparing {self.base}...{self.head} on GitHub...")
        try:
            data = await self.github.compare(self.base, self.head)
            commits = data.get("commits") or []
            if commits and commits[-1].get("sha") == self.head:
                commit = commit_info_from_api(commits[-1])
            else:
                commit = commit_info_from_api(await self.github.get_commit(self.head))
            diff = CommitDiff(commit=commit, files=_changed_files(data))
        except (HostingAPIError, KeyError, ValidationError) as e:
            raise FetchError(f"Failed to compare {self.base}...{self.head}: {e}") from e
        logger.debug(
            f"Compared {data.get('total_commits', len(commits))} commits: "
            f"{len(diff.files)} files, status={data.get('status')}"
        )
        return diff

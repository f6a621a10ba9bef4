from typing import Optional

from unidiff import PatchSet

from papertrail.core.contracts.models import ChangedFile, CommitDiff, CommitInfo
from papertrail.core.contracts.source import DiffSource
from papertrail.core.registry import source_registry
from papertrail.utils import git
from papertrail.utils.actions import RunContext
from papertrail.utils.errors import FetchError
from papertrail.utils.logger import logger


def _strip_prefix(path: str) -> str:
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def _status(patched_file) -> str:
    if patched_file.is_added_file:
        return "added"
    if patched_file.is_removed_file:
        return "removed"
    if patched_file.is_rename:
        return "renamed"
    return "modified"


def changed_files_from_diff(diff_text: str) -> list:
    """Splits a multi-file unified diff into ChangedFile records."""
    files = []
    for patched_file in PatchSet.from_string(diff_text):
        patch = "".join(str(hunk) for hunk in patched_file)
        files.append(ChangedFile(
            filename=_strip_prefix(patched_file.source_file if patched_file.is_removed_file else patched_file.target_file),
            status=_status(patched_file),
            additions=patched_file.added,
            deletions=patched_file.removed,
            patch=patch or None,
            previous_filename=_strip_prefix(patched_file.source_file) if patched_file.is_rename else None,
        ))
    return files


@source_registry.register("local")
class LocalGitSource(DiffSource):
    """
    Reads the commit from a local checkout with the git CLI.
    """

    requires_github = False

    def __init__(self, context: RunContext, github=None, sha: Optional[str] = None, repo_dir: Optional[str] = None):
        self.rev = sha or context.sha
        self.repo_dir = repo_dir

    async def fetch(self) -> CommitDiff:
        logger.info(f"Reading commit {self.rev} from the local repository...")
        if not git.is_git_repository(cwd=self.repo_dir):
            raise FetchError(f"Not a Git repository: {self.repo_dir or '.'}")
        try:
            sha, parents = git.resolve_commit(self.rev, cwd=self.repo_dir)
            commit = CommitInfo(
                sha=sha,
                message=git.get_commit_message(sha, cwd=self.repo_dir),
                timestamp=git.get_commit_timestamp(sha, cwd=self.repo_dir),
                parents=parents,
            )
            files = changed_files_from_diff(git.get_commit_diff(sha, parents, cwd=self.repo_dir))
        except Exception as e:
            raise FetchError(f"Failed to read commit {self.rev}: {e}") from e
        return CommitDiff(commit=commit, files=files)

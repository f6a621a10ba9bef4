import subprocess
from typing import List, Optional, Tuple

from papertrail.utils.errors import PapertrailError


class GitCommandError(PapertrailError):
    """Raised when a git command fails or git is unavailable."""
    pass


def run_git(args: List[str], cwd: Optional[str] = None) -> str:
    """
    Runs ``git <args>`` and returns its standard output.

    Raises:
        GitCommandError: If git is missing or exits with a non-zero status.
    """
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            check=True,
            encoding="utf-8",
            cwd=cwd,
        )
    except FileNotFoundError:
        raise GitCommandError("Git is not installed or not in PATH.")
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise GitCommandError(f"git {' '.join(args)} failed: {stderr}") from e
    return result.stdout


def is_git_repository(cwd: Optional[str] = None) -> bool:
    """Checks if the directory is inside a Git work tree."""
    try:
        return run_git(["rev-parse", "--is-inside-work-tree"], cwd=cwd).strip() == "true"
    except GitCommandError:
        return False


def resolve_commit(rev: str, cwd: Optional[str] = None) -> Tuple[str, List[str]]:
    """Returns the full SHA of ``rev`` and the SHAs of its parents."""
    line = run_git(["rev-list", "--parents", "-n", "1", rev], cwd=cwd).strip()
    if not line:
        raise GitCommandError(f"Unknown revision: {rev}")
    sha, *parents = line.split()
    return sha, parents


def get_commit_message(sha: str, cwd: Optional[str] = None) -> str:
    return run_git(["log", "-1", "--format=%B", sha], cwd=cwd).strip()


def get_commit_timestamp(sha: str, cwd: Optional[str] = None) -> str:
    """Committer date in strict ISO-8601."""
    return run_git(["log", "-1", "--format=%cI", sha], cwd=cwd).strip()


def get_commit_diff(sha: str, parents: List[str], cwd: Optional[str] = None) -> str:
    """
    Unified diff of ``sha`` against its first parent, with rename detection.
    A root commit is diffed against the empty tree.
    """
    if parents:
        return run_git(["diff", "-M", parents[0], sha], cwd=cwd)
    return run_git(["show", "-M", "--format=", "--patch", sha], cwd=cwd)


def get_current_branch_name(cwd: Optional[str] = None) -> str:
    return run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd).strip()


def amend_head_message(message: str, cwd: Optional[str] = None) -> str:
    """Rewrites the message of HEAD and returns the new SHA."""
    run_git(["commit", "--amend", "--only", "--allow-empty", "-m", message], cwd=cwd)
    return run_git(["rev-parse", "HEAD"], cwd=cwd).strip()


def force_push(remote: str, branch: str, cwd: Optional[str] = None) -> None:
    run_git(["push", "--force-with-lease", remote, f"HEAD:{branch}"], cwd=cwd)

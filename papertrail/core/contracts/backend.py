from typing import Optional, Protocol

from pydantic import BaseModel


class StoredFile(BaseModel):
    content: str
    revision: str  # opaque token checked on write


class Backend(Protocol):
    """Where the log file lives and where commits can be rewritten."""

    async def read_file(self, path: str) -> Optional[StoredFile]:
        """Returns the file, or None when it does not exist yet."""
        ...

    async def write_file(self, path: str, content: str, commit_message: str, revision: Optional[str]) -> None:
        """
        Replaces the file content. ``revision`` must match the current file,
        or be None when creating it.

        Raises:
            ConflictError: If the file changed since ``revision`` was read.
        """
        ...

    async def rewrite_commit_message(self, commit_sha: str, message: str) -> str:
        """Replaces the message of ``commit_sha`` at the branch tip and returns the new SHA."""
        ...

from typing import Protocol

from .models import CommitDiff


class DiffSource(Protocol):
    """Acquires the commit to document together with its changed files."""

    async def fetch(self) -> CommitDiff:
        """
        Raises:
            FetchError: If the commit or its diff cannot be retrieved.
        """
        ...

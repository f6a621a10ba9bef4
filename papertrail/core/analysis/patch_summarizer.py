"""
Renders a single file's unified-diff patch as a short, bounded description.
"""
from typing import List, Optional

from unidiff import PatchSet

from papertrail.utils.logger import logger

MAX_HUNKS = 3
RAW_SNIPPET_CHARS = 500

NO_PATCH = "No patch available."
EMPTY_PATCH = "Empty patch."

# The hosting API hands out per-file patches that start at the first hunk.
_SYNTHETIC_HEADER = "--- a/file\n+++ b/file\n"


def _line_range(start: int, length: int) -> str:
    return f"{start}-{start + max(length, 1) - 1}"


def _line_tag(line) -> Optional[str]:
    if line.is_added:
        return "add"
    if line.is_removed:
        return "delete"
    if line.is_context:
        return "context"
    return None


def _render_hunk(hunk) -> str:
    tags = [tag for tag in (_line_tag(line) for line in hunk) if tag]
    return (
        f"Hunk: lines {_line_range(hunk.source_start, hunk.source_length)}"
        f" -> {_line_range(hunk.target_start, hunk.target_length)}."
        f" Changes: {', '.join(tags)}"
    )


def _parse_hunks(patch: str) -> List:
    text = patch if patch.startswith(("--- ", "diff ")) else _SYNTHETIC_HEADER + patch
    patch_set = PatchSet.from_string(text)
    return [hunk for patched_file in patch_set for hunk in patched_file]


def summarize(patch: Optional[str]) -> str:
    """
    Describes the first hunks of a patch.

    Args:
        patch: Unified-diff text for one file, or None when the host did not
            supply one (binary files, very large diffs).

    Returns:
        A non-empty description. Hunks past the third are dropped; text that
        cannot be parsed is returned as a truncated raw snippet instead.
    """
    if not patch:
        return NO_PATCH

    try:
        hunks = _parse_hunks(patch)
        rendered = "; ".join(_render_hunk(hunk) for hunk in hunks[:MAX_HUNKS])
    except Exception as e:
        logger.debug(f"Could not parse patch, falling back to raw snippet: {e}")
        return f"Raw patch snippet: {patch[:RAW_SNIPPET_CHARS]}..."

    return rendered or EMPTY_PATCH

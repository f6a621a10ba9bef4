from typing import Any, Iterable, Mapping, Optional, Union

from papertrail.core.analysis.patch_summarizer import summarize
from papertrail.core.contracts.models import (
    AnalysisRecord,
    AnalysisStats,
    ChangedFile,
    CommitInfo,
    FileChangeSummary,
)

NO_FILES_SUMMARY = "No files changed in this commit."

FileLike = Union[ChangedFile, Mapping[str, Any]]
CommitLike = Union[CommitInfo, Mapping[str, Any], None]


def _parent_count(commit_meta: CommitLike) -> int:
    if commit_meta is None:
        return 0
    if isinstance(commit_meta, Mapping):
        parents = commit_meta.get("parents")
    else:
        parents = getattr(commit_meta, "parents", None)
    return len(parents) if parents else 0


def _as_changed_file(file: FileLike) -> ChangedFile:
    if isinstance(file, ChangedFile):
        return file
    return ChangedFile.model_validate(file)


def analyze(files: Optional[Iterable[FileLike]], commit_meta: CommitLike = None) -> AnalysisRecord:
    """
    Aggregates the changed files of a commit into an analysis record.

    Args:
        files: Changed files in the order reported by the host. Plain mappings
            are accepted; missing addition/deletion counts default to 0.
        commit_meta: The commit (or a mapping with a ``parents`` list). A commit
            with more than one parent is a merge.

    Returns:
        The analysis record. File order is preserved.
    """
    changed = [_as_changed_file(f) for f in (files or [])]
    if not changed:
        return AnalysisRecord(summary=NO_FILES_SUMMARY)

    added = 0
    deleted = 0
    summaries = []
    for file in changed:
        added += file.additions
        deleted += file.deletions
        summaries.append(FileChangeSummary(
            filename=file.filename,
            status=file.status,
            changes=f"{file.additions} lines added, {file.deletions} lines deleted. {summarize(file.patch)}",
        ))

    is_merge = _parent_count(commit_meta) > 1
    merge_clause = "This is a merge commit. " if is_merge else ""
    filenames = ", ".join(s.filename for s in summaries)
    summary = (
        f"Commit changed {len(changed)} files ({added} added, {deleted} deleted lines). "
        f"{merge_clause}Files: {filenames}"
    )

    return AnalysisRecord(
        summary=summary,
        files=summaries,
        stats=AnalysisStats(added=added, deleted=deleted, total=len(changed)),
        is_merge=is_merge,
    )

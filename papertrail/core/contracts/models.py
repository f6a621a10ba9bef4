from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FileStatus = Literal["added", "modified", "removed", "renamed", "copied", "changed", "unchanged"]


class ChangedFile(BaseModel):
    """One file touched by a commit, as reported by the hosting API."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    filename: str
    status: FileStatus = "modified"
    additions: int = Field(0, ge=0)
    deletions: int = Field(0, ge=0)
    patch: Optional[str] = None
    previous_filename: Optional[str] = None

    @field_validator("additions", "deletions", mode="before")
    @classmethod
    def _missing_count_is_zero(cls, value):
        return 0 if value is None else value


class FileChangeSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    status: str
    changes: str


class AnalysisStats(BaseModel):
    added: int = 0
    deleted: int = 0
    total: int = 0


class AnalysisRecord(BaseModel):
    """Structured summary of a commit, consumed by the message generator."""

    summary: str
    files: List[FileChangeSummary] = []
    stats: AnalysisStats = Field(default_factory=AnalysisStats)
    is_merge: bool = False


class GeneratedText(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    message: str = Field(min_length=1)
    summary: str = Field(min_length=1)


class CommitInfo(BaseModel):
    sha: str
    message: str = ""
    timestamp: Optional[str] = None  # ISO-8601
    parents: List[str] = []


class CommitDiff(BaseModel):
    commit: CommitInfo
    files: List[ChangedFile] = []

from papertrail.core.analysis.commit_analyzer import analyze
from papertrail.core.analysis.patch_summarizer import summarize

__all__ = ["analyze", "summarize"]

"""
Helpers for running inside GitHub Actions: the event context, step outputs
and workflow annotations.
"""
import json
import os
import uuid
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from papertrail.utils.logger import logger


class RunContext(BaseModel):
    repository: Optional[str] = None  # "owner/repo"
    sha: str = "HEAD"
    ref: Optional[str] = None
    before: Optional[str] = None
    head_timestamp: Optional[str] = None
    event_name: Optional[str] = None

    @property
    def branch(self) -> Optional[str]:
        if self.ref and self.ref.startswith("refs/heads/"):
            return self.ref[len("refs/heads/"):]
        return self.ref


def _read_event_payload(event_path: Optional[str]) -> Mapping[str, Any]:
    if not event_path:
        return {}
    try:
        with open(event_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read event payload at {event_path}: {e}")
        return {}


def load_context(environ: Optional[Mapping[str, str]] = None) -> RunContext:
    """Builds the run context from the GitHub Actions environment variables."""
    env = os.environ if environ is None else environ
    payload = _read_event_payload(env.get("GITHUB_EVENT_PATH"))
    head_commit = payload.get("head_commit") or {}
    return RunContext(
        repository=env.get("GITHUB_REPOSITORY"),
        sha=env.get("GITHUB_SHA") or "HEAD",
        ref=env.get("GITHUB_REF"),
        before=payload.get("before"),
        head_timestamp=head_commit.get("timestamp"),
        event_name=env.get("GITHUB_EVENT_NAME"),
    )


def in_actions() -> bool:
    return os.getenv("GITHUB_ACTIONS") == "true"


def set_output(name: str, value: str) -> bool:
    """
    Exposes ``value`` as a step output. Returns False when not running in a
    workflow step (no ``GITHUB_OUTPUT`` file).
    """
    output_path = os.getenv("GITHUB_OUTPUT")
    if not output_path:
        return False
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(output_path, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    return True


def error_annotation(message: str) -> None:
    # Workflow commands need %, CR and LF escaped.
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{escaped}", flush=True)

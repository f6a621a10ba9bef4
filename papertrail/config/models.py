from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_HEADER = "# Papertrail\n\nThis file tracks commit summaries and details."


class ModelConfig(BaseModel):
    provider: str = "claude"
    name: str = "claude-3-5-sonnet-20241022"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout_sec: int = 30
    max_tokens: int = Field(1024, gt=0)
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    parameters: Dict[str, Any] = Field(default_factory=dict)


class GenerationConfig(BaseModel):
    stub: bool = Field(False, description="Use the offline stub instead of calling the LLM")


class SourceConfig(BaseModel):
    type: str = Field("compare", description="How the changed files are acquired: commit, compare or local")
    options: Dict[str, Any] = Field(default_factory=dict)


class HostingConfig(BaseModel):
    api_url: str = "https://api.github.com"
    token: Optional[str] = None
    token_env_var: str = "GITHUB_TOKEN"
    timeout_sec: int = 20


class OutputConfig(BaseModel):
    mode: Literal["append", "amend"] = "append"
    backend: str = Field("github", description="Where the log lives and commits are rewritten: github or local")
    path: str = "papertrail.md"
    header: str = DEFAULT_HEADER
    commit_message: str = Field(
        "docs: append analysis for commit {short_sha} [skip ci]",
        description="Message of the commit that updates the log file",
    )
    allow_force_push: bool = Field(False, description="Required for amend mode, which rewrites published history")
    remote: str = "origin"
    push: bool = Field(True, description="Local backend only: push the amended commit")


class FormatterConfig(BaseModel):
    template_dir: Optional[str] = None
    prompt_template: str = "prompt.j2"
    entry_template: str = "entry.md.j2"


class Config(BaseModel):
    model: ModelConfig = Field(default_factory=ModelConfig, description="LLM settings")
    generation: GenerationConfig = Field(default_factory=GenerationConfig, description="Generation mode")
    source: SourceConfig = Field(default_factory=SourceConfig, description="Diff acquisition")
    hosting: HostingConfig = Field(default_factory=HostingConfig, description="Hosting API settings")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Where the result is recorded")
    formatter: FormatterConfig = Field(default_factory=FormatterConfig, description="Template settings")

from papertrail.core.llm import providers  # noqa: F401

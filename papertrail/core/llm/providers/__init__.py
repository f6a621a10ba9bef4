# Importing the modules registers the providers.
from papertrail.core.llm.providers import claude, gemini, openai  # noqa: F401

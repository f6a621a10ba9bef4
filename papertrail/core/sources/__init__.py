# Importing the modules registers the sources.
from papertrail.core.sources import github, local  # noqa: F401

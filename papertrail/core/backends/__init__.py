# Importing the modules registers the backends.
from papertrail.core.backends import github, local  # noqa: F401

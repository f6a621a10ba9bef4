"""
Defines custom exception classes for the application.
"""


class PapertrailError(Exception):
    """Base exception class for the papertrail application."""
    pass


class ConfigError(PapertrailError):
    """Raised when there is a configuration error."""
    pass


class InputError(PapertrailError):
    """Raised when a required input (e.g. a credential) is missing."""
    pass


class FetchError(PapertrailError):
    """Raised when the commit or its diff cannot be retrieved."""
    pass


class HostingAPIError(PapertrailError):
    """Raised by the hosting client when the API answers with an error status."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class ProviderError(PapertrailError):
    """Raised when an error occurs with an LLM provider."""
    pass


class GenerationError(PapertrailError):
    """Raised when the commit message could not be generated."""
    pass


class EmptyResponseError(GenerationError):
    """The provider replied without any text."""
    pass


class MalformedResponseError(GenerationError):
    """The provider reply is not a valid {"message", "summary"} object."""
    pass


class FormatterError(PapertrailError):
    """Raised when an error occurs while rendering a template."""
    pass


class ConflictError(PapertrailError):
    """Raised when the log file was modified concurrently."""
    pass


class UpdateError(PapertrailError):
    """Raised when the log file or the commit could not be updated."""
    pass

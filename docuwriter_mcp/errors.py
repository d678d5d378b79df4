"""Exception types shared by the client, the tool handlers and the server."""

from typing import Optional


class DocuWriterMCPError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(DocuWriterMCPError):
    """Required configuration (the API token) is missing or unusable."""


class ApiError(DocuWriterMCPError):
    """A DocuWriter.ai request failed.

    ``status`` is the HTTP status code for API errors and ``None`` for
    transport failures (timeouts, connection errors), where no response exists.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

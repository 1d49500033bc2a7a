from typing import Any, Dict, List, Optional


class RecraftError(Exception):
    """Base class for every error raised by recraft_mcp."""


class ValidationError(RecraftError):
    """Tool arguments failed their schema.

    ``issues`` keeps the per-field details, one dict per violation with the
    keys ``path``, ``message``, ``type`` and ``input``.
    """

    def __init__(self, message: str, issues: List[Dict[str, Any]]):
        super().__init__(message)
        self.message = message
        self.issues = issues


class UpstreamError(RecraftError):
    """The Recraft API rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MissingDataError(RecraftError):
    """The Recraft API accepted a request but returned nothing usable."""


class DiskSaveError(RecraftError):
    """An image could not be written to disk."""


class ConfigurationError(RecraftError):
    """Required environment configuration is missing or malformed."""


class UnknownToolError(RecraftError):
    pass


class ImageSourceError(RecraftError):
    """A local image given as tool input could not be read."""

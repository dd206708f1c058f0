from __future__ import annotations

from typing import Any, Optional

SAVE_FAILED_MESSAGE = "저장 실패 (Save failed)"


class EsstFormsError(RuntimeError):
    """
    Base class for every error raised by esstforms.
    """


class ConfigurationError(EsstFormsError):
    """
    Raised when the proxy cannot map a request onto a configured destination.
    """


class UnknownListType(ConfigurationError):
    """
    The list type is not recognized, or its destination URL is empty/unset.
    """

    def __init__(self, list_type: str) -> None:
        super().__init__(f'Unknown or unset sheet type: "{list_type}"')
        self.list_type = list_type


class UpstreamDecodeError(EsstFormsError):
    """
    The destination replied with a body that could not be decoded as a JSON object.

    Attributes:
        raw: Excerpt of the upstream body, already truncated for diagnostics.
    """

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.message = message
        self.raw = raw


class TransportError(EsstFormsError):
    """
    Network-level failure talking to the destination (DNS, refused, timeout...).
    """


class ApplicationError(EsstFormsError):
    """
    The destination explicitly reported `status: "error"`.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(EsstFormsError):
    """
    A required form field is empty. Never leaves the form flow.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


def error_envelope(message: str, **extra: Any) -> dict[str, Any]:
    return {"status": "error", "message": message, **extra}

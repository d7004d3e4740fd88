"""Error taxonomy for turn processing and tool execution."""

from __future__ import annotations

import re
from enum import Enum


class BookingAgentError(Exception):
    """Base class for errors raised by the booking agent."""


class Unauthorized(BookingAgentError):
    """No valid session for the caller. Ends the turn with 401."""


class ConversationNotFound(BookingAgentError):
    """The conversation belongs to another user. Ends the turn with 404."""


class MalformedInput(BookingAgentError):
    """Bad request payload, unsupported upload or oversize content. Ends the turn with 400."""


class UnsupportedAttachmentShape(MalformedInput):
    """Attachment has no usable reference for the active model provider."""


class ToolValidationError(BookingAgentError):
    """Tool arguments do not match the declared schema."""

    retryable = False

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name


class ToolExecutionError(BookingAgentError):
    """A tool handler failed. Reported back to the model as a tool error result."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class NotFound(ToolExecutionError):
    pass


class Unauthenticated(ToolExecutionError):
    pass


class PaymentNotVerified(ToolExecutionError):
    pass


class PersistenceError(BookingAgentError):
    """The persistence store failed to read or write."""


class ModelErrorKind(str, Enum):
    QUOTA_EXCEEDED = "QuotaExceeded"
    PERMISSION_DENIED = "PermissionDenied"
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    UNKNOWN = "Unknown"


_STATUS_BY_KIND: dict[ModelErrorKind, int] = {
    ModelErrorKind.QUOTA_EXCEEDED: 429,
    ModelErrorKind.PERMISSION_DENIED: 403,
    ModelErrorKind.UNSUPPORTED_FORMAT: 400,
    ModelErrorKind.UNKNOWN: 500,
}

_USER_MESSAGE_BY_KIND: dict[ModelErrorKind, str] = {
    ModelErrorKind.QUOTA_EXCEEDED: "The assistant is busy right now. Please try again later.",
    ModelErrorKind.PERMISSION_DENIED: "The assistant is not allowed to handle this request.",
    ModelErrorKind.UNSUPPORTED_FORMAT: "One of the attached files could not be processed.",
    ModelErrorKind.UNKNOWN: "Something went wrong while generating a response.",
}

# Checked in order; the first kind with a matching marker wins.
_MARKERS: tuple[tuple[ModelErrorKind, tuple[str, ...]], ...] = (
    (ModelErrorKind.QUOTA_EXCEEDED, ("quota", "rate limit", "ratelimit", "resource_exhausted", "resourceexhausted", "429")),
    (ModelErrorKind.PERMISSION_DENIED, ("permission", "forbidden", "api key not valid", "api_key_invalid", "403")),
    (ModelErrorKind.UNSUPPORTED_FORMAT, ("unsupported", "mime", "invalid argument", "invalid_argument", "400")),
)


class ModelProviderError(BookingAgentError):
    """Classified failure of the model provider. Ends the turn without persistence."""

    def __init__(self, kind: ModelErrorKind, detail: str) -> None:
        super().__init__(detail)
        self.kind = kind
        self.detail = detail

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self.kind]

    @property
    def user_message(self) -> str:
        return _USER_MESSAGE_BY_KIND[self.kind]


def _matches(marker: str, text: str) -> bool:
    """Status code markers only count as whole numbers, not inside durations or ids."""
    if marker.isdigit():
        return re.search(rf"\b{marker}\b", text) is not None
    return marker in text


def classify_model_error(exc: BaseException) -> ModelProviderError:
    """Map a provider exception to a ModelProviderError by its message content."""
    if isinstance(exc, ModelProviderError):
        return exc
    text = f"{type(exc).__name__}: {exc}".lower()
    for kind, markers in _MARKERS:
        if any(_matches(marker, text) for marker in markers):
            return ModelProviderError(kind, str(exc))
    return ModelProviderError(ModelErrorKind.UNKNOWN, str(exc))

"""Classification of pipeline failures into user-facing error types."""

from enum import Enum

from chunked_transcriber.domain.messages import DEFAULT_LOCALE, message


class ErrorType(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    API_ERROR = "API_ERROR"
    AUDIO_DECODE_ERROR = "AUDIO_DECODE_ERROR"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    INVALID_API_KEY = "INVALID_API_KEY"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class AppError(Exception):
    """A classified failure with a localized message safe to show users."""

    def __init__(
        self,
        error_type: ErrorType,
        message: str,
        user_message: str,
        retryable: bool = False,
        cause: BaseException | None = None,
    ):
        self.type = error_type
        self.user_message = user_message
        self.retryable = retryable
        self.cause = cause
        super().__init__(message)


# Checked in order; the first group with a matching status code or marker wins.
_RULES: list[tuple[ErrorType, frozenset[int], tuple[str, ...], bool, str]] = [
    (
        ErrorType.INVALID_API_KEY,
        frozenset({401}),
        ("api key", "authentication", "unauthenticated", "permission_denied"),
        False,
        "invalid_api_key",
    ),
    (
        ErrorType.QUOTA_EXCEEDED,
        frozenset({429}),
        ("quota", "rate limit", "resource_exhausted", "too many requests"),
        True,
        "quota_exceeded",
    ),
    (
        ErrorType.NETWORK_ERROR,
        frozenset(),
        ("network", "fetch", "connection", "timed out"),
        True,
        "network_error",
    ),
]


def _error_chain(error: BaseException) -> list[BaseException]:
    chain = []
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(current)
        current = current.__cause__ or getattr(current, "cause", None)
    return chain


def status_codes(error: BaseException | str | None) -> set[int]:
    """HTTP status codes carried by an error chain, e.g. google-genai ``APIError.code``."""
    if not isinstance(error, BaseException):
        return set()
    codes = set()
    for current in _error_chain(error):
        for attribute in ("code", "status_code"):
            value = getattr(current, attribute, None)
            if isinstance(value, int) and not isinstance(value, bool):
                codes.add(value)
    return codes


def error_text(error: BaseException | str | None) -> str:
    """Collects the message of an error and of every error it was raised from."""
    if error is None:
        return ""
    if isinstance(error, str):
        return error
    return " | ".join(text for text in map(str, _error_chain(error)) if text)


def classify_error(
    error: BaseException | str | None, locale: str = DEFAULT_LOCALE
) -> AppError:
    """
    Classifies a remote-call failure by looking for known markers in its text.

    Args:
        error: The exception (or raw message) raised by the transcription call.
        locale: Locale for the user-facing message.

    Returns:
        AppError whose ``retryable`` flag decides whether the caller shows a
        sticky message. It never affects the retry schedule itself.
    """
    if isinstance(error, AppError):
        return error

    raw = error_text(error)
    lowered = raw.lower()
    cause = error if isinstance(error, BaseException) else None
    codes = status_codes(error)

    for error_type, rule_codes, markers, retryable, message_key in _RULES:
        if codes & rule_codes or any(marker in lowered for marker in markers):
            return AppError(
                error_type, raw, message(message_key, locale), retryable, cause
            )

    if not raw.strip():
        return AppError(
            ErrorType.UNKNOWN_ERROR, raw, message("unknown_error", locale), False, cause
        )

    return AppError(
        ErrorType.API_ERROR,
        raw,
        message("api_error", locale, detail=raw),
        True,
        cause,
    )


def classify_decode_error(
    error: BaseException | str | None, locale: str = DEFAULT_LOCALE
) -> AppError:
    """Decode failures are always non-retryable: no chunk can be produced."""
    cause = error if isinstance(error, BaseException) else None
    return AppError(
        ErrorType.AUDIO_DECODE_ERROR,
        error_text(error),
        message("audio_decode_error", locale),
        False,
        cause,
    )

"""Errors raised while relaying a chat request.

Every error carries the HTTP status it is reported with; the app renders
any of them as ``{"error": message}``.
"""


class RelayError(Exception):
    """Base error for a failed relay request."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(RelayError):
    """Inbound body is missing or has unusable fields."""

    status_code = 400


class ConfigurationError(RelayError):
    """Relay is not configured to call upstream (no API key)."""

    status_code = 500


class UpstreamTimeoutError(RelayError):
    """Upstream could not be reached, or did not answer in time."""

    status_code = 504


class UpstreamStatusError(RelayError):
    """Upstream answered with a non-2xx status; the status is propagated."""

    def __init__(self, status_code: int, body: str):
        super().__init__(
            f"Groq API returned an error: {status_code} - {body}",
            status_code=status_code,
        )
        self.body = body


class UpstreamResponseError(RelayError):
    """Upstream answered 2xx but the body had an unexpected shape."""

    status_code = 500


class UnprocessableReplyError(RelayError):
    """Model content could not be turned into an action list."""

    status_code = 422

"""Error taxonomy shared by services, adapters and the API layer."""


class StorefrontError(Exception):
    """Base error carrying a caller-facing message and HTTP status."""

    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def with_message(self, message: str) -> "StorefrontError":
        """Return an error of the same kind with a different message."""
        return type(self)(message)


class ValidationError(StorefrontError):
    """A required field was missing or empty."""

    status_code = 400
    default_message = "Invalid request."


class UpstreamRateLimited(StorefrontError):
    """A provider rejected the call because of rate limiting."""

    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class UpstreamInvalidInput(StorefrontError):
    """A provider rejected the call's input."""

    status_code = 400
    default_message = "The provider rejected the request."


class UpstreamTimeout(StorefrontError):
    """A provider did not answer within the configured timeout.

    Safe for the caller to retry.
    """

    status_code = 504
    default_message = "The provider timed out. Please try again."


class UpstreamGenericFailure(StorefrontError):
    """Any other provider failure."""

    status_code = 500


class NotificationParseError(StorefrontError):
    """A payment notification body or signature could not be accepted."""

    status_code = 400
    default_message = "Invalid notification payload."


class IdempotencyConflict(StorefrontError):
    """An idempotency key was reused with a different request body."""

    status_code = 422
    default_message = "Idempotency-Key was already used with a different request."

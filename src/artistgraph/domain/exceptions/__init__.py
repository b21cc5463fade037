"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so callers can show it without parsing
    # str(exception). Don't raise this directly - always use a specific subclass so callers
    # can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised when required configuration is missing or invalid.

    Example:
        raise ConfigurationError("SPOTIFY_CLIENT_ID is not configured")
    """

    pass


class ValidationError(DomainException):
    """Input validation failed.

    Example:
        raise ValidationError("Artist id cannot be empty")
    """

    pass


class TokenRefreshException(DomainException):
    """Raised when the token endpoint rejects a grant or answers garbage.

    Common causes:
    - User revoked app access in Spotify settings
    - App credentials changed
    - Refresh token was rotated and the old one was reused
    - A proxy answered 200 with an HTML page instead of token JSON
    """

    def __init__(
        self,
        message: str = "Token refresh failed. Please re-authenticate with Spotify.",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code  # e.g., "invalid_grant"
        self.http_status = http_status  # e.g., 400, 401


class AuthenticationError(DomainException):
    """User is not authenticated or the session can no longer be refreshed.

    Callers should clear stored credentials and send the user back to login.
    """

    requires_reauth = True


class AuthRequired(AuthenticationError):
    """No usable credential is stored.

    Raised when the remote answers 401 and there is no refresh token to
    recover with. The access token has been cleared from the store.
    """

    def __init__(
        self, message: str = "Spotify authentication required. Please log in."
    ) -> None:
        super().__init__(message)


class AuthExpired(AuthenticationError):
    """The session expired and could not be refreshed.

    Raised when the refresh exchange fails or when the retried call still
    answers 401. Both access and refresh tokens have been cleared.
    """

    def __init__(
        self, message: str = "Authentication session expired. Please log in again."
    ) -> None:
        super().__init__(message)


class ExternalServiceError(DomainException):
    """External service returned an error."""

    pass


class RemoteApiError(ExternalServiceError):
    """Spotify answered with a non-2xx status (after at most one retry).

    Attributes:
        status: HTTP status code returned by Spotify
        remote_message: Message from Spotify's error body, if any
    """

    def __init__(self, status: int, remote_message: str | None = None) -> None:
        if remote_message:
            message = f"Spotify API Error: {remote_message} (Status: {status})"
        else:
            message = f"Spotify API Error (Status: {status})"
        super().__init__(message)
        self.status = status
        self.remote_message = remote_message

    @property
    def is_permission_denied(self) -> bool:
        """403 - usually a missing OAuth scope such as playlist-modify-private."""
        return self.status == 403

    @property
    def is_rate_limited(self) -> bool:
        """429 - we don't retry these, the caller decides."""
        return self.status == 429


class PermissionDenied(RemoteApiError):
    """Spotify answered 403 to a write, almost always a missing OAuth scope.

    Still a RemoteApiError (status 403), but the message tells the user what
    to fix instead of echoing Spotify's terse "Forbidden".
    """

    def __init__(
        self,
        remote_message: str | None = None,
        hint: str = (
            "Permission denied by Spotify. Ensure the app has the necessary "
            "permissions (playlist-modify-private)."
        ),
    ) -> None:
        super().__init__(403, remote_message)
        self.message = hint
        self.args = (hint,)


class NoValidTracks(DomainException):
    """Playlist export found no playable track URIs."""

    def __init__(
        self, message: str = "No valid song URIs found to add to the playlist."
    ) -> None:
        super().__init__(message)


class PartialDataUnavailable(DomainException):
    """A bulk-detail lookup returned null for one id.

    Hey future me - this is NOT raised! The song aggregator records one of
    these per null entry and keeps going, so the caller can show a notice.
    """

    def __init__(self, resource: str, resource_id: str) -> None:
        super().__init__(f"{resource} {resource_id} is unavailable and was skipped")
        self.resource = resource
        self.resource_id = resource_id


__all__ = [
    # Base
    "DomainException",
    # Configuration / input
    "ConfigurationError",
    "ValidationError",
    # Auth
    "AuthenticationError",
    "AuthRequired",
    "AuthExpired",
    "TokenRefreshException",
    # Remote
    "ExternalServiceError",
    "RemoteApiError",
    "PermissionDenied",
    # Graph / export
    "NoValidTracks",
    "PartialDataUnavailable",
]

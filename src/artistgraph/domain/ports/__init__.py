"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod


# Hey future me, ITokenStore is a PORT! Storage is whatever the embedding app
# provides: the in-memory TokenManager for a single-user session, or an
# adapter over HTTP-only cookies or a session table. The AuthenticatedCaller
# reads AND clears tokens through this interface only.
class ITokenStore(ABC):
    """Storage for one user's Spotify access and refresh tokens."""

    @abstractmethod
    async def get_access_token(self) -> str | None:
        """Current access token, None if absent or expired."""
        pass

    @abstractmethod
    async def get_refresh_token(self) -> str | None:
        """Refresh token, None if absent."""
        pass

    @abstractmethod
    async def set_access_token(
        self, access_token: str, expires_in: int | None = None
    ) -> None:
        """Store an access token valid for ``expires_in`` seconds."""
        pass

    @abstractmethod
    async def set_refresh_token(self, refresh_token: str) -> None:
        """Store a (possibly rotated) refresh token."""
        pass

    @abstractmethod
    async def clear_access_token(self) -> None:
        """Drop only the access token."""
        pass

    @abstractmethod
    async def clear_all(self) -> None:
        """Drop both tokens (session is dead, user must log in again)."""
        pass


class IAppTokenProvider(ABC):
    """Source of app-level (client-credentials) access tokens."""

    @abstractmethod
    async def get_token(self) -> str:
        """Return a valid app token, fetching a new one if needed."""
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Forget the cached token."""
        pass


__all__ = ["IAppTokenProvider", "ITokenStore"]

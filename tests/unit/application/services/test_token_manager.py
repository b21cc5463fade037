"""Tests for the in-memory user token store."""

from artistgraph.application.services.sessions import TokenInfo, TokenManager


class FakeClock:
    def __init__(self) -> None:
        self.now = 500.0

    def __call__(self) -> float:
        return self.now


class TestTokenManager:
    """Tests for TokenManager."""

    async def test_empty_store(self) -> None:
        store = TokenManager()

        assert await store.get_access_token() is None
        assert await store.get_refresh_token() is None

    async def test_expired_access_token_is_absent(self) -> None:
        """Test the token disappears once its lifetime ran out."""
        clock = FakeClock()
        store = TokenManager("access", "refresh", expires_in=3600, clock=clock)

        clock.now += 3599
        assert await store.get_access_token() == "access"
        clock.now += 1
        assert await store.get_access_token() is None
        assert await store.get_refresh_token() == "refresh"

    async def test_token_without_expiry_never_expires(self) -> None:
        clock = FakeClock()
        store = TokenManager("access", clock=clock)

        clock.now += 10**9

        assert await store.get_access_token() == "access"

    async def test_set_and_clear(self) -> None:
        store = TokenManager()
        await store.set_access_token("a1", expires_in=60)
        await store.set_refresh_token("r1")

        await store.clear_access_token()
        assert await store.get_access_token() is None
        assert await store.get_refresh_token() == "r1"

        await store.clear_all()
        assert await store.get_access_token() is None
        assert await store.get_refresh_token() is None


def test_token_info_expiry() -> None:
    assert not TokenInfo("a").is_expired(now=10**9)
    assert TokenInfo("a", expires_at=10.0).is_expired(now=10.0)
    assert not TokenInfo("a", expires_at=10.0).is_expired(now=9.9)

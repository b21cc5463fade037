"""Session services - user token storage and app-level credentials.

Services in this package:
- token_manager.py: TokenManager (in-memory ITokenStore for one user session)
- client_credentials.py: ClientCredentialsProvider (cached app token for search)

Architecture:
    AuthenticatedCaller -> ITokenStore (user tokens, refresh on 401)
    ArtistSearchService -> ClientCredentialsProvider (app token, no user needed)
"""

from artistgraph.application.services.sessions.client_credentials import (
    ClientCredentialsProvider,
)
from artistgraph.application.services.sessions.token_manager import (
    TokenInfo,
    TokenManager,
)

__all__ = [
    "ClientCredentialsProvider",
    "TokenInfo",
    "TokenManager",
]

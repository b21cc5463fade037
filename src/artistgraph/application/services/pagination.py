"""Follow Spotify ``next`` cursors until a listing is exhausted.

Spotify pages look like ``{"items": [...], "next": "<url>" | null, "total": N}``.
Only a missing/empty ``next`` ends iteration. A page with zero items but a
``next`` link is NOT the end, Spotify does return those now and then.
Pages are fetched strictly one after another, each through the
AuthenticatedCaller so a 401 mid-listing still gets its one refresh.
"""

import logging
from typing import Any

from artistgraph.application.services.credential_refresh import AuthenticatedCaller

logger = logging.getLogger(__name__)


async def exhaust_page(caller: AuthenticatedCaller, page: dict[str, Any]) -> list[Any]:
    """Collect the items of ``page`` and of every page after it.

    Use this when the first page is already at hand, e.g. the nested
    ``tracks`` listing inside an album detail.

    Args:
        caller: Authenticated caller used for follow-up pages
        page: Already fetched page object

    Returns:
        All items in page order
    """
    items: list[Any] = list(page.get("items") or [])
    next_url = page.get("next")
    pages = 1
    while next_url:
        page = await caller.get_json(next_url)
        items.extend(page.get("items") or [])
        next_url = page.get("next")
        pages += 1
    if pages > 1:
        logger.debug("Collected %d items across %d pages", len(items), pages)
    return items


async def fetch_all_pages(caller: AuthenticatedCaller, url: str) -> list[Any]:
    """Fetch ``url`` and every following page.

    Args:
        caller: Authenticated caller
        url: URL of the first page

    Returns:
        All items of all pages in order

    Raises:
        AuthenticationError, RemoteApiError: From any page, nothing partial
            is returned
    """
    first_page = await caller.get_json(url)
    return await exhaust_page(caller, first_page)


__all__ = ["exhaust_page", "fetch_all_pages"]

"""Facebook Login flow for Instagram professional accounts.

The user token obtained from the code exchange is upgraded to a long-lived
token, then used to find the Instagram Business account linked to one of the
user's Pages. The Graph API has no single reliable path for that lookup, so
``LINKED_ACCOUNT_STRATEGIES`` are tried in order until one returns a match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import urlencode

import httpx

from insta_scheduler.config import Settings
from insta_scheduler.graph_client import GraphAPIError, GraphClient

logger = logging.getLogger("insta-scheduler")

SCOPES = (
    "instagram_basic",
    "instagram_content_publish",
    "pages_show_list",
)

NO_LINKED_ACCOUNT_MESSAGE = (
    "No Instagram Business account found. On the consent screen, click "
    '"Choose what you allow" and select your Page and Instagram account; '
    "also ensure IG is linked to the Page."
)


class OAuthError(Exception):
    pass


class NoLinkedAccountError(OAuthError):
    def __init__(self) -> None:
        super().__init__(NO_LINKED_ACCOUNT_MESSAGE)


@dataclass(frozen=True)
class LinkedAccount:
    account_id: str
    username: str | None = None
    page_id: str | None = None
    page_name: str | None = None


@dataclass(frozen=True)
class ConnectedAccount:
    account_id: str
    access_token: str
    display_name: str
    page_id: str | None = None
    page_name: str | None = None


Strategy = Callable[[GraphClient, str], Optional[LinkedAccount]]


def build_consent_url(app_id: str, redirect_uri: str, api_version: str) -> str:
    query = urlencode(
        {
            "client_id": app_id,
            "redirect_uri": redirect_uri,
            "scope": ",".join(SCOPES),
            "response_type": "code",
        }
    )
    return f"https://www.facebook.com/{api_version}/dialog/oauth?{query}"


def exchange_code(client: GraphClient, settings: Settings, code: str, redirect_uri: str) -> str:
    body = client.get(
        "oauth/access_token",
        params={
            "client_id": settings.fb_app_id,
            "client_secret": settings.fb_app_secret,
            "redirect_uri": redirect_uri,
            "code": code,
        },
    )
    token = body.get("access_token")
    if not token:
        raise OAuthError(f"Short-lived token missing from response: {body}")
    logger.info("oauth_short_token_ok")
    return token


def exchange_long_lived_token(client: GraphClient, settings: Settings, short_token: str) -> str:
    body = client.get(
        "oauth/access_token",
        params={
            "grant_type": "fb_exchange_token",
            "client_id": settings.fb_app_id,
            "client_secret": settings.fb_app_secret,
            "fb_exchange_token": short_token,
        },
    )
    token = body.get("access_token")
    if not token:
        raise OAuthError(f"Long-lived token missing from response: {body}")
    logger.info("oauth_long_token_ok")
    return token


def _error_detail(exc: Exception) -> Any:
    if isinstance(exc, GraphAPIError):
        return exc.body
    return str(exc)


def _linked_id(node: Any) -> str | None:
    if not isinstance(node, dict):
        return None
    linked = node.get("instagram_business_account")
    if isinstance(linked, dict) and linked.get("id"):
        return str(linked["id"])
    return None


def _data_list(body: dict[str, Any], field: str | None = None) -> list[dict[str, Any]]:
    container = body.get(field) if field else body
    if not isinstance(container, dict):
        return []
    items = container.get("data") or []
    return [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []


def _page_lookup(client: GraphClient, page_id: str, token: str) -> str | None:
    try:
        body = client.get(page_id, params={"fields": "instagram_business_account", "access_token": token})
    except (GraphAPIError, httpx.HTTPError) as exc:
        logger.info("strategy_page_lookup_fail page_id=%s detail=%s", page_id, _error_detail(exc))
        return None
    return _linked_id(body)


def from_page_list(client: GraphClient, token: str) -> LinkedAccount | None:
    """Ask each of the user's Pages for its linked account.

    Some Page nodes only return ``instagram_business_account`` under the Page's
    own token, so that is tried after the user token.
    """
    try:
        body = client.get("me/accounts", params={"fields": "id,name,access_token", "access_token": token})
    except (GraphAPIError, httpx.HTTPError) as exc:
        logger.info("strategy_fail name=page_list detail=%s", _error_detail(exc))
        return None
    pages = _data_list(body)
    logger.info("strategy_page_list pages=%s", len(pages))
    for page in pages:
        page_id = page.get("id")
        if not page_id:
            continue
        account_id = _page_lookup(client, str(page_id), token)
        page_token = page.get("access_token")
        if not account_id and page_token:
            account_id = _page_lookup(client, str(page_id), page_token)
        if account_id:
            return LinkedAccount(account_id=account_id, page_id=str(page_id), page_name=page.get("name"))
    return None


def from_user_business_accounts(client: GraphClient, token: str) -> LinkedAccount | None:
    try:
        body = client.get(
            "me",
            params={"fields": "instagram_business_accounts{id,username}", "access_token": token},
        )
    except (GraphAPIError, httpx.HTTPError) as exc:
        logger.info("strategy_fail name=user_business_accounts detail=%s", _error_detail(exc))
        return None
    accounts = [item for item in _data_list(body, "instagram_business_accounts") if item.get("id")]
    logger.info("strategy_user_business_accounts accounts=%s", len(accounts))
    if not accounts:
        return None
    first = accounts[0]
    return LinkedAccount(account_id=str(first["id"]), username=first.get("username"))


def from_nested_page_field(client: GraphClient, token: str) -> LinkedAccount | None:
    try:
        body = client.get(
            "me",
            params={"fields": "accounts{id,name,instagram_business_account}", "access_token": token},
        )
    except (GraphAPIError, httpx.HTTPError) as exc:
        logger.info("strategy_fail name=nested_page_field detail=%s", _error_detail(exc))
        return None
    pages = _data_list(body, "accounts")
    logger.info("strategy_nested_page_field pages=%s", len(pages))
    for page in pages:
        account_id = _linked_id(page)
        if account_id:
            page_id = page.get("id")
            return LinkedAccount(
                account_id=account_id,
                page_id=str(page_id) if page_id else None,
                page_name=page.get("name"),
            )
    return None


LINKED_ACCOUNT_STRATEGIES: tuple[Strategy, ...] = (
    from_page_list,
    from_user_business_accounts,
    from_nested_page_field,
)


def resolve_linked_account(
    client: GraphClient,
    token: str,
    strategies: tuple[Strategy, ...] = LINKED_ACCOUNT_STRATEGIES,
) -> LinkedAccount:
    for strategy in strategies:
        linked = strategy(client, token)
        if linked is not None:
            logger.info("oauth_linked_account_ok account_id=%s strategy=%s", linked.account_id, strategy.__name__)
            return linked
    raise NoLinkedAccountError()


def fallback_display_name(account_id: str) -> str:
    return f"Instagram-{account_id}"


def fetch_display_name(client: GraphClient, account_id: str, token: str, known: str | None = None) -> str:
    if known:
        return known
    try:
        body = client.get(account_id, params={"fields": "username", "access_token": token})
    except (GraphAPIError, httpx.HTTPError) as exc:
        logger.info("display_name_fail account_id=%s detail=%s", account_id, _error_detail(exc))
        return fallback_display_name(account_id)
    username = body.get("username")
    return str(username) if username else fallback_display_name(account_id)


def run_oauth_flow(client: GraphClient, settings: Settings, code: str, redirect_uri: str) -> ConnectedAccount:
    short_token = exchange_code(client, settings, code, redirect_uri)
    long_token = exchange_long_lived_token(client, settings, short_token)
    linked = resolve_linked_account(client, long_token)
    display_name = fetch_display_name(client, linked.account_id, long_token, known=linked.username)
    return ConnectedAccount(
        account_id=linked.account_id,
        access_token=long_token,
        display_name=display_name,
        page_id=linked.page_id,
        page_name=linked.page_name,
    )


__all__ = [
    "ConnectedAccount",
    "LINKED_ACCOUNT_STRATEGIES",
    "LinkedAccount",
    "NoLinkedAccountError",
    "OAuthError",
    "build_consent_url",
    "fallback_display_name",
    "fetch_display_name",
    "resolve_linked_account",
    "run_oauth_flow",
]

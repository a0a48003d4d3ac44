from __future__ import annotations

import copy
import logging
from typing import Any

from insta_scheduler.meta_oauth import ConnectedAccount, fallback_display_name
from insta_scheduler.store import ACCOUNTS, JsonStore

logger = logging.getLogger("insta-scheduler")


class UnknownAccountError(KeyError):
    pass


def upsert_account(store: JsonStore, connected: ConnectedAccount) -> dict[str, Any]:
    accounts = store.load_accounts()
    previous = accounts.get(connected.account_id)
    buckets = previous.get("buckets") if isinstance(previous, dict) else None
    record: dict[str, Any] = {
        "accessToken": connected.access_token,
        "username": connected.display_name,
        "buckets": buckets if isinstance(buckets, list) else [],
    }
    if connected.page_id:
        record["pageId"] = connected.page_id
        record["pageName"] = connected.page_name
    accounts[connected.account_id] = record
    if store.save_accounts(accounts):
        logger.info("account_saved account_id=%s path=%s", connected.account_id, store.path_for(ACCOUNTS))
    return record


def list_accounts(accounts: dict[str, Any]) -> list[dict[str, Any]]:
    listing: list[dict[str, Any]] = []
    for account_id, record in accounts.items():
        if not isinstance(record, dict):
            continue
        page_info = None
        if record.get("pageId"):
            page_info = {"id": record["pageId"], "name": record.get("pageName")}
        listing.append(
            {
                "id": account_id,
                "displayName": record.get("username") or fallback_display_name(account_id),
                "pageInfo": page_info,
            }
        )
    return listing


def mask_token(token: Any) -> str:
    return f"***len:{len(str(token))}"


def mask_tokens(accounts: dict[str, Any]) -> dict[str, Any]:
    masked = copy.deepcopy(accounts)
    for record in masked.values():
        if isinstance(record, dict) and record.get("accessToken"):
            record["accessToken"] = mask_token(record["accessToken"])
    return masked


def set_buckets(store: JsonStore, account_id: str | None, buckets: list[Any]) -> None:
    accounts = store.load_accounts()
    if not account_id or not isinstance(accounts.get(account_id), dict):
        raise UnknownAccountError(account_id)
    accounts[account_id]["buckets"] = buckets
    store.save_accounts(accounts)


__all__ = ["UnknownAccountError", "list_accounts", "mask_tokens", "set_buckets", "upsert_account"]

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from insta_scheduler.accounts import mask_tokens
from insta_scheduler.deps import get_store
from insta_scheduler.store import ACCOUNTS, SCHEDULE, JsonStore

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/files")
def debug_files(store: JsonStore = Depends(get_store)) -> dict[str, Any]:
    accounts = store.file_info(ACCOUNTS)
    schedule = store.file_info(SCHEDULE)
    return {
        "accountsPath": accounts["path"],
        "accountsExists": accounts["exists"],
        "accountsBytes": accounts["bytes"],
        "schedulePath": schedule["path"],
        "scheduleExists": schedule["exists"],
        "scheduleBytes": schedule["bytes"],
    }


@router.get("/read-accounts")
def debug_read_accounts(store: JsonStore = Depends(get_store)) -> dict[str, Any]:
    return mask_tokens(store.load_accounts())


@router.get("/routes")
def debug_routes(request: Request) -> list[dict[str, Any]]:
    routes: list[dict[str, Any]] = []
    for route in request.app.routes:
        methods = sorted(getattr(route, "methods", None) or [])
        routes.append({"path": route.path, "methods": methods})
    return routes


__all__ = ["router"]

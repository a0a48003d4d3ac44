from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from insta_scheduler.accounts import UnknownAccountError, list_accounts, mask_tokens, set_buckets
from insta_scheduler.deps import get_store
from insta_scheduler.store import JsonStore

router = APIRouter(tags=["api"])


async def _parse_json_payload(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from None


def _as_list(value: Any, field: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise HTTPException(status_code=400, detail=f"{field} must be a list")
    return value


@router.get("/accounts")
def get_accounts(store: JsonStore = Depends(get_store)) -> list[dict[str, Any]]:
    return list_accounts(store.load_accounts())


@router.get("/buckets")
def get_buckets(store: JsonStore = Depends(get_store)) -> dict[str, Any]:
    return mask_tokens(store.load_accounts())


@router.post("/buckets")
async def update_buckets(request: Request, store: JsonStore = Depends(get_store)) -> dict[str, str]:
    payload = await _parse_json_payload(request)
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")
    buckets = _as_list(payload.get("buckets"), "buckets")
    account_id = payload.get("accountId")
    try:
        set_buckets(store, str(account_id) if account_id else None, buckets)
    except UnknownAccountError:
        raise HTTPException(status_code=400, detail="Account not found") from None
    return {"status": "ok"}


@router.get("/schedule")
def get_schedule(store: JsonStore = Depends(get_store)) -> list[Any]:
    return store.load_schedule()


@router.post("/schedule")
async def update_schedule(request: Request, store: JsonStore = Depends(get_store)) -> dict[str, str]:
    payload = await _parse_json_payload(request)
    if isinstance(payload, dict):
        times = _as_list(payload.get("schedule"), "schedule")
    else:
        times = _as_list(payload, "schedule")
    store.save_schedule(times)
    return {"status": "ok"}


__all__ = ["router"]

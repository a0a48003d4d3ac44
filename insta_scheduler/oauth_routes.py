from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from insta_scheduler.accounts import upsert_account
from insta_scheduler.config import Settings
from insta_scheduler.deps import get_graph_client, get_settings, get_store
from insta_scheduler.graph_client import GraphAPIError, GraphClient
from insta_scheduler.meta_oauth import OAuthError, build_consent_url, run_oauth_flow
from insta_scheduler.store import JsonStore
from insta_scheduler.templating import templates

logger = logging.getLogger("insta-scheduler")

PROVIDER = "instagram"
CALLBACK_PATH = f"/auth/{PROVIDER}/callback"

router = APIRouter(prefix=f"/auth/{PROVIDER}", tags=["oauth"])


def build_base_url(request: Request) -> str:
    proto = request.headers.get("x-forwarded-proto") or request.url.scheme or "https"
    host = request.headers.get("x-forwarded-host") or request.headers.get("host") or request.url.netloc
    return f"{proto.split(',')[0].strip()}://{host.split(',')[0].strip()}"


def build_redirect_uri(request: Request) -> str:
    return f"{build_base_url(request)}{CALLBACK_PATH}"


def _format_detail(detail: Any) -> str:
    if isinstance(detail, str):
        return detail
    return json.dumps(detail, indent=2, ensure_ascii=False)


def _render_error(request: Request, detail: Any, status_code: int) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "oauth_error.html",
        {"detail": _format_detail(detail)},
        status_code=status_code,
    )


@router.get("")
def start_oauth(request: Request, settings: Settings = Depends(get_settings)) -> RedirectResponse:
    url = build_consent_url(settings.fb_app_id, build_redirect_uri(request), settings.graph_api_version)
    return RedirectResponse(url=url, status_code=302)


@router.get("/callback", response_model=None)
def oauth_callback(
    request: Request,
    settings: Settings = Depends(get_settings),
    store: JsonStore = Depends(get_store),
    client: GraphClient = Depends(get_graph_client),
) -> HTMLResponse | PlainTextResponse:
    code = request.query_params.get("code")
    if not code:
        provider_error = request.query_params.get("error")
        if provider_error:
            detail = {
                "error": provider_error,
                "error_reason": request.query_params.get("error_reason"),
                "error_description": request.query_params.get("error_description"),
            }
            logger.warning("oauth_denied detail=%s", detail)
            return _render_error(request, detail, status_code=400)
        return PlainTextResponse(content="No code returned", status_code=400)

    logger.info("oauth_callback code=%s...", code[:8])
    try:
        connected = run_oauth_flow(client, settings, code, build_redirect_uri(request))
    except GraphAPIError as exc:
        logger.error("oauth_fail status_code=%s detail=%s", exc.status_code, exc.body)
        return _render_error(request, exc.body, status_code=500)
    except (OAuthError, httpx.HTTPError) as exc:
        logger.error("oauth_fail detail=%s", exc)
        return _render_error(request, str(exc), status_code=500)

    upsert_account(store, connected)
    return templates.TemplateResponse(
        request,
        "connected.html",
        {"display_name": connected.display_name},
    )


__all__ = ["router"]

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger("insta-scheduler")
GRAPH_BASE = "https://graph.facebook.com"


class GraphAPIError(Exception):
    """Non-2xx reply from the Graph API. ``body`` is the provider's error payload."""

    def __init__(self, status_code: int, body: Any) -> None:
        super().__init__(f"Graph API request failed with status {status_code}")
        self.status_code = status_code
        self.body = body


class GraphClient:
    def __init__(
        self,
        api_version: str,
        timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_version = api_version
        self._client = httpx.Client(
            base_url=f"{GRAPH_BASE}/{api_version}",
            timeout=timeout,
            transport=transport,
        )

    def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._client.get(f"/{path.lstrip('/')}", params=params)
        try:
            body: Any = response.json()
        except ValueError:
            body = {"raw": response.text[:500]}
        if not response.is_success:
            logger.warning("graph_fail path=%s status_code=%s response=%s", path, response.status_code, body)
            raise GraphAPIError(response.status_code, body)
        return body if isinstance(body, dict) else {"data": body}

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GraphClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["GRAPH_BASE", "GraphAPIError", "GraphClient"]

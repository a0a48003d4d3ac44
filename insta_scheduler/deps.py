from __future__ import annotations

from typing import Generator

from fastapi import Request

from insta_scheduler.config import Settings
from insta_scheduler.graph_client import GraphClient
from insta_scheduler.store import JsonStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> JsonStore:
    return request.app.state.store


def get_graph_client(request: Request) -> Generator[GraphClient, None, None]:
    client = request.app.state.graph_client_factory()
    try:
        yield client
    finally:
        client.close()

"""Request headers for a streaming intake upload."""
from __future__ import annotations

from typing import Dict

from ..core.config import Settings
from ..core.http import user_agent

EVENTS_PATH = "/intake/v2/events"
NDJSON = "application/x-ndjson"


def build_headers(settings: Settings) -> Dict[str, str]:
    headers = {
        "Transfer-Encoding": "chunked",
        "Content-Type": NDJSON,
        "Accept": "*/*",
        "User-Agent": user_agent(),
    }
    if settings.http_compression:
        headers["Content-Encoding"] = "gzip"
    if settings.secret_token:
        headers["Authorization"] = f"Bearer {settings.secret_token}"
    return headers


def events_url(settings: Settings) -> str:
    return f"{settings.server_url}{EVENTS_PATH}"

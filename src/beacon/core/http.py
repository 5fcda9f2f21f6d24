"""HTTP utilities for the Beacon intake transport."""
from __future__ import annotations

import platform
import ssl

import certifi
import httpx

from .config import Settings
from .version import AGENT_NAME, VERSION


def user_agent() -> str:
    """Identify the agent, the HTTP client library and the Python runtime, in that order."""

    runtime = platform.python_implementation().lower()
    return f"{AGENT_NAME}/{VERSION} httpx/{httpx.__version__} {runtime}/{platform.python_version()}"


def create_ssl_context(verify: bool) -> ssl.SSLContext:
    context = ssl.create_default_context(cafile=certifi.where())
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def build_client(settings: Settings, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """Create the synchronous client used for streaming uploads.

    A ``transport`` replaces the network stack entirely, which is how tests
    point the client at an in-process intake.
    """

    timeout = httpx.Timeout(settings.server_timeout)
    return httpx.Client(
        timeout=timeout,
        verify=create_ssl_context(settings.verify_server_cert),
        transport=transport,
        follow_redirects=False,
    )

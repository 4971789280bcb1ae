"""
HTTP client factory for Kaiten calls.
"""
from __future__ import annotations
import httpx


def create_http_client(timeout: float) -> httpx.AsyncClient:
    """
    Async client for a single request. No transport-level retries:
    every failure surfaces after one attempt.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers={"User-Agent": "kaiten-mcp/0.1"},
        transport=httpx.AsyncHTTPTransport(retries=0),
    )

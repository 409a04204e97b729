"""Shared HTTP plumbing for the external geodata clients."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ..errors import ProviderError

logger = logging.getLogger(__name__)


def build_client(
    timeout: float,
    user_agent: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    headers = {"User-Agent": user_agent} if user_agent else None
    return httpx.Client(
        timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
        headers=headers,
        transport=transport,
    )


def request_json(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    provider: str,
    max_retries: int = 0,
    backoff_seconds: float = 0.0,
    **kwargs: Any,
) -> Any:
    """Send a request and decode its JSON body, retrying transient failures.

    Any ``httpx.RequestError`` (timeouts, connection and content-decoding
    failures, redirect loops) and 5xx responses are retried with exponential
    backoff. 4xx responses and invalid JSON fail immediately. Every failure
    surfaces as :class:`ProviderError`.
    """

    attempt = 0
    while True:
        try:
            response = client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code < 500 or attempt >= max_retries:
                raise ProviderError(provider, f"HTTP {status_code} from {url}") from e
        except httpx.RequestError as e:
            if attempt >= max_retries:
                logger.warning(f"{provider} request failed after {attempt + 1} attempt(s): {e}")
                raise ProviderError(provider, f"request to {url} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(provider, f"invalid JSON from {url}") from e
        attempt += 1
        wait_time = backoff_seconds * (2 ** (attempt - 1))
        logger.debug(f"{provider} request retrying in {wait_time:.1f}s (attempt {attempt}/{max_retries})")
        time.sleep(wait_time)

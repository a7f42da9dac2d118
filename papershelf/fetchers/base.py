"""Base protocol and HTTP plumbing shared by the per-source fetchers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Protocol

import httpx

from papershelf.errors import ApiError, NetworkError
from papershelf.paper import Paper, Source

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class Fetcher(Protocol):
    """Interface that all fetchers implement."""

    source: Source

    def fetch(self, identifier: str) -> Paper:
        """Fetch and normalise the paper with canonical *identifier*."""
        ...


@contextmanager
def open_client(
    client: httpx.Client | None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    headers: dict[str, str] | None = None,
) -> Generator[httpx.Client, None, None]:
    """Yield *client* as-is, or a short-lived client closed on exit."""
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=timeout, headers=headers, follow_redirects=True) as owned:
        yield owned


def http_get(
    client: httpx.Client,
    url: str,
    *,
    service: str,
    params: dict | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Issue a single GET. Transport failures become :class:`NetworkError`.

    The response is returned whatever its status; callers decide which
    statuses are meaningful for their service (see :func:`raise_for_status`).
    """
    logger.debug("%s: GET %s params=%s", service, url, params)
    try:
        resp = client.get(url, params=params, headers=headers)
    except httpx.RequestError as exc:
        raise NetworkError(f"{service}: request to {url} failed: {exc}") from exc
    logger.debug("%s: HTTP %d (%d bytes)", service, resp.status_code, len(resp.content))
    return resp


def raise_for_status(resp: httpx.Response, *, service: str) -> None:
    """Turn a non-2xx response into an :class:`ApiError`."""
    if resp.is_success:
        return
    snippet = resp.text[:200].strip()
    raise ApiError(f"{service} returned HTTP {resp.status_code}: {snippet}")

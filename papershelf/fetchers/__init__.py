"""Per-source metadata fetchers for arXiv, Crossref (DOI) and IACR ePrint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from papershelf.fetchers.arxiv import ArxivFetcher
from papershelf.fetchers.base import Fetcher
from papershelf.fetchers.crossref import CrossrefFetcher
from papershelf.fetchers.iacr import IACRFetcher
from papershelf.paper import Source

if TYPE_CHECKING:
    from papershelf.config import ClientsConfig


def get_fetcher(
    source: Source,
    config: ClientsConfig | None = None,
    client: httpx.Client | None = None,
) -> Fetcher:
    """Return the fetcher for *source*, configured from *config*."""
    if config is None:
        from papershelf.config import ClientsConfig

        config = ClientsConfig()

    if source is Source.ARXIV:
        return ArxivFetcher(client, base_url=config.arxiv_url, timeout=config.timeout)
    if source is Source.DOI:
        return CrossrefFetcher(
            client,
            base_url=config.crossref_url,
            timeout=config.timeout,
            contact_email=config.contact_email,
        )
    if source is Source.IACR:
        return IACRFetcher(client, base_url=config.iacr_url, timeout=config.timeout)
    raise ValueError(f"No fetcher for source {source!r}")


__all__ = [
    "ArxivFetcher",
    "CrossrefFetcher",
    "Fetcher",
    "IACRFetcher",
    "get_fetcher",
]

"""Fetcher for arXiv.

Uses the Atom query API:
  http://export.arxiv.org/api/query?id_list=<id>&max_results=1

The feed carries one ``<entry>`` per match. The PDF link is derived from the
entry's abstract-page URL (``/abs/`` → ``/pdf/`` plus ``.pdf``), so no second
request is made. arXiv never supplies a DOI here.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import httpx

from papershelf.errors import ApiError, NotFoundError
from papershelf.fetchers.base import DEFAULT_TIMEOUT, http_get, open_client, raise_for_status
from papershelf.paper import Author, Paper, Source

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://export.arxiv.org/api/query"
_NS = {"atom": "http://www.w3.org/2005/Atom"}


class ArxivFetcher:
    """Fetch a single paper from arXiv by new-style or old-style identifier."""

    source = Source.ARXIV

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client = client
        self._base_url = base_url
        self._timeout = timeout

    def fetch(self, identifier: str) -> Paper:
        params = {"id_list": identifier, "max_results": 1}
        with open_client(self._client, timeout=self._timeout) as client:
            resp = http_get(client, self._base_url, service="arxiv", params=params)
        raise_for_status(resp, service="arxiv")
        paper = self._parse(resp.text, identifier)
        logger.info("arxiv: fetched %s (%s)", identifier, paper.title[:60])
        return paper

    def _parse(self, text: str, identifier: str) -> Paper:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise ApiError(f"Failed to parse arXiv XML: {exc}") from exc

        entry = root.find("atom:entry", _NS)
        if entry is None:
            raise NotFoundError(f"arXiv has no entry for {identifier!r}")

        entry_url = _text(entry, "atom:id").strip()
        summary = _text(entry, "atom:summary").strip()
        # Malformed ids come back as a single entry in the errors namespace.
        if "/api/errors" in entry_url:
            raise ApiError(f"arXiv rejected {identifier!r}: {summary}")
        if not entry_url:
            raise ApiError(f"arXiv entry for {identifier!r} has no id")

        title = " ".join(_text(entry, "atom:title").split())
        if not title:
            raise ApiError(f"arXiv entry for {identifier!r} has no title")

        published = _text(entry, "atom:published")
        try:
            publication_date = datetime.fromisoformat(published)
        except ValueError as exc:
            raise ApiError(f"Invalid arXiv publication date {published!r}") from exc
        if publication_date.tzinfo is None:
            publication_date = publication_date.replace(tzinfo=timezone.utc)
        publication_date = publication_date.astimezone(timezone.utc)

        authors = [
            Author(name=" ".join((name.text or "").split()))
            for name in entry.findall("atom:author/atom:name", _NS)
        ]

        pdf_url = entry_url.replace("/abs/", "/pdf/") + ".pdf"

        return Paper(
            title=title,
            authors=authors,
            abstract_text=summary,
            publication_date=publication_date,
            source=Source.ARXIV,
            source_identifier=identifier,
            pdf_url=pdf_url,
            doi=None,
        )


def _text(elem: ET.Element, path: str) -> str:
    child = elem.find(path, _NS)
    if child is None or child.text is None:
        return ""
    return child.text

"""Fetcher for DOIs via the Crossref REST API.

  GET https://api.crossref.org/works/<doi>

Crossref's etiquette requires every client to identify itself in the
User-Agent header (ideally with a contact address); anonymous traffic is
throttled or blocked. The header is attached to every request, including
requests made through an injected client.

Publication date precedence: ``published-print`` → ``published-online`` →
``created``. Each is a ``date-parts`` structure (``[[year, month, day]]``,
month and day optional). There is no further fallback: a work with none of
the three is rejected.

``pdf_url`` is Crossref's generic ``URL`` field, which usually points at a
landing page rather than a PDF.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from papershelf import __version__
from papershelf.errors import ApiError, NotFoundError
from papershelf.fetchers.base import DEFAULT_TIMEOUT, http_get, open_client, raise_for_status
from papershelf.paper import Author, Paper, Source

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.crossref.org/works"
# Characters left as-is in the request path; everything else is percent-encoded.
_DOI_SAFE_CHARS = "/;:()"
_DATE_FIELDS = ("published-print", "published-online", "created")


def build_user_agent(contact_email: str = "") -> str:
    """Return the identifying User-Agent Crossref asks clients to send."""
    agent = f"papershelf/{__version__}"
    if contact_email:
        agent += f" (mailto:{contact_email})"
    return agent


class CrossrefFetcher:
    """Fetch a single work from Crossref by DOI."""

    source = Source.DOI

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        contact_email: str = "",
    ):
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self.headers = {
            "User-Agent": build_user_agent(contact_email),
            "Accept": "application/json",
        }

    def fetch(self, identifier: str) -> Paper:
        url = f"{self._base_url}/{quote(identifier, safe=_DOI_SAFE_CHARS)}"
        with open_client(self._client, timeout=self._timeout, headers=self.headers) as client:
            resp = http_get(client, url, service="crossref", headers=self.headers)
        if resp.status_code == 404:
            raise NotFoundError(f"Crossref has no work for DOI {identifier!r}")
        raise_for_status(resp, service="crossref")

        try:
            data = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ApiError(f"Failed to parse Crossref JSON: {exc}") from exc

        paper = self._parse(data, identifier)
        logger.info("crossref: fetched %s (%s)", identifier, paper.title[:60])
        return paper

    def _parse(self, data: Any, identifier: str) -> Paper:
        work = data.get("message") if isinstance(data, dict) else None
        if not isinstance(work, dict):
            raise ApiError("Crossref response has no 'message' object")

        titles = work.get("title") or []
        title = titles[0].strip() if titles else ""
        if not title:
            raise ApiError("No title found")

        return Paper(
            title=title,
            authors=[_parse_author(a) for a in work.get("author") or []],
            abstract_text=work.get("abstract") or "",
            publication_date=resolve_publication_date(work),
            source=Source.DOI,
            source_identifier=identifier,
            pdf_url=work.get("URL"),
            doi=work.get("DOI"),
        )


def author_display_name(given: str | None, family: str | None) -> str:
    """``"given family"``, else whichever part exists, else ``"Unknown"``."""
    if given and family:
        return f"{given} {family}"
    return given or family or "Unknown"


def _parse_author(item: dict) -> Author:
    affiliations = item.get("affiliation") or []
    affiliation = affiliations[0].get("name") if affiliations else None
    return Author(
        name=author_display_name(item.get("given"), item.get("family")),
        affiliation=affiliation,
    )


def parse_date_parts(value: Any) -> datetime | None:
    """Convert a Crossref date object to a UTC midnight timestamp.

    Returns ``None`` when the structure is missing, empty, or not a real date.
    """
    if not isinstance(value, dict):
        return None
    parts_list = value.get("date-parts") or []
    if not parts_list or not parts_list[0]:
        return None
    parts = parts_list[0]
    year = parts[0]
    month = parts[1] if len(parts) > 1 and parts[1] is not None else 1
    day = parts[2] if len(parts) > 2 and parts[2] is not None else 1
    try:
        return datetime(int(year), int(month), int(day), tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def resolve_publication_date(work: dict) -> datetime:
    """Pick the first usable date in print → online → created order."""
    for name in _DATE_FIELDS:
        resolved = parse_date_parts(work.get(name))
        if resolved is not None:
            logger.debug("crossref: using %s date %s", name, resolved.date())
            return resolved
    found = {name: work.get(name) for name in _DATE_FIELDS}
    raise ApiError(f"No valid publication date found: {found}")

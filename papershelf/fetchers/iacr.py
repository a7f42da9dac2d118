"""Fetcher for the IACR Cryptology ePrint Archive.

Uses the archive's OAI-PMH endpoint with Dublin Core metadata:
  https://eprint.iacr.org/oai?verb=GetRecord
      &identifier=oai:eprint.iacr.org:<year>/<number>&metadataPrefix=oai_dc

The payload is parsed namespace-aware, so the ``oai_dc:``/``dc:`` prefixes
need no pre-processing. OAI-PMH reports failures in-band with an ``<error>``
element, which is surfaced as :class:`ApiError` before anything else is read.

The ``doi`` field holds the paper's canonical eprint URL: the first Dublin
Core identifier starting with ``https://eprint.iacr.org/``. Values shaped
like ``10.xxxx/...`` are ignored; a record without an eprint URL leaves
``doi`` unset.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import httpx

from papershelf.errors import ApiError, InvalidIdentifierError
from papershelf.fetchers.base import DEFAULT_TIMEOUT, http_get, open_client, raise_for_status
from papershelf.paper import Author, Paper, Source

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://eprint.iacr.org/oai"
EPRINT_URL = "https://eprint.iacr.org/"

_NS = {
    "oai": "http://www.openarchives.org/OAI/2.0/",
    "oai_dc": "http://www.openarchives.org/OAI/2.0/oai_dc/",
    "dc": "http://purl.org/dc/elements/1.1/",
}


def pdf_url_for(identifier: str) -> str:
    year, number = _split_identifier(identifier)
    return f"{EPRINT_URL}{year}/{number}.pdf"


def _split_identifier(identifier: str) -> tuple[str, str]:
    parts = identifier.split("/")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise InvalidIdentifierError(identifier)
    return parts[0], parts[1]


class IACRFetcher:
    """Fetch a single ePrint record by ``<year>/<number>``."""

    source = Source.IACR

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
        _split_identifier(identifier)
        params = {
            "verb": "GetRecord",
            "identifier": f"oai:eprint.iacr.org:{identifier}",
            "metadataPrefix": "oai_dc",
        }
        with open_client(self._client, timeout=self._timeout) as client:
            resp = http_get(client, self._base_url, service="iacr", params=params)
        raise_for_status(resp, service="iacr")
        paper = self._parse(resp.text, identifier)
        logger.info("iacr: fetched %s (%s)", identifier, paper.title[:60])
        return paper

    def _parse(self, text: str, identifier: str) -> Paper:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise ApiError(f"Failed to parse OAI-PMH XML: {exc}") from exc

        error = root.find("oai:error", _NS)
        if error is not None:
            code = error.get("code", "unknown")
            message = (error.text or "").strip()
            raise ApiError(f"OAI-PMH error: {code} - {message}")

        dc = root.find("oai:GetRecord/oai:record/oai:metadata/oai_dc:dc", _NS)
        if dc is None:
            raise ApiError(f"No record found for {identifier!r}")

        title = " ".join(_first(dc, "dc:title").split())
        if not title:
            raise ApiError(f"ePrint record {identifier!r} has no title")

        creators = [
            Author(name=(c.text or "").strip())
            for c in dc.findall("dc:creator", _NS)
            if (c.text or "").strip()
        ]
        identifiers = [(i.text or "").strip() for i in dc.findall("dc:identifier", _NS)]
        doi = next((i for i in identifiers if i.startswith(EPRINT_URL)), None)

        return Paper(
            title=title,
            authors=creators,
            abstract_text=_first(dc, "dc:description").strip(),
            publication_date=_parse_timestamp(_first(dc, "dc:date")),
            source=Source.IACR,
            source_identifier=identifier,
            pdf_url=pdf_url_for(identifier),
            doi=doi,
        )


def _first(elem: ET.Element, path: str) -> str:
    child = elem.find(path, _NS)
    if child is None or child.text is None:
        return ""
    return child.text


def _parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp. Date-only or zone-less values are rejected."""
    value = value.strip()
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise ApiError(f"Invalid date format: {value!r}") from exc
    if parsed.tzinfo is None:
        raise ApiError(f"Invalid date format: {value!r} (no timezone)")
    return parsed.astimezone(timezone.utc)

"""Classify user input (URL or bare identifier) into a source and identifier.

Classification is pure: no network access happens here. URLs are dispatched
on their host alone; bare strings are matched against the literal formats in
a fixed order. The formats do not overlap, so the order only matters if a new
pattern is added.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple
from urllib.parse import unquote, urlsplit

from papershelf.errors import InvalidIdentifierError, InvalidUrlError
from papershelf.paper import Source

logger = logging.getLogger(__name__)

ARXIV_NEW_RE = re.compile(r"^\d{4}\.\d{4,5}$")
# math.AG/0601001, hep-th/9901001
ARXIV_OLD_RE = re.compile(r"^[a-zA-Z-]+(?:\.[a-zA-Z-]+)?/\d{7}$")
IACR_RE = re.compile(r"^\d{4}/\d+$")
DOI_RE = re.compile(r"^10\.\d{4,9}/[-._;()/:\w]+$")

_ARXIV_PATH_RE = re.compile(r"abs/(.+?)/?$")
_IACR_PATH_RE = re.compile(r"(\d{4}/\d+)/?$")

_PATTERNS: list[tuple[re.Pattern[str], Source]] = [
    (ARXIV_NEW_RE, Source.ARXIV),
    (ARXIV_OLD_RE, Source.ARXIV),
    (IACR_RE, Source.IACR),
    (DOI_RE, Source.DOI),
]


class Identifier(NamedTuple):
    source: Source
    identifier: str


def classify(value: str) -> Identifier:
    """Return the :class:`Identifier` for *value*.

    Raises :class:`InvalidIdentifierError` when nothing matches and
    :class:`InvalidUrlError` when *value* looks like a URL but cannot be parsed.
    """
    value = value.strip()
    if not value:
        raise InvalidIdentifierError(value)

    host, path = _split_url(value)
    if host is not None:
        return _classify_url(value, host, path)

    for pattern, source in _PATTERNS:
        if pattern.match(value):
            logger.debug("Classified %r as %s", value, source)
            return Identifier(source, value)

    raise InvalidIdentifierError(value)


def _split_url(value: str) -> tuple[str | None, str]:
    """Return ``(host, path)`` if *value* is an absolute URL, else ``(None, "")``."""
    try:
        parts = urlsplit(value)
        host = parts.hostname
    except ValueError as exc:
        raise InvalidUrlError(f"Malformed URL {value!r}: {exc}") from exc
    if not parts.scheme or not parts.netloc:
        return None, ""
    if not host:
        raise InvalidUrlError(f"URL has no host: {value!r}")
    return host.lower(), parts.path


def _classify_url(value: str, host: str, path: str) -> Identifier:
    if host == "arxiv.org":
        m = _ARXIV_PATH_RE.search(path)
        if not m:
            raise InvalidIdentifierError(value)
        return Identifier(Source.ARXIV, m.group(1))

    if host == "eprint.iacr.org":
        m = _IACR_PATH_RE.search(path)
        if not m:
            raise InvalidIdentifierError(value)
        return Identifier(Source.IACR, m.group(1))

    if host == "doi.org":
        doi = unquote(path).lstrip("/")
        if not doi:
            raise InvalidIdentifierError(value)
        return Identifier(Source.DOI, doi)

    raise InvalidIdentifierError(value)

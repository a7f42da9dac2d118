"""Common paper record shared by the fetchers, the store and the CLI."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from papershelf.errors import InvalidSourceError

_UNSAFE_CHARS = re.compile(r"[^\w.-]+")


class Source(str, Enum):
    """Where a paper's metadata comes from."""

    ARXIV = "Arxiv"
    IACR = "IACR"
    DOI = "DOI"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> Source:
        """Parse a source name case-insensitively.

        Raises :class:`InvalidSourceError` for anything that is not one of the
        three known sources.
        """
        key = value.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise InvalidSourceError(value)


@dataclass(frozen=True)
class Author:
    name: str
    affiliation: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class Paper:
    """Normalised paper metadata.

    ``(source, source_identifier)`` is the uniqueness key in the store.
    ``publication_date`` is always timezone-aware UTC.
    """

    title: str
    authors: list[Author]
    abstract_text: str
    publication_date: datetime
    source: Source
    source_identifier: str
    pdf_url: str | None = None
    doi: str | None = None

    @property
    def author_names(self) -> list[str]:
        return [a.name for a in self.authors]


def format_title(title: str, max_length: int | None = 50) -> str:
    """Turn a title into a filesystem-friendly stem.

    Lower-cases, keeps only word characters, ``.`` and ``-``, joins words with
    ``_`` and truncates at a word boundary so the result is at most
    *max_length* characters. Path separators never survive and words made of
    dots alone (``..``) are dropped. A first word longer than *max_length* is
    cut instead.
    """
    if max_length is None:
        max_length = 50
    words = [w for w in _UNSAFE_CHARS.sub(" ", title.lower()).split() if w.strip(".")]
    if not words:
        return ""

    result = ""
    for word in words:
        candidate = f"{result}_{word}" if result else word
        if len(candidate) > max_length:
            break
        result = candidate
    return result or words[0][:max_length]

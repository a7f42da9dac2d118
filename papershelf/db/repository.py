"""Data access layer: save, look up, search and remove papers."""

from __future__ import annotations

import logging

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from papershelf.db.models import PaperRecord
from papershelf.errors import DuplicatePaperError
from papershelf.paper import Paper, Source

logger = logging.getLogger(__name__)

_SEARCH_SQL = """\
SELECT papers_fts.rowid
FROM papers_fts
WHERE papers_fts MATCH :query
ORDER BY rank"""


def _find_record(session: Session, source: Source, identifier: str) -> PaperRecord | None:
    return session.execute(
        select(PaperRecord).where(
            PaperRecord.source == str(source),
            PaperRecord.source_identifier == identifier,
        )
    ).scalar_one_or_none()


# ---------------------------------------------------------------------------
# Paper helpers
# ---------------------------------------------------------------------------

def save_paper(session: Session, paper: Paper) -> int:
    """Insert *paper* with its authors. Returns the new row id.

    Raises :class:`DuplicatePaperError` if the (source, identifier) pair is
    already stored.
    """
    if _find_record(session, paper.source, paper.source_identifier) is not None:
        raise DuplicatePaperError(paper.source, paper.source_identifier)

    record = PaperRecord.from_paper(paper)
    try:
        # Only this insert is undone on failure; earlier work in the session stays.
        with session.begin_nested():
            session.add(record)
    except IntegrityError as exc:
        if "UNIQUE" in str(exc.orig):
            raise DuplicatePaperError(paper.source, paper.source_identifier) from exc
        raise
    logger.info("Saved %s %s as id %d", paper.source, paper.source_identifier, record.id)
    return record.id


def get_paper_by_source_id(session: Session, source: Source, identifier: str) -> Paper | None:
    """Return the stored paper for (source, identifier), or None."""
    record = _find_record(session, source, identifier)
    return record.to_paper() if record is not None else None


def search_papers(session: Session, query: str, limit: int | None = None) -> list[Paper]:
    """Full-text search over titles and abstracts, best match first.

    *query* uses FTS5 syntax; see :func:`match_any_terms` for free text.
    """
    if not query.strip():
        return []

    sql = _SEARCH_SQL
    params: dict = {"query": query}
    if limit is not None:
        sql += "\nLIMIT :limit"
        params["limit"] = limit

    ids = [row[0] for row in session.execute(text(sql), params)]
    if not ids:
        return []

    records = session.execute(
        select(PaperRecord).where(PaperRecord.id.in_(ids))
    ).scalars().all()
    by_id = {r.id: r for r in records}
    return [by_id[i].to_paper() for i in ids if i in by_id]


def match_any_terms(text_query: str) -> str:
    """Build an FTS5 query matching any of the words in *text_query*.

    Each word is quoted so punctuation (``-``, ``.``, ``:``) is not read as
    query syntax.
    """
    terms = text_query.split()
    return " OR ".join('"' + t.replace('"', '""') + '"' for t in terms)


def remove_paper(session: Session, source: Source, identifier: str) -> bool:
    """Delete a stored paper and its authors. Returns False if it wasn't stored."""
    record = _find_record(session, source, identifier)
    if record is None:
        return False
    session.delete(record)
    session.flush()
    logger.info("Removed %s %s", source, identifier)
    return True

"""Full-text search DDL.

The ORM owns the regular tables; the FTS5 index and its sync triggers are
SQLite-specific and live here as raw SQL. ``papers_fts`` is an
external-content table over ``papers(title, abstract_text)``.
"""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

FTS_STATEMENTS = [
    """\
CREATE VIRTUAL TABLE IF NOT EXISTS papers_fts USING fts5(
    title,
    abstract_text,
    content='papers',
    content_rowid='id'
)""",
    """\
CREATE TRIGGER IF NOT EXISTS papers_ai AFTER INSERT ON papers BEGIN
    INSERT INTO papers_fts(rowid, title, abstract_text)
    VALUES (new.id, new.title, new.abstract_text);
END""",
    """\
CREATE TRIGGER IF NOT EXISTS papers_ad AFTER DELETE ON papers BEGIN
    INSERT INTO papers_fts(papers_fts, rowid, title, abstract_text)
    VALUES ('delete', old.id, old.title, old.abstract_text);
END""",
    """\
CREATE TRIGGER IF NOT EXISTS papers_au AFTER UPDATE ON papers BEGIN
    INSERT INTO papers_fts(papers_fts, rowid, title, abstract_text)
    VALUES ('delete', old.id, old.title, old.abstract_text);
    INSERT INTO papers_fts(rowid, title, abstract_text)
    VALUES (new.id, new.title, new.abstract_text);
END""",
]


def create_search_index(engine: Engine) -> None:
    """Create the FTS5 table and triggers if they don't already exist."""
    with engine.begin() as conn:
        for stmt in FTS_STATEMENTS:
            conn.execute(text(stmt))
    logger.debug("Full-text index initialised")

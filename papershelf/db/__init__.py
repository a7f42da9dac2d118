"""Local paper library: SQLite via SQLAlchemy, with FTS5 full-text search."""

from papershelf.db.engine import dispose_engine, get_engine, get_session, init_engine
from papershelf.db.models import create_tables
from papershelf.db.repository import (
    get_paper_by_source_id,
    match_any_terms,
    remove_paper,
    save_paper,
    search_papers,
)

__all__ = [
    "create_tables",
    "dispose_engine",
    "get_engine",
    "get_paper_by_source_id",
    "get_session",
    "init_engine",
    "match_any_terms",
    "remove_paper",
    "save_paper",
    "search_papers",
]

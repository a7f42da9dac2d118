"""Tests for papershelf.db models and repository."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import func, inspect, select, text

from papershelf.db.models import AuthorRecord, PaperRecord, create_tables
from papershelf.db.repository import (
    get_paper_by_source_id,
    match_any_terms,
    remove_paper,
    save_paper,
    search_papers,
)
from papershelf.errors import DuplicatePaperError, InvalidSourceError
from papershelf.paper import Author, Source

from conftest import make_paper


class TestSchema:
    def test_tables_created(self, db_session):
        names = inspect(db_session.get_bind()).get_table_names()
        assert "papers" in names
        assert "authors" in names
        assert "papers_fts" in names

    def test_create_is_idempotent(self, db_session):
        create_tables(db_session.get_bind())


class TestSaveAndRetrieve:
    def test_save_returns_positive_id(self, db_session, paper):
        assert save_paper(db_session, paper) > 0

    def test_round_trip(self, db_session, paper):
        save_paper(db_session, paper)
        loaded = get_paper_by_source_id(db_session, Source.ARXIV, "2301.07041")
        assert loaded == paper
        assert loaded.publication_date.tzinfo is not None

    def test_author_order_preserved(self, db_session):
        authors = [Author(name=n) for n in ["Zed", "Amy", "Moe", "Bob"]]
        save_paper(db_session, make_paper(authors=authors))
        loaded = get_paper_by_source_id(db_session, Source.ARXIV, "2301.07041")
        assert loaded.author_names == ["Zed", "Amy", "Moe", "Bob"]

    def test_non_utc_date_stored_as_utc(self, db_session):
        from datetime import timedelta

        tz = timezone(timedelta(hours=-5))
        save_paper(db_session, make_paper(publication_date=datetime(2024, 1, 1, 19, 0, tzinfo=tz)))
        loaded = get_paper_by_source_id(db_session, Source.ARXIV, "2301.07041")
        assert loaded.publication_date == datetime(2024, 1, 2, 0, 0, tzinfo=timezone.utc)

    def test_missing(self, db_session):
        assert get_paper_by_source_id(db_session, Source.IACR, "2016/260") is None

    def test_same_identifier_different_source(self, db_session):
        save_paper(db_session, make_paper(source=Source.ARXIV, source_identifier="2016/260"))
        save_paper(db_session, make_paper(source=Source.IACR, source_identifier="2016/260"))
        assert get_paper_by_source_id(db_session, Source.IACR, "2016/260") is not None


class TestDuplicates:
    def test_second_save_rejected(self, db_session, paper):
        first = save_paper(db_session, paper)
        assert first > 0
        with pytest.raises(DuplicatePaperError) as exc_info:
            save_paper(db_session, make_paper(title="Different title"))
        assert exc_info.value.source is Source.ARXIV
        assert exc_info.value.identifier == "2301.07041"

        count = db_session.execute(select(func.count()).select_from(PaperRecord)).scalar_one()
        assert count == 1

    def test_constraint_violation_keeps_earlier_work(self, db_session, paper):
        other = make_paper(source=Source.IACR, source_identifier="2016/260")
        save_paper(db_session, paper)
        save_paper(db_session, other)

        # Skip the lookup so the insert itself hits the unique constraint.
        with patch("papershelf.db.repository._find_record", return_value=None):
            with pytest.raises(DuplicatePaperError):
                save_paper(db_session, make_paper(title="Different title"))

        db_session.commit()
        assert get_paper_by_source_id(db_session, Source.ARXIV, "2301.07041") == paper
        assert get_paper_by_source_id(db_session, Source.IACR, "2016/260") == other


class TestSearch:
    def _seed(self, session):
        save_paper(session, make_paper(
            title="Lattice Cryptography Survey",
            abstract_text="Lattice problems underpin post-quantum lattice schemes.",
            source_identifier="2401.00001",
        ))
        save_paper(session, make_paper(
            title="Garbled Circuits Revisited",
            abstract_text="We revisit garbling, with a brief remark about lattice assumptions "
                          "among many other topics discussed at considerable length here.",
            source_identifier="2401.00002",
        ))
        save_paper(session, make_paper(
            title="Byzantine Consensus",
            abstract_text="Agreement among distributed replicas.",
            source_identifier="2401.00003",
        ))

    def test_ranked_by_relevance(self, db_session):
        self._seed(db_session)
        results = search_papers(db_session, "lattice")
        assert [p.source_identifier for p in results] == ["2401.00001", "2401.00002"]

    def test_limit(self, db_session):
        self._seed(db_session)
        assert len(search_papers(db_session, "lattice", limit=1)) == 1

    def test_no_match(self, db_session):
        self._seed(db_session)
        assert search_papers(db_session, "zebra") == []

    def test_empty_query(self, db_session):
        self._seed(db_session)
        assert search_papers(db_session, "   ") == []

    def test_match_any_terms(self, db_session):
        self._seed(db_session)
        query = match_any_terms("consensus garbled")
        assert query == '"consensus" OR "garbled"'
        ids = {p.source_identifier for p in search_papers(db_session, query)}
        assert ids == {"2401.00002", "2401.00003"}

    def test_match_any_terms_escapes_punctuation(self):
        assert match_any_terms('post-quantum "fhe"') == '"post-quantum" OR """fhe"""'

    def test_search_sees_removals(self, db_session):
        self._seed(db_session)
        remove_paper(db_session, Source.ARXIV, "2401.00001")
        assert [p.source_identifier for p in search_papers(db_session, "lattice")] == ["2401.00002"]

    def test_corrupt_source_surfaces_at_read(self, db_session):
        db_session.add(PaperRecord(
            title="Legacy row", abstract_text="legacy", source="PubMed",
            source_identifier="123", publication_date=datetime(2020, 1, 1),
        ))
        db_session.flush()
        with pytest.raises(InvalidSourceError):
            search_papers(db_session, "legacy")


class TestRemove:
    def test_remove_deletes_authors(self, db_session, paper):
        save_paper(db_session, paper)
        assert remove_paper(db_session, Source.ARXIV, "2301.07041") is True
        assert get_paper_by_source_id(db_session, Source.ARXIV, "2301.07041") is None
        count = db_session.execute(select(func.count()).select_from(AuthorRecord)).scalar_one()
        assert count == 0

    def test_remove_missing(self, db_session):
        assert remove_paper(db_session, Source.DOI, "10.1000/none") is False

    def test_can_save_again_after_remove(self, db_session, paper):
        save_paper(db_session, paper)
        remove_paper(db_session, Source.ARXIV, "2301.07041")
        assert save_paper(db_session, paper) > 0
        rows = db_session.execute(text("SELECT count(*) FROM papers_fts")).scalar_one()
        assert rows == 1

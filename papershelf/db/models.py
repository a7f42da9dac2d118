"""SQLAlchemy ORM models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, relationship

from papershelf.db.schema import create_search_index
from papershelf.paper import Author, Paper, Source


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    pass


def _to_utc_naive(value: datetime) -> datetime:
    # SQLite has no timezone support; everything is stored as UTC wall time.
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
class PaperRecord(Base):
    __tablename__ = "papers"
    __table_args__ = (
        UniqueConstraint("source", "source_identifier", name="uq_paper_source_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    abstract_text = Column(Text, nullable=False, default="")
    publication_date = Column(DateTime, nullable=False, index=True)
    source = Column(String(16), nullable=False)
    source_identifier = Column(String(255), nullable=False)
    pdf_url = Column(Text)
    doi = Column(String(255), index=True)

    authors = relationship(
        "AuthorRecord",
        back_populates="paper",
        order_by="AuthorRecord.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<PaperRecord(id={self.id}, {self.source} {self.source_identifier!r})>"

    @classmethod
    def from_paper(cls, paper: Paper) -> PaperRecord:
        return cls(
            title=paper.title,
            abstract_text=paper.abstract_text,
            publication_date=_to_utc_naive(paper.publication_date),
            source=str(paper.source),
            source_identifier=paper.source_identifier,
            pdf_url=paper.pdf_url,
            doi=paper.doi,
            authors=[
                AuthorRecord(
                    position=i, name=a.name, affiliation=a.affiliation, email=a.email,
                )
                for i, a in enumerate(paper.authors)
            ],
        )

    def to_paper(self) -> Paper:
        """Rebuild the value object. Raises InvalidSourceError on a corrupt source."""
        return Paper(
            title=self.title,
            authors=[
                Author(name=a.name, affiliation=a.affiliation, email=a.email)
                for a in self.authors
            ],
            abstract_text=self.abstract_text or "",
            publication_date=self.publication_date.replace(tzinfo=timezone.utc),
            source=Source.parse(self.source),
            source_identifier=self.source_identifier,
            pdf_url=self.pdf_url,
            doi=self.doi,
        )


class AuthorRecord(Base):
    __tablename__ = "authors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    paper_id = Column(Integer, ForeignKey("papers.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(Text, nullable=False)
    affiliation = Column(Text)
    email = Column(Text)

    paper = relationship("PaperRecord", back_populates="authors")


def create_tables(engine) -> None:
    """Create all tables and the full-text index (idempotent)."""
    Base.metadata.create_all(engine)
    create_search_index(engine)

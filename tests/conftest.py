"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from papershelf.db.engine import configure_sqlite
from papershelf.db.models import create_tables
from papershelf.paper import Author, Paper, Source


@pytest.fixture()
def db_session():
    """In-memory SQLite session for tests."""
    engine = configure_sqlite(create_engine("sqlite:///:memory:"))
    create_tables(engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()
    engine.dispose()


def make_paper(**overrides) -> Paper:
    fields = dict(
        title="Verifiable Fully Homomorphic Encryption",
        authors=[
            Author(name="Alexander Viand", affiliation="ETH Zurich"),
            Author(name="Christian Knabenhans"),
        ],
        abstract_text="Fully Homomorphic Encryption (FHE) is seeing increasing real-world deployment.",
        publication_date=datetime(2023, 1, 17, 18, 58, 52, tzinfo=timezone.utc),
        source=Source.ARXIV,
        source_identifier="2301.07041",
        pdf_url="http://arxiv.org/pdf/2301.07041v2.pdf",
        doi=None,
    )
    fields.update(overrides)
    return Paper(**fields)


@pytest.fixture()
def paper() -> Paper:
    return make_paper()


@pytest.fixture()
def mock_client() -> Callable[..., httpx.Client]:
    """Build an httpx.Client that answers every request with *handler*.

    Requests are recorded on ``client.requests`` for assertions.
    """
    clients: list[httpx.Client] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        seen: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(recording))
        client.requests = seen
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()

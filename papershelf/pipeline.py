"""Orchestration: resolve user input to a paper, store it, fetch its PDF."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from sqlalchemy.orm import Session

from papershelf.config import ClientsConfig
from papershelf.db.repository import save_paper
from papershelf.errors import ApiError
from papershelf.fetchers import get_fetcher
from papershelf.fetchers.base import DEFAULT_TIMEOUT, http_get, open_client, raise_for_status
from papershelf.identifiers import classify
from papershelf.paper import Paper, format_title

logger = logging.getLogger(__name__)

PDF_TITLE_LENGTH = 50


def fetch_paper(
    value: str,
    config: ClientsConfig | None = None,
    client: httpx.Client | None = None,
) -> Paper:
    """Fetch metadata for a URL or bare identifier.

    Classification happens locally; exactly one request is made to the
    matching source. Errors are raised as-is, never retried.
    """
    source, identifier = classify(value)
    logger.info("Fetching %s %s", source, identifier)
    return get_fetcher(source, config, client).fetch(identifier)


def add_paper(
    session: Session,
    value: str,
    config: ClientsConfig | None = None,
    client: httpx.Client | None = None,
) -> tuple[Paper, int]:
    """Fetch a paper and save it. Returns the paper and its row id.

    A paper that is already stored raises :class:`DuplicatePaperError` from
    the store.
    """
    paper = fetch_paper(value, config, client)
    paper_id = save_paper(session, paper)
    return paper, paper_id


def pdf_path_for(paper: Paper, directory: str | Path) -> Path:
    """Return the file a paper's PDF is written to, always directly inside *directory*."""
    stem = format_title(paper.title, PDF_TITLE_LENGTH)
    if not stem:
        raise ApiError(f"Cannot derive a PDF file name from title {paper.title!r}")
    base = Path(directory).expanduser()
    path = base / f"{stem}.pdf"
    if path.resolve().parent != base.resolve():
        raise ApiError(f"PDF path {path} escapes {base}")
    return path


def download_pdf(
    paper: Paper,
    directory: str | Path,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Path:
    """Download the paper's PDF into *directory*. Returns the written path."""
    if not paper.pdf_url:
        raise ApiError("No PDF URL available")
    path = pdf_path_for(paper, directory)

    with open_client(client, timeout=timeout) as c:
        resp = http_get(c, paper.pdf_url, service="pdf")
    raise_for_status(resp, service="pdf")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(resp.content)
    logger.info("Wrote %d bytes to %s", len(resp.content), path)
    return path

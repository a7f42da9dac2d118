"""Command-line interface for papershelf."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path

import click

from papershelf import __version__
from papershelf.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from papershelf.errors import DuplicatePaperError, PaperShelfError
from papershelf.paper import Paper, Source

ABSTRACT_PREVIEW = 100
DB_FILE_SUFFIXES = ("", "-wal", "-shm", "-journal")

# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------

@click.group()
@click.option(
    "-c", "--config",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file (default: ~/.papershelf/config.toml)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="papershelf")
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool):
    """papershelf: fetch paper metadata from arXiv, Crossref and IACR into a local library."""
    cfg = load_config(config)
    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["config"] = cfg


def _load(ctx: click.Context) -> AppConfig:
    return ctx.obj["config"]


def _open_db(cfg: AppConfig) -> None:
    from papershelf.db.engine import init_engine
    from papershelf.db.models import create_tables

    engine = init_engine(cfg)
    create_tables(engine)


def _source(_ctx, _param, value: str) -> Source:
    try:
        return Source.parse(value)
    except PaperShelfError as exc:
        raise click.BadParameter(str(exc)) from exc


@contextmanager
def _reported_errors():
    try:
        yield
    except PaperShelfError as exc:
        raise click.ClickException(str(exc)) from exc


def _echo_paper(paper: Paper, *, full: bool = True) -> None:
    click.echo(f"  Title:     {paper.title}")
    authors = ", ".join(paper.author_names) or "No authors listed"
    click.echo(f"  Authors:   {authors}")
    click.echo(f"  Source:    {paper.source} {paper.source_identifier}")
    if full:
        click.echo(f"  Published: {paper.publication_date.isoformat()}")
        if paper.abstract_text:
            click.echo(f"  Abstract:  {paper.abstract_text}")
        if paper.pdf_url:
            click.echo(f"  PDF URL:   {paper.pdf_url}")
    if paper.doi:
        click.echo(f"  DOI:       {paper.doi}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def init(ctx: click.Context):
    """Initialise the database, PDF directory and config file."""
    cfg = _load(ctx)
    from papershelf.config import write_default_config

    _open_db(cfg)
    click.echo(f"Database initialised at {cfg.database.path}")

    pdf_dir = Path(cfg.database.pdf_dir).expanduser()
    pdf_dir.mkdir(parents=True, exist_ok=True)
    click.echo(f"PDF files will be stored in {pdf_dir}")

    config_path = ctx.obj.get("config_path") or DEFAULT_CONFIG_PATH
    existed = Path(config_path).expanduser().exists()
    written = write_default_config(config_path)
    if existed:
        click.echo(f"Config already exists: {written}")
    else:
        click.echo(f"Config written to {written}")


@main.command()
@click.argument("identifier")
@click.option("--pdf/--no-pdf", default=True, help="Download the PDF after saving")
@click.pass_context
def add(ctx: click.Context, identifier: str, pdf: bool):
    """Fetch a paper by URL, arXiv id, IACR id or DOI and save it."""
    cfg = _load(ctx)
    from papershelf.db.engine import get_session
    from papershelf.db.repository import save_paper
    from papershelf.pipeline import download_pdf, fetch_paper

    _open_db(cfg)
    click.echo(f"Fetching paper: {identifier}")
    with _reported_errors():
        paper = fetch_paper(identifier, cfg.clients)
    click.echo("Found paper:")
    _echo_paper(paper, full=False)

    try:
        with get_session() as session:
            paper_id = save_paper(session, paper)
    except DuplicatePaperError:
        click.echo("Paper is already in your library.")
        return
    click.echo(f"Saved paper with ID {paper_id}")

    if not pdf:
        return
    if not paper.pdf_url:
        click.echo("No PDF URL available for this paper.")
        return
    try:
        path = download_pdf(paper, cfg.database.pdf_dir, timeout=cfg.clients.timeout)
    except PaperShelfError as exc:
        click.echo(f"Failed to download PDF: {exc}")
        click.echo(f"Try again later with: papershelf download {paper.source} {paper.source_identifier}")
        return
    click.echo(f"PDF saved to {path}")


@main.command()
@click.argument("source", callback=_source)
@click.argument("identifier")
@click.pass_context
def get(ctx: click.Context, source: Source, identifier: str):
    """Show a stored paper."""
    cfg = _load(ctx)
    from papershelf.db.engine import get_session
    from papershelf.db.repository import get_paper_by_source_id

    _open_db(cfg)
    with _reported_errors(), get_session() as session:
        paper = get_paper_by_source_id(session, source, identifier)

    if paper is None:
        click.echo("Paper not found.")
        return
    _echo_paper(paper)


@main.command()
@click.argument("query")
@click.option("--limit", default=20, help="Max results")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int):
    """Full-text search of stored titles and abstracts."""
    cfg = _load(ctx)
    from papershelf.db.engine import get_session
    from papershelf.db.repository import match_any_terms, search_papers

    _open_db(cfg)
    with _reported_errors(), get_session() as session:
        papers = search_papers(session, match_any_terms(query), limit=limit)

    if not papers:
        click.echo(f"No papers found matching: {query}")
        return

    click.echo(f"Found {len(papers)} papers:")
    for i, paper in enumerate(papers, start=1):
        click.echo(f"\n{i}. {paper.title}")
        click.echo(f"   Authors: {', '.join(paper.author_names) or 'No authors listed'}")
        click.echo(f"   Source:  {paper.source} {paper.source_identifier}")
        if paper.doi:
            click.echo(f"   DOI:     {paper.doi}")
        if paper.abstract_text:
            preview = paper.abstract_text[:ABSTRACT_PREVIEW]
            if len(paper.abstract_text) > ABSTRACT_PREVIEW:
                preview += "..."
            click.echo(f"   Abstract: {preview}")


@main.command()
@click.argument("source", callback=_source)
@click.argument("identifier")
@click.pass_context
def download(ctx: click.Context, source: Source, identifier: str):
    """Download the PDF of a stored paper."""
    cfg = _load(ctx)
    from papershelf.db.engine import get_session
    from papershelf.db.repository import get_paper_by_source_id
    from papershelf.pipeline import download_pdf

    _open_db(cfg)
    with _reported_errors():
        with get_session() as session:
            paper = get_paper_by_source_id(session, source, identifier)
        if paper is None:
            raise click.ClickException(f"Paper not found: {source} {identifier}")
        path = download_pdf(paper, cfg.database.pdf_dir, timeout=cfg.clients.timeout)
    click.echo(f"PDF saved to {path}")


@main.command()
@click.argument("source", callback=_source)
@click.argument("identifier")
@click.pass_context
def remove(ctx: click.Context, source: Source, identifier: str):
    """Remove a paper from the library."""
    cfg = _load(ctx)
    from papershelf.db.engine import get_session
    from papershelf.db.repository import remove_paper

    _open_db(cfg)
    with get_session() as session:
        removed = remove_paper(session, source, identifier)
    if removed:
        click.echo(f"Removed {source} {identifier}")
    else:
        click.echo("Paper not found.")


@main.command()
@click.option("-y", "--yes", is_flag=True, help="Delete without asking for confirmation")
@click.pass_context
def clean(ctx: click.Context, yes: bool):
    """Delete the whole library database. Downloaded PDFs are kept."""
    cfg = _load(ctx)
    from papershelf.db.engine import dispose_engine

    if cfg.database.path == ":memory:":
        click.echo("In-memory database, nothing to delete.")
        return

    path = Path(cfg.database.path).expanduser()
    if not path.exists():
        click.echo(f"No database found at {path}")
        return

    click.echo(f"Database found at: {path}")
    if not yes and not click.confirm("Are you sure you want to delete this database?", default=False):
        click.echo("Operation cancelled")
        return

    dispose_engine()
    # SQLite keeps WAL and journal files next to the database.
    for suffix in DB_FILE_SUFFIXES:
        db_file = path.with_name(path.name + suffix)
        if db_file.exists():
            db_file.unlink()
    click.echo(f"Removed database: {path}")


if __name__ == "__main__":
    main()

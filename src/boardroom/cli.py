"""Command-line interface for running the vote engine's maintenance operations."""

import asyncio
import uuid
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from boardroom.app_logger import setup_logging
from boardroom.core.config import settings
from boardroom.db.session import dispose_engine, session_scope
from boardroom.exceptions import BoardroomError
from boardroom.voting.kinds import get_kind
from boardroom.voting.notifier import build_notifier
from boardroom.voting.service import VotingService

app = typer.Typer(help="Boardroom voting CLI")
console = Console()


def _run(coro):
    async def _wrapped():
        try:
            return await coro
        finally:
            await dispose_engine()

    return asyncio.run(_wrapped())


async def _with_service(fn):
    async with session_scope() as session:
        return await fn(VotingService(session, build_notifier(settings)))


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("boardroom.main:app", host=host, port=port, reload=reload)


@app.command("close-expired")
def close_expired():
    """Settle every open item whose voting deadline has passed."""
    closed = _run(_with_service(lambda svc: svc.close_expired()))

    table = Table(title="Closed by deadline")
    table.add_column("Kind", style="cyan")
    table.add_column("Item")
    for kind, ids in closed.items():
        for item_id in ids:
            table.add_row(kind, str(item_id))
    if table.row_count:
        console.print(table)
    console.print(f"[bold green]{sum(len(v) for v in closed.values())} item(s) closed[/bold green]")


@app.command()
def dispatch():
    """Retry delivery of completion events the notifier has not accepted."""
    result = _run(_with_service(lambda svc: svc.dispatch_pending()))
    console.print(f"[green]delivered: {len(result.delivered)}[/green]")
    if result.failed:
        console.print(f"[red]failed: {len(result.failed)}[/red]")
        raise typer.Exit(1)


@app.command()
def resync(kind: Optional[str] = typer.Option(None, help="resolution or minutes (default: both)")):
    """Recount every cached tally from the ballots and report drift."""
    try:
        target = get_kind(kind) if kind else None
    except BoardroomError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(2)

    drifted = _run(_with_service(lambda svc: svc.resync_tallies(target)))
    if not drifted:
        console.print("[bold green]All tallies match their ballots[/bold green]")
        return

    table = Table(title="Drifted tallies")
    table.add_column("Kind", style="cyan")
    table.add_column("Item")
    table.add_column("Before")
    table.add_column("After", style="green")
    for entry in drifted:
        table.add_row(entry.kind, str(entry.item_id), str(entry.before.as_dict()), str(entry.after.as_dict()))
    console.print(table)


@app.command()
def show(kind: str = typer.Argument(..., help="resolution or minutes"), item_id: uuid.UUID = typer.Argument(...)):
    """Print an item's status, tally and statistics."""
    try:
        k = get_kind(kind)
    except BoardroomError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(2)

    async def _load(svc: VotingService):
        return await svc.get_item(k, item_id), await svc.statistics(k, item_id)

    try:
        item, stats = _run(_with_service(_load))
    except BoardroomError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{k.name} {item.id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    tally = k.read_tally(item)
    rows = [
        ("title", item.title),
        ("status", item.status),
        ("deadline", str(item.voting_deadline or "-")),
        (k.affirmative_choice, str(tally.affirmative)),
        (k.negative_choice, str(tally.negative)),
        (k.abstain_choice, str(tally.abstain)),
        ("eligible voters", str(stats.total_eligible_voters)),
        ("participation", f"{stats.participation_rate}% (quorum {item.minimum_quorum}%)"),
        ("approval", f"{stats.approval_percentage}% (threshold {item.approval_threshold}%)"),
        ("margin", stats.voting_margin.description),
        ("consensus", stats.consensus_level),
        ("outcome", stats.passed_reason),
    ]
    for name, value in rows:
        table.add_row(name, value)
    console.print(table)


def main() -> None:
    setup_logging()
    app()

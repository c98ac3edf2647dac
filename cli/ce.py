"""ce -- CodeEdit review workstation CLI.

Serves a repository, searches it, and walks the matching files one at a
time: edit in $EDITOR, save, advance, mark done.

Usage:
    ce [--api-url URL] COMMAND [OPTIONS]
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from reviewdesk.config import ReviewDeskConfig
from reviewdesk.models import END_OF_QUEUE, QueueEntry, ReviewStatus
from reviewdesk.notices import Notice
from reviewdesk.workstation import ReviewWorkstation

STATUS_MARKS = {
    ReviewStatus.TODO: "○",
    ReviewStatus.IN_PROGRESS: "◐",
    ReviewStatus.DONE: "●",
}


def setup_logging(config: ReviewDeskConfig) -> None:
    """Configure Python logging."""
    level = getattr(logging, config.log_level.upper(), logging.WARNING)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))

    if config.log_format == "json":
        fmt = "%(message)s"
    else:
        fmt = "%(asctime)s %(name)-24s %(levelname)-5s %(message)s"

    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)


def make_workstation(config: ReviewDeskConfig, **kwargs) -> ReviewWorkstation:
    """Build a workstation connected to the configured CodeEdit API."""
    return ReviewWorkstation.from_config(config, **kwargs)


def _echo_notice(notice: Notice) -> None:
    click.echo(f"[{notice.kind}] {notice.text}", err=notice.kind in ("error", "warning"))


def _require_confirmed(path: str, failure: str | None) -> None:
    if failure is not None:
        raise click.ClickException(f"Checklist update for {path} failed: {failure}")


def _print_queue(queue: list[QueueEntry]) -> None:
    if not queue:
        click.echo("No files. Search or edit checklist.")
        return
    click.echo(f"Files ({len(queue)}):")
    for entry in queue:
        count = f"{entry.match_count:>4d}" if entry.match_count else "    "
        click.echo(f"  {STATUS_MARKS[entry.status]} {count}  {entry.artifact_id}:{entry.first_match_line}")


@click.group()
@click.option(
    "--api-url",
    default=None,
    envvar="REVIEWDESK_API_URL",
    help="CodeEdit API base URL.  [default: http://127.0.0.1:3000]",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, api_url: str | None, verbose: bool) -> None:
    """ce -- CodeEdit review workstation."""
    config = ReviewDeskConfig()
    if api_url:
        config.api_url = api_url
    if verbose:
        config.log_level = "DEBUG"
    setup_logging(config)
    ctx.obj = config


# ── serve ─────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("repo_root", required=False, type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--host", default=None, help="Bind address.  [default: 127.0.0.1]")
@click.option("--port", default=None, type=int, help="Port.  [default: 3000]")
def serve(repo_root: Path | None, host: str | None, port: int | None) -> None:
    """Serve REPO_ROOT (default: current directory) over HTTP."""
    import uvicorn

    from codeedit.api.app import create_app
    from codeedit.config import get_config

    cfg = get_config()
    app = create_app(repo_root=repo_root.resolve() if repo_root else None)
    click.echo(f"Scanning repository at: {app.state.repo_root}")
    uvicorn.run(app, host=host or cfg.host, port=port or cfg.port, log_level=cfg.log_level.lower())


# ── search / queue ────────────────────────────────────────────────────────


@cli.command()
@click.argument("query")
@click.option("--regex", is_flag=True, help="Treat QUERY as a regular expression.")
@click.option("--glob", default=None, help="Only files whose path ends with this suffix.")
@click.pass_obj
def search(config: ReviewDeskConfig, query: str, regex: bool, glob: str | None) -> None:
    """Search the repository and show the review queue."""

    async def run() -> list[QueueEntry]:
        async with make_workstation(config) as ws:
            ws.notices.subscribe(_echo_notice)
            await ws.refresh_statuses()
            return await ws.search(query, regex, glob)

    _print_queue(asyncio.run(run()))


@cli.command()
@click.pass_obj
def queue(config: ReviewDeskConfig) -> None:
    """Show every file that has a checklist entry."""

    async def run() -> list[QueueEntry]:
        async with make_workstation(config) as ws:
            ws.notices.subscribe(_echo_notice)
            await ws.refresh_statuses()
            return ws.queue

    _print_queue(asyncio.run(run()))


# ── mark / note ───────────────────────────────────────────────────────────


@cli.command()
@click.argument("path")
@click.argument("status", type=click.Choice([s.value for s in ReviewStatus]))
@click.pass_obj
def mark(config: ReviewDeskConfig, path: str, status: str) -> None:
    """Set the review status of PATH."""

    async def run() -> str | None:
        async with make_workstation(config) as ws:
            ws.notices.subscribe(_echo_notice)
            await ws.refresh_statuses()
            ws.set_status(path, status)
        return ws.statuses.unconfirmed.get(path)

    _require_confirmed(path, asyncio.run(run()))
    click.echo(f"✓ {path} -> {status}")


@cli.command()
@click.argument("path")
@click.argument("text")
@click.pass_obj
def note(config: ReviewDeskConfig, path: str, text: str) -> None:
    """Attach a review note to PATH."""

    async def run() -> str | None:
        async with make_workstation(config) as ws:
            ws.notices.subscribe(_echo_notice)
            await ws.refresh_statuses()
            ws.set_note(path, text)
        return ws.statuses.unconfirmed.get(path)

    _require_confirmed(path, asyncio.run(run()))
    click.echo(f"✓ Note saved for {path}")


# ── review ────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("query", default="")
@click.option("--regex", is_flag=True, help="Treat QUERY as a regular expression.")
@click.option("--glob", default=None, help="Only files whose path ends with this suffix.")
@click.option("--editor", default=None, help="Editor command (default: $EDITOR).")
@click.pass_obj
def review(config: ReviewDeskConfig, query: str, regex: bool, glob: str | None, editor: str | None) -> None:
    """Walk the queue for QUERY: edit, save and advance file by file.

    Without QUERY the queue is every file already on the checklist.
    """

    def confirm_discard() -> bool:
        return click.confirm("You have unsaved changes. Discard them?", default=False)

    async def run() -> None:
        async with make_workstation(config, confirm_discard=confirm_discard) as ws:
            ws.notices.subscribe(_echo_notice)
            await ws.refresh_statuses()
            entries = await ws.search(query, regex, glob)
            if not entries:
                click.echo("No files. Search or edit checklist.")
                return
            first = entries[0]
            if await ws.open(first.artifact_id, first.first_match_line) is None:
                return
            await _review_loop(ws, editor)

    asyncio.run(run())


async def _review_loop(ws: ReviewWorkstation, editor: str | None) -> None:
    while ws.session is not None:
        session = ws.session
        status = ws.statuses.status_of(session.artifact_id)
        flag = "  ● Unsaved" if session.dirty else ""
        click.echo(f"\n{session.artifact_id}  [{status.value}]{flag}")
        if ws.query_active:
            lines = sorted({r.start_line for r in ws.highlights})
            click.echo(f"  Matches for {ws.query!r} on lines: {', '.join(map(str, lines)) or '-'}")

        action = click.prompt(
            "[e]dit  [s]ave  [n]ext  [d]one+next  [r]eload  [q]uit",
            type=click.Choice(["e", "s", "n", "d", "r", "q"]),
            default="n",
            show_choices=False,
        )
        if action == "e":
            edited = click.edit(session.content, editor=editor, extension=Path(session.artifact_id).suffix or ".txt")
            if edited is not None and edited != session.content:
                ws.edit(edited)
        elif action == "s":
            await ws.save()
        elif action == "r":
            await ws.reload()
        elif action == "q":
            if ws.dirty and not click.confirm("You have unsaved changes. Quit anyway?", default=False):
                continue
            return
        else:
            if action == "d":
                ws.mark_done()
            result = await ws.save_and_advance()
            if result.reason == END_OF_QUEUE:
                return


# ── entry point ───────────────────────────────────────────────────────────


def main() -> None:
    """Entry point for the ce command."""
    cli()


if __name__ == "__main__":
    main()

from contextlib import contextmanager
from datetime import datetime

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bulletlog import __version__
from bulletlog.config import load_config, ensure_log_file
from bulletlog.entry import Mark
from bulletlog.errors import BulletlogError, TaskIndexError
from bulletlog.header import DATE_FORMAT
from bulletlog.listing import list_notes, list_tasks
from bulletlog.log import read_logs, write_log
from bulletlog.rewriter import add_entry, complete_task, parse_task_index

# Short names carried over from the original blt command set.
ALIASES = {
    "a": "add",
    "note": "add",
    "t": "task",
    "ls": "notes",
    "ts": "tasks",
    "comp": "complete",
}


class AliasedGroup(click.Group):
    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        # Report the canonical name so usage/help text never shows an alias.
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args


@contextmanager
def _fatal_errors():
    """Report library errors on stderr and exit 1."""
    try:
        yield
    except BulletlogError as e:
        Console(stderr=True).print(f"[red]Error: {escape(str(e))}[/red]")
        raise SystemExit(1)


def _record(entry):
    """Write a history entry; the log change already happened, so only warn."""
    try:
        write_log(entry)
    except OSError as e:
        Console(stderr=True).print(f"[yellow]Warning: history not recorded: {escape(str(e))}[/yellow]")


def _load(ctx):
    with _fatal_errors():
        config = load_config(ctx.obj.get("log_file"), ctx.obj.get("date"))
        ensure_log_file(config.log_file)
    return config


@click.group(cls=AliasedGroup)
@click.version_option(version=__version__, prog_name="blt")
@click.option("-f", "--file", "log_file", default=None,
              help="Log file to use. Overrides BULLETLOG_FILE (default: .BULLETLOG).")
@click.option("-d", "--date", default=None,
              help="Date to file entries under, YYYYMMDD. Overrides BULLETLOG_DATE.")
@click.pass_context
def main(ctx, log_file, date):
    """blt: Take a log quickly like bullets."""
    ctx.obj = {"log_file": log_file, "date": date}


def _add(ctx, mark, words):
    body = " ".join(words).strip()
    if not body:
        raise click.UsageError("Nothing to add.")

    config = _load(ctx)
    with _fatal_errors():
        entry = add_entry(config.log_file, config.date, mark, body)

    day = config.date.strftime(DATE_FORMAT)
    _record({
        "event": "task" if mark is Mark.TASK else "add",
        "entry": entry.to_line().rstrip("\n"),
        "date": day,
        "file": str(config.log_file),
    })
    Console().print(f"{escape(entry.to_line().rstrip())}  [dim]→ {day}[/dim]", highlight=False)


@main.command()
@click.argument("text", nargs=-1)
@click.pass_context
def add(ctx, text):
    """Add a note.

    Example: blt add "call the plumber"
    """
    _add(ctx, Mark.NOTE, text)


@main.command()
@click.argument("text", nargs=-1)
@click.pass_context
def task(ctx, text):
    """Add a task."""
    _add(ctx, Mark.TASK, text)


@main.command()
@click.pass_context
def notes(ctx):
    """List notes."""
    console = Console()
    config = _load(ctx)
    with _fatal_errors():
        bodies = list_notes(config.log_file)

    if not bodies:
        console.print("[dim]No notes yet.[/dim]")
        return
    for body in bodies:
        console.print(f"{Mark.NOTE.prefix}{escape(body)}", highlight=False)


@main.command()
@click.pass_context
def tasks(ctx):
    """List pending tasks with the index 'blt complete' takes."""
    console = Console()
    config = _load(ctx)
    with _fatal_errors():
        pending = list_tasks(config.log_file)

    if not pending:
        console.print("[dim]No pending tasks.[/dim]")
        return

    table = Table(title="Tasks")
    table.add_column("#", style="bold cyan", justify="right")
    table.add_column("Task")
    for index, body in pending:
        table.add_row(str(index), escape(body))

    console.print(table)


@main.command()
@click.argument("index")
@click.pass_context
def complete(ctx, index):
    """Complete the task at INDEX (see 'blt tasks')."""
    try:
        task_index = parse_task_index(index)
    except TaskIndexError as e:
        raise click.BadParameter(str(e), param_hint="INDEX")

    console = Console()
    config = _load(ctx)
    with _fatal_errors():
        entry = complete_task(config.log_file, task_index)

    if entry is None:
        console.print(f"[yellow]No pending task at index {task_index}.[/yellow]")
        return

    _record({
        "event": "complete",
        "entry": entry.to_line().rstrip("\n"),
        "index": task_index,
        "file": str(config.log_file),
    })
    console.print(f"[green]Completed[/green] {escape(entry.body)}", highlight=False)


@main.command()
@click.option("-n", "--limit", default=20, help="Number of history entries to show.")
def history(limit):
    """Show the history of changes made with blt."""
    console = Console()

    entries = read_logs(limit)
    if not entries:
        console.print("[dim]No history yet.[/dim]")
        return

    table = Table(title="History")
    table.add_column("Time", style="dim")
    table.add_column("Event", style="bold")
    table.add_column("Entry", max_width=50)
    table.add_column("File", style="cyan")

    for entry in entries:
        ts = entry.get("timestamp", "")
        if ts:
            try:
                ts = datetime.fromisoformat(ts).strftime("%m-%d %H:%M")
            except ValueError:
                pass
        table.add_row(
            ts,
            entry.get("event", ""),
            escape(entry.get("entry", "")),
            entry.get("file", ""),
        )

    console.print(table)

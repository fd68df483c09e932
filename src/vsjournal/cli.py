"""CLI entry point for vsjournal."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_traceback

from . import __version__
from .entries import create_journal_entry, create_note, ensure_layout
from .git_ops import GitError, GitRunner, is_git_repo, probe_repository
from .notify import ConsoleNotifier
from .remote import ConfigureOutcome, RemoteConfigurator
from .settings import DEFAULT_ROOT, PRIMARY_BRANCH, REMOTE_NAME
from .sync import SyncOrchestrator

install_traceback()
console = Console()


def setup_logging(verbose: bool) -> None:
    """Send debug logs, including GitPython's command log, to stderr."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=False)],
    )


def get_root(ctx: click.Context) -> Path:
    """Resolve the journal root from the --root option."""
    return ctx.obj["root"].expanduser().resolve()


@click.group()
@click.version_option(version=__version__, prog_name="vsjournal")
@click.option(
    "--root",
    "-r",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_ROOT,
    show_default=True,
    help="Journal root directory",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, root: Path, verbose: bool) -> None:
    """Keep a journal and notes in a directory synced with a Git remote."""
    ctx.ensure_object(dict)
    ctx.obj["root"] = root
    setup_logging(verbose)


@cli.command(name="create-journal-entry")
@click.pass_context
def create_journal_entry_cmd(ctx: click.Context) -> None:
    """Create today's journal entry."""
    path = create_journal_entry(get_root(ctx))
    console.print(f"[green]Journal entry:[/green] {path}", soft_wrap=True)


@cli.command(name="create-note")
@click.argument("title", required=False)
@click.pass_context
def create_note_cmd(ctx: click.Context, title: str | None) -> None:
    """Create a timestamped note, optionally titled."""
    path = create_note(get_root(ctx), title)
    console.print(f"[green]Note:[/green] {path}", soft_wrap=True)


@cli.command(name="configure-remote")
@click.argument("remote_url", required=False)
@click.pass_context
def configure_remote(ctx: click.Context, remote_url: str | None) -> None:
    """Initialize the repository and set its Git remote."""
    root = get_root(ctx)
    ensure_layout(root)

    def ask_remote_url() -> str | None:
        if remote_url:
            return remote_url
        # Interactive prompt for remote URL; an empty answer cancels
        try:
            return click.prompt(
                "Git remote URL (e.g. git@github.com:username/repository.git)",
                default="",
                show_default=False,
            )
        except click.Abort:
            return None

    configurator = RemoteConfigurator(root, notifier=ConsoleNotifier(console))
    if configurator.configure(ask_remote_url) is ConfigureOutcome.FAILED:
        sys.exit(1)


@cli.command(name="sync-now")
@click.pass_context
def sync_now(ctx: click.Context) -> None:
    """Merge remote changes, commit local ones and push."""
    orchestrator = SyncOrchestrator(get_root(ctx), notifier=ConsoleNotifier(console))
    report = orchestrator.sync()
    if not report.succeeded:
        sys.exit(1)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the repository state of the journal root."""
    root = get_root(ctx)
    runner = GitRunner()

    console.print(f"\n[bold]Root:[/bold] {root}", soft_wrap=True)
    if not root.is_dir():
        console.print("[red]Directory does not exist[/red]")
        sys.exit(1)

    if not is_git_repo(root):
        console.print("[yellow]Not a Git repository. Run 'configure-remote' first.[/yellow]")
        return

    try:
        state = probe_repository(runner, root)
        remote = runner.run(["remote", "get-url", REMOTE_NAME], root)
        changes = runner.run(["status", "--porcelain"], root)
    except GitError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        sys.exit(1)

    console.print(f"[bold]Branch:[/bold] {state.current_branch or 'no commits yet'}")
    if state.current_branch and state.current_branch != PRIMARY_BRANCH:
        console.print(f"[yellow]Not on {PRIMARY_BRANCH}; sync pushes {PRIMARY_BRANCH}[/yellow]")

    console.print(
        f"[bold]Remote:[/bold] {remote.stdout.strip() if remote.ok else 'Not configured'}",
        soft_wrap=True,
    )

    if changes.ok and changes.stdout.strip():
        lines = changes.stdout.strip().splitlines()
        console.print(f"\n[bold]Pending changes ({len(lines)}):[/bold]")
        for line in lines[:10]:
            console.print(f"  • {line}", markup=False, soft_wrap=True)
        if len(lines) > 10:
            console.print(f"  ... and {len(lines) - 10} more")
    else:
        console.print("\n[green]No uncommitted changes[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

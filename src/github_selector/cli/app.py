from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from github_selector.cli.ui import UIContext, configure_logging, get_ui
from github_selector.core.cache import RepoCache
from github_selector.core.config import load_or_create
from github_selector.core.errors import ExitCode, GitHubSelectorError, exit_code_for
from github_selector.core.paths import HOME_ENV_VAR, AppPaths
from github_selector.github.api import RepoListing, fetch_org_repos
from github_selector.github.clone import CloneOptions
from github_selector.selector import DEFAULT_FILTER_COMMAND
from github_selector.shell import DEFAULT_COMMAND_NAME, DEFAULT_FUNCTION_NAME, shell_function
from github_selector.workflow import WorkflowOptions, run_workflow

app = typer.Typer(
    name=DEFAULT_COMMAND_NAME,
    help="Pick a repository of a GitHub organization with a fuzzy finder and clone it.",
    add_completion=False,
)


def _event_printer(ui: UIContext):
    def on_event(event: str, message: str) -> None:
        if event == "cache_hit" and ui.verbose:
            ui.console.print(f"[muted]Using cached listing: {escape(message)}[/muted]")
        elif event == "partial_listing":
            ui.console.print(f"[warn]Listing is incomplete; showing {escape(message)}.[/warn]")
        elif event == "clone_start":
            ui.console.print(f"Cloning [repo]{escape(message)}[/repo]...")

    return on_event


def _status_fetcher(ui: UIContext):
    def fetch(org: str, token: str) -> RepoListing:
        with ui.console.status(f"Fetching repositories for [repo]{escape(org)}[/repo]..."):
            return fetch_org_repos(org, token)

    return fetch


@app.command()
def main(
    refresh: bool = typer.Option(
        False, "--refresh", help="Re-fetch the repository listing instead of using the cache."
    ),
    function: bool = typer.Option(
        False, "--function", help="Print a shell function that cds into the cloned repo, then exit."
    ),
    function_name: str = typer.Option(
        DEFAULT_FUNCTION_NAME, "--function-name", help="Name of the function printed by --function."
    ),
    reconfigure: bool = typer.Option(
        False, "--reconfigure", help="Prompt for token, clone directory and organization again."
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Fail instead of continuing when the listing is incomplete."
    ),
    filter_command: str = typer.Option(
        DEFAULT_FILTER_COMMAND,
        "--filter-command",
        envvar="GITHUB_SELECTOR_FILTER",
        help="Interactive filter command, run with $SHELL -c.",
    ),
    no_track: bool = typer.Option(
        False, "--no-track", help="Do not set upstream tracking for the default branch after cloning."
    ),
    home: Optional[Path] = typer.Option(
        None,
        "--home",
        envvar=HOME_ENV_VAR,
        file_okay=False,
        help="Home directory holding .config/github_selector (defaults to the user's home).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and error details."),
) -> None:
    """Select a repository with a fuzzy finder, clone it and print its path."""
    if function:
        try:
            typer.echo(shell_function(DEFAULT_COMMAND_NAME, function_name), nl=False)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--function-name") from e
        raise typer.Exit(code=int(ExitCode.OK))

    ui = get_ui(verbose=verbose)
    configure_logging(verbose)
    paths = AppPaths.default(home)

    opts = WorkflowOptions(
        refresh=refresh,
        strict=strict,
        filter_command=filter_command,
        clone=CloneOptions(track_default_branch=not no_track),
    )

    try:
        config = load_or_create(paths, ui.prompt, reconfigure=reconfigure)
        path = run_workflow(
            config,
            RepoCache(paths.cache_file),
            opts,
            fetcher=_status_fetcher(ui),
            on_event=_event_printer(ui),
        )
    except GitHubSelectorError as e:
        ui.console.print(f"[err]{escape(str(e))}[/err]")
        if ui.verbose and e.detail:
            ui.console.print(f"[muted]{escape(e.detail)}[/muted]")
        raise typer.Exit(code=exit_code_for(e))

    if path is None:
        raise typer.Exit(code=int(ExitCode.OK))

    typer.echo(str(path))

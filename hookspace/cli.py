from __future__ import annotations

import contextlib
from collections.abc import Iterator
from functools import partial
from pathlib import Path

import anyio
import click

from hookspace import git
from hookspace.config import ConfigError, ManifestError
from hookspace.log import setup_logging
from hookspace.models.project import Workspace
from hookspace.selectors import SelectorError, Selectors
from hookspace.settings import get_settings
from hookspace.store import GitStore, StoreError
from hookspace.workspace.assembler import HookNotFoundError
from hookspace.workspace.discovery import MissingConfigurationError, discover_workspace, find_root
from hookspace.workspace.pipeline import init_hooks
from hookspace.workspace.reporter import LogReporter
from hookspace.workspace.resolver import RepoInitError
from hookspace.workspace.staging import ConfigNotStagedError, check_configs_staged

_USER_ERRORS = (
    ConfigError,
    ManifestError,
    MissingConfigurationError,
    SelectorError,
    RepoInitError,
    StoreError,
    HookNotFoundError,
    ConfigNotStagedError,
    git.GitError,
)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (default: from HOOKSPACE_LOG_LEVEL or WARNING).",
)
def main(log_level: str | None) -> None:
    """hookspace - resolve nested hook projects into one ordered hook list."""
    setup_logging(log_level or get_settings().log_level)


def _workspace_options(func):
    func = click.argument("selectors", nargs=-1)(func)
    func = click.option("--skip", "skips", multiple=True, help="Skip projects under this path (repeatable).")(func)
    func = click.option(
        "--cd",
        "-C",
        "cd",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=None,
        help="Run as if started in this directory.",
    )(func)
    func = click.option(
        "--config",
        "-c",
        "config",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Use this configuration file instead of discovering projects.",
    )(func)
    return func


@main.command()
@_workspace_options
def projects(config: Path | None, cd: Path | None, skips: tuple[str, ...], selectors: tuple[str, ...]) -> None:
    """List discovered projects in resolution order."""
    with _user_errors():
        workspace, _ = _discover(config, cd, selectors, skips)
    for project in workspace.projects:
        click.echo(f"{project.idx}\t{project}")


@main.command()
@_workspace_options
@click.option("--check-staged", is_flag=True, default=False, help="Fail if a configuration file is not staged.")
def hooks(
    config: Path | None,
    cd: Path | None,
    skips: tuple[str, ...],
    selectors: tuple[str, ...],
    check_staged: bool,
) -> None:
    """Resolve and list every hook in execution order."""
    with _user_errors():
        workspace, git_root = _discover(config, cd, selectors, skips)
        if check_staged:
            anyio.run(check_configs_staged, workspace, git_root)
        store = GitStore(get_settings().home_path)
        _, resolved = anyio.run(partial(init_hooks, workspace, store, reporter=LogReporter()))

    current = None
    for hook in resolved:
        if hook.project != current:
            current = hook.project
            click.echo(f"Hooks for `{current}`:")
        click.echo(f"  {hook.idx}\t{hook}\t{hook.repo}")


@main.command("check-staged")
@_workspace_options
def check_staged_command(
    config: Path | None,
    cd: Path | None,
    skips: tuple[str, ...],
    selectors: tuple[str, ...],
) -> None:
    """Fail unless every discovered configuration file is staged."""
    with _user_errors():
        workspace, git_root = _discover(config, cd, selectors, skips)
        anyio.run(check_configs_staged, workspace, git_root)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _discover(
    config: Path | None,
    cd: Path | None,
    selectors: tuple[str, ...],
    skips: tuple[str, ...],
) -> tuple[Workspace, Path]:
    cwd = (cd or Path.cwd()).resolve()
    git_root = git.repository_root(cwd)
    config_file = config.resolve() if config else None
    root = find_root(config_file, cwd, git_root)

    path_selectors = None
    if selectors or skips:
        path_selectors = Selectors.from_args(selectors, skips, root=root, cwd=cwd)
    return discover_workspace(root, config_file, path_selectors), git_root


@contextlib.contextmanager
def _user_errors() -> Iterator[None]:
    try:
        yield
    except _USER_ERRORS as exc:
        click.echo(f"error: {exc}", err=True)
        if isinstance(exc, RepoInitError) and exc.__cause__ is not None:
            click.echo(f"  caused by: {exc.__cause__}", err=True)
        raise SystemExit(2) from None


if __name__ == "__main__":
    main()

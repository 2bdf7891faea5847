"""Repo resolution -- fetches every distinct remote repo once and shares it.

Resolution order:

1. Collect remote repo entries across all projects in declaration order,
   keeping the first entry per ``(repo, rev)`` identity.
2. Fetch the distinct set through the store, at most ``FETCH_CONCURRENCY`` at
   a time, wrapping each checkout in one shared ``RemoteRepo``.
3. Rebuild every project's ``repos`` positionally from its config: remote
   entries get the shared instance, ``local`` / ``meta`` entries get a fresh
   unshared repo.

A failed fetch does not cancel in-flight siblings.  Fetches still waiting for
a slot are skipped, the rest drain, and the first failure is raised.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from functools import partial
from typing import TYPE_CHECKING

import anyio
from anyio import to_thread
from loguru import logger

from hookspace.config import ManifestError
from hookspace.models.config import LocalRepoConfig, MetaRepoConfig, RemoteRepoConfig
from hookspace.models.hook import LocalRepo, MetaRepo, RemoteRepo, Repo
from hookspace.store.base import StoreError

if TYPE_CHECKING:
    from hookspace.models.project import Project
    from hookspace.store.base import Store
    from hookspace.workspace.reporter import HookInitReporter

FETCH_CONCURRENCY = 5

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class RepoInitError(RuntimeError):
    """A remote repo could not be fetched.  The store error is chained."""

    def __init__(self, repo: str) -> None:
        super().__init__(f"Failed to initialize repo `{repo}`")
        self.repo = repo


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def unique_remote_repos(projects: Iterable[Project]) -> list[RemoteRepoConfig]:
    """Remote entries across ``projects``, first occurrence per identity."""
    seen: set[tuple[str, str]] = set()
    unique: list[RemoteRepoConfig] = []
    for project in projects:
        for repo_config in project.config.repos:
            if isinstance(repo_config, RemoteRepoConfig) and repo_config.identity not in seen:
                seen.add(repo_config.identity)
                unique.append(repo_config)
    return unique


async def fetch_remote_repos(
    projects: Iterable[Project],
    store: Store,
    reporter: HookInitReporter | None = None,
) -> dict[tuple[str, str], RemoteRepo]:
    """Fetch every distinct remote repo once.

    Returns the shared ``RemoteRepo`` per identity.  Raises ``RepoInitError``
    (store or filesystem failure, chained) or ``ManifestError`` for the first
    failed repo.
    """
    pending = unique_remote_repos(projects)
    resolved: dict[tuple[str, str], RemoteRepo] = {}
    errors: list[Exception] = []
    limiter = anyio.CapacityLimiter(FETCH_CONCURRENCY)

    async def _fetch(repo_config: RemoteRepoConfig) -> None:
        async with limiter:
            if errors:
                logger.debug("Skipping {} after an earlier failure", repo_config.repo)
                return
            try:
                path = await store.clone(repo_config, reporter)
                repo = await to_thread.run_sync(partial(RemoteRepo.load, repo_config.repo, repo_config.rev, path))
            except (StoreError, OSError) as exc:
                logger.debug("Fetching {}@{} failed: {}", repo_config.repo, repo_config.rev, exc)
                error = RepoInitError(repo_config.repo)
                error.__cause__ = exc
                errors.append(error)
                return
            except ManifestError as exc:
                errors.append(exc)
                return
        # All tasks share one event loop and the insert never spans an await.
        resolved[repo_config.identity] = repo

    logger.debug("Fetching {} distinct remote repo(s)", len(pending))
    async with anyio.create_task_group() as tg:
        for repo_config in pending:
            tg.start_soon(_fetch, repo_config)

    if errors:
        raise errors[0]
    return resolved


async def resolve_repos(
    projects: Iterable[Project],
    store: Store,
    reporter: HookInitReporter | None = None,
) -> list[Project]:
    """Return ``projects`` with ``repos`` populated, in the same order."""
    projects = list(projects)
    remote_repos = await fetch_remote_repos(projects, store, reporter)
    return [replace(project, repos=_project_repos(project, remote_repos)) for project in projects]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _project_repos(project: Project, remote_repos: dict[tuple[str, str], RemoteRepo]) -> tuple[Repo, ...]:
    repos: list[Repo] = []
    for repo_config in project.config.repos:
        match repo_config:
            case RemoteRepoConfig():
                repos.append(remote_repos[repo_config.identity])
            case LocalRepoConfig():
                repos.append(LocalRepo(hooks=tuple(repo_config.hooks)))
            case MetaRepoConfig():
                repos.append(MetaRepo(hooks=tuple(repo_config.hooks)))
    return tuple(repos)

"""Git-backed store.

Checkouts live under a single home directory, one per ``(repo, rev)``::

    {home}/repos/{key}/

where ``key`` is a short digest of the repository URL and revision.  An
existing checkout is reused as-is.

A new checkout is prepared in a temporary sibling directory and renamed into
place, so a crash mid-clone never leaves a half-populated checkout behind.
Blocking filesystem work runs through ``anyio.to_thread.run_sync``.
"""

from __future__ import annotations

import hashlib
import os
import shutil
import tempfile
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
from anyio import to_thread
from loguru import logger

from hookspace.store.base import StoreError

if TYPE_CHECKING:
    from hookspace.models.config import RemoteRepoConfig
    from hookspace.workspace.reporter import HookInitReporter


class GitStore:
    """Store implementation that clones with the ``git`` binary."""

    def __init__(self, home: str | Path) -> None:
        self._base = Path(home) / "repos"
        self._locks: dict[tuple[str, str], anyio.Lock] = {}

    def repo_path(self, repo: RemoteRepoConfig) -> Path:
        key = hashlib.sha256(f"{repo.repo}\0{repo.rev}".encode()).hexdigest()[:16]
        return self._base / key

    async def clone(self, repo: RemoteRepoConfig, reporter: HookInitReporter | None = None) -> Path:
        target = self.repo_path(repo)
        lock = self._locks.setdefault(repo.identity, anyio.Lock())

        async with lock:
            if await to_thread.run_sync(target.is_dir):
                logger.debug("Reusing {}@{} at {}", repo.repo, repo.rev, target)
                return target

            task_id = reporter.on_clone_start(f"{repo.repo}@{repo.rev}") if reporter else None
            try:
                workdir = Path(await to_thread.run_sync(partial(_make_tempdir, self._base)))
            except OSError as exc:
                raise StoreError(f"Cannot create a checkout under `{self._base}`: {exc}") from exc
            try:
                await _git(["init", "--quiet"], workdir)
                await _git(["remote", "add", "origin", repo.repo], workdir)
                await _git(["fetch", "--quiet", "--depth", "1", "origin", repo.rev], workdir)
                await _git(["-c", "advice.detachedHead=false", "checkout", "--quiet", "FETCH_HEAD"], workdir)
                await to_thread.run_sync(partial(_move_into_place, workdir, target))
            except BaseException:
                # Clean up the partial checkout on any failure, cancellation included.
                shutil.rmtree(workdir, ignore_errors=True)
                raise
            if reporter and task_id is not None:
                reporter.on_clone_complete(task_id)

        logger.debug("Cloned {}@{} into {}", repo.repo, repo.rev, target)
        return target


# -- Helpers -------------------------------------------------------------------


def _make_tempdir(base: Path) -> str:
    base.mkdir(parents=True, exist_ok=True)
    return tempfile.mkdtemp(dir=base, prefix=".tmp-")


async def _git(args: list[str], cwd: Path) -> None:
    cmd = ["git", *args]
    env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
    try:
        result = await anyio.run_process(cmd, cwd=cwd, env=env, check=False)
    except OSError as exc:
        raise StoreError(f"Failed to run git: {exc}") from exc
    if result.returncode != 0:
        stderr = result.stderr.decode(errors="replace").strip()
        raise StoreError(f"`git {args[0]}` failed: {stderr}")


def _move_into_place(workdir: Path, target: Path) -> None:
    """Rename ``workdir`` to ``target``; a checkout another process put there first wins."""
    try:
        os.rename(workdir, target)
    except OSError as exc:
        if not target.is_dir():
            raise StoreError(f"Cannot move checkout into `{target}`: {exc}") from exc
        logger.debug("`{}` was populated concurrently, discarding own checkout", target)
        shutil.rmtree(workdir, ignore_errors=True)

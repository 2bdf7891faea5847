"""Git plumbing used around workspace resolution.

The queries the workspace needs: where the repository root is, which paths
the ignore files exclude, and which of a set of paths differ from the index.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path, PurePath

import anyio
from loguru import logger


class GitError(RuntimeError):
    """A git command failed or git is unavailable."""


def repository_root(cwd: Path | None = None) -> Path:
    """Return the absolute top-level directory of the enclosing repository."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise GitError(f"Failed to run git: {exc}") from exc
    if result.returncode != 0:
        raise GitError(f"Not inside a git repository: {result.stderr.strip()}")
    return Path(result.stdout.strip()).resolve()


async def paths_not_staged(paths: Sequence[Path], cwd: Path) -> list[Path]:
    """Return the subset of ``paths`` whose worktree content is not in the index.

    Covers both modified-but-unstaged and untracked files.  Results are
    relative to the repository root, sorted and unique.
    """
    if not paths:
        return []
    pathspec = ["--", *(str(path) for path in paths)]

    modified = await _run(["git", "diff", "--name-only", "--no-ext-diff", "-z", *pathspec], cwd)
    untracked = await _run(
        ["git", "ls-files", "--others", "--exclude-standard", "--full-name", "-z", *pathspec],
        cwd,
    )
    names = {name for name in (modified + untracked).split("\0") if name}
    logger.debug("{} of {} paths not staged", len(names), len(paths))
    return sorted(Path(name) for name in names)


async def _run(cmd: list[str], cwd: Path) -> str:
    try:
        result = await anyio.run_process(cmd, cwd=cwd, check=False)
    except OSError as exc:
        raise GitError(f"Failed to run git: {exc}") from exc
    if result.returncode != 0:
        stderr = result.stderr.decode(errors="replace").strip()
        raise GitError(f"`{' '.join(cmd[:3])}` failed: {stderr}")
    return result.stdout.decode()


def ignored_paths(cwd: Path) -> set[PurePath]:
    """Untracked paths under ``cwd`` that ignore files exclude, relative to ``cwd``.

    Honours ``.gitignore``, ``.git/info/exclude`` and ``core.excludesFile``
    (git's standard excludes) as well as per-directory ``.ignore`` files.
    Ignored directories are reported once, not file by file.  Outside a git
    repository, or without git, nothing is ignored.
    """
    base = ["git", "ls-files", "--others", "--ignored", "--directory", "--no-empty-directory", "-z"]
    ignored: set[PurePath] = set()
    for excludes in (["--exclude-standard"], ["--exclude-per-directory=.ignore"]):
        try:
            result = subprocess.run([*base, *excludes], cwd=cwd, capture_output=True, check=False)
        except OSError as exc:
            logger.debug("Not applying ignore files, git unavailable: {}", exc)
            return set()
        if result.returncode != 0:
            logger.debug("Not applying ignore files in `{}`: {}", cwd, result.stderr.decode(errors="replace").strip())
            return set()
        ignored.update(PurePath(name) for name in result.stdout.decode().split("\0") if name)
    logger.debug("{} ignored path(s) under `{}`", len(ignored), cwd)
    return ignored

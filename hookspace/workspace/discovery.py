"""Project discovery -- finds every configuration file under a workspace root.

Discovery order (deepest project first):

1. With an explicit ``--config`` file there is exactly one project; no walk.
2. Otherwise the tree below the workspace root is walked in parallel.  Every
   ``.pre-commit-config.yaml`` found becomes a project.  Directories rejected
   by the selectors or excluded by the repository's ignore files are pruned
   together with their whole subtree.
3. Projects are sorted by depth (deepest first), ties broken by relative
   path, and numbered in that order.

Deeper projects come first so that a nested project's hooks run before its
ancestors' broader selection.
"""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path, PurePath

from loguru import logger

from hookspace import git
from hookspace.config import ConfigError, ConfigNotFoundError
from hookspace.models.config import CONFIG_FILE
from hookspace.models.project import Project, Workspace
from hookspace.selectors import Selectors

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class MissingConfigurationError(LookupError):
    """No configuration file in the workspace."""

    def __init__(self) -> None:
        super().__init__(
            f"No `{CONFIG_FILE}` found in the current directory or parent directories in the repository"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def find_root(config_file: Path | None, cwd: Path, git_root: Path) -> Path:
    """Find the workspace root for an invocation from ``cwd``.

    With an explicit config file the workspace root is the git root.
    Otherwise it is the nearest directory between ``cwd`` and ``git_root``
    (inclusive) that holds a configuration file.

    Raises ``MissingConfigurationError`` if there is none.
    """
    if config_file is not None:
        return git_root

    root = _nearest_config_dir(cwd, git_root)
    logger.debug("Found workspace root at `{}`", root)
    return root


def discover_project(config_file: Path | None, cwd: Path, git_root: Path) -> Project:
    """Find the single project governing ``cwd``, without walking subdirectories."""
    if config_file is not None:
        return Project.from_config_file(config_file, root=git_root)

    root = _nearest_config_dir(cwd, git_root)
    logger.debug("Found project root at `{}`", root)
    return Project.from_config_file(root / CONFIG_FILE)


def discover_workspace(
    root: Path,
    config_file: Path | None = None,
    selectors: Selectors | None = None,
    *,
    max_workers: int | None = None,
    respect_ignores: bool = True,
) -> Workspace:
    """Discover every project below ``root`` (an absolute path).

    Paths excluded by the repository's ignore files are pruned unless
    ``respect_ignores`` is false.

    Raises ``ConfigError`` for the first configuration file that fails to
    parse and ``MissingConfigurationError`` if nothing was found.
    """
    if config_file is not None:
        project = Project.from_config_file(config_file, root=root)
        return Workspace(root=root, projects=(project,))

    ignored = git.ignored_paths(root) if respect_ignores else set()
    projects = _TreeWalker(root, selectors, ignored).run(max_workers)
    if not projects:
        raise MissingConfigurationError

    # If depth is the same, sort by relative path to have a deterministic order.
    projects.sort(key=lambda p: (-p.depth, p.relative_path.parts))
    ordered = tuple(replace(project, idx=idx) for idx, project in enumerate(projects))

    logger.debug("Discovered {} project(s): {}", len(ordered), ", ".join(str(p) for p in ordered))
    return Workspace(root=root, projects=ordered)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _nearest_config_dir(cwd: Path, git_root: Path) -> Path:
    for directory in (cwd, *cwd.parents):
        if (directory / CONFIG_FILE).is_file():
            return directory
        if directory == git_root:
            break
    raise MissingConfigurationError


class _TreeWalker:
    """Parallel directory walk collecting projects.

    Each directory is one task on a thread pool; subdirectories are submitted
    as new tasks.  ``_pending`` counts submitted-but-unfinished tasks and the
    walk is over when it drops to zero.  The first fatal configuration error
    sets ``_quit`` so that remaining tasks return without scanning.
    """

    def __init__(self, root: Path, selectors: Selectors | None, ignored: set[PurePath]) -> None:
        self._root = root
        self._selectors = selectors
        self._ignored = ignored
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._quit = threading.Event()
        self._pending = 0
        self._projects: list[Project] = []
        self._error: Exception | None = None
        self._executor: ThreadPoolExecutor | None = None

    def run(self, max_workers: int | None) -> list[Project]:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="discovery") as executor:
            self._executor = executor
            self._submit(self._root, 0)
            with self._idle:
                self._idle.wait_for(lambda: self._pending == 0)

        if self._error is not None:
            raise self._error
        return self._projects

    def _submit(self, directory: Path, depth: int) -> None:
        assert self._executor is not None
        with self._lock:
            self._pending += 1
        self._executor.submit(self._visit, directory, depth)

    def _visit(self, directory: Path, depth: int) -> None:
        try:
            if not self._quit.is_set():
                self._scan(directory, depth)
        except Exception as exc:
            self._fail(exc)
        finally:
            with self._idle:
                self._pending -= 1
                if self._pending == 0:
                    self._idle.notify_all()

    def _scan(self, directory: Path, depth: int) -> None:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as exc:
            logger.debug("Skipping unreadable directory `{}`: {}", directory, exc)
            return

        for entry in entries:
            if self._quit.is_set():
                return
            path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                if entry.name == ".git":
                    continue
                relative_path = path.relative_to(self._root)
                if relative_path in self._ignored:
                    logger.debug("Skipping ignored path `{}`", relative_path)
                    continue
                if self._selectors is not None and not self._selectors.matches_path(relative_path):
                    logger.debug("Skipping unselected path `{}`", relative_path)
                    continue
                self._submit(path, depth + 1)
            elif entry.name == CONFIG_FILE and entry.is_file(follow_symlinks=False):
                if path.relative_to(self._root) in self._ignored:
                    continue
                self._load(path, depth + 1)

    def _load(self, config_path: Path, depth: int) -> None:
        try:
            project = Project.from_config_file(config_path)
        except ConfigNotFoundError:
            # Removed between listing the directory and reading the file.
            logger.debug("Configuration `{}` disappeared during discovery", config_path)
            return
        except ConfigError as exc:
            self._fail(exc)
            return

        project = replace(project, relative_path=config_path.parent.relative_to(self._root), depth=depth)
        with self._lock:
            self._projects.append(project)

    def _fail(self, exc: Exception) -> None:
        with self._lock:
            if self._error is None:
                self._error = exc
        self._quit.set()

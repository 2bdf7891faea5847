"""Shared test fixtures: config trees on disk, a fake store, and git repos.

Nothing here touches the network.  Tests that shell out to ``git`` use the
``git_repo`` fixture, which skips when git is not installed.
"""

from __future__ import annotations

import hashlib
import shutil
import subprocess
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import anyio
import pytest
import yaml

from hookspace.models.config import CONFIG_FILE, MANIFEST_FILE
from hookspace.settings import get_settings
from hookspace.store.base import StoreError

LOCAL_CONFIG = """\
repos:
  - repo: local
    hooks:
      - id: show-cwd
        name: Show CWD
        language: python
        entry: python -c 'import os; print(os.getcwd())'
"""


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point the store home at a temp dir and drop cached settings."""
    monkeypatch.setenv("HOOKSPACE_HOME", str(tmp_path / "home"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Config trees
# ---------------------------------------------------------------------------


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def make_project(workspace_root: Path) -> Callable[..., Path]:
    """Write a config file under ``workspace_root / relative``; returns its path."""

    def _make(relative: str = ".", content: str | dict = LOCAL_CONFIG) -> Path:
        directory = workspace_root / relative
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / CONFIG_FILE
        text = content if isinstance(content, str) else yaml.safe_dump(content, sort_keys=False)
        path.write_text(text, encoding="utf-8")
        return path

    return _make


# ---------------------------------------------------------------------------
# Fake store
# ---------------------------------------------------------------------------


class FakeStore:
    """Store double that writes a manifest instead of cloning.

    ``manifests`` maps repo URL -> list of manifest hook mappings.  URLs in
    ``fail`` raise ``fail_with`` (``StoreError`` by default).  Tracks calls
    and peak concurrency.
    """

    def __init__(
        self,
        root: Path,
        manifests: dict[str, list[dict[str, Any]]],
        *,
        fail: frozenset[str] = frozenset(),
        fail_with: type[Exception] = StoreError,
        delay: float = 0.0,
    ) -> None:
        self.root = root
        self.manifests = manifests
        self.fail = fail
        self.fail_with = fail_with
        self.delay = delay
        self.calls: list[tuple[str, str]] = []
        self.completed: list[tuple[str, str]] = []
        self.active = 0
        self.max_active = 0

    async def clone(self, repo: Any, reporter: Any = None) -> Path:
        self.calls.append(repo.identity)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        task_id = reporter.on_clone_start(repo.repo) if reporter else None
        try:
            await anyio.sleep(self.delay)
            if repo.repo in self.fail:
                raise self.fail_with(f"could not reach {repo.repo}")
            path = self.root / hashlib.sha256(f"{repo.repo}@{repo.rev}".encode()).hexdigest()[:12]
            path.mkdir(parents=True, exist_ok=True)
            if repo.repo in self.manifests:
                (path / MANIFEST_FILE).write_text(yaml.safe_dump(self.manifests[repo.repo]), encoding="utf-8")
            self.completed.append(repo.identity)
            if reporter:
                reporter.on_clone_complete(task_id)
            return path
        finally:
            self.active -= 1


class RecordingReporter:
    def __init__(self) -> None:
        self.started: list[str] = []
        self.finished: list[int] = []
        self.completed = 0

    def on_clone_start(self, repo: str) -> int:
        self.started.append(repo)
        return len(self.started) - 1

    def on_clone_complete(self, id: int) -> None:
        self.finished.append(id)

    def on_complete(self) -> None:
        self.completed += 1


@pytest.fixture
def fake_store(tmp_path: Path) -> Callable[..., FakeStore]:
    def _make(manifests: dict[str, list[dict[str, Any]]] | None = None, **kwargs: Any) -> FakeStore:
        return FakeStore(tmp_path / "store", manifests or {}, **kwargs)

    return _make


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------


def run_git(cwd: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)
    return result.stdout


@pytest.fixture
def git_cmd() -> Callable[..., str]:
    """``git(cwd, *args)`` -> stdout, raising on failure."""
    return run_git


@pytest.fixture
def git_repo(workspace_root: Path) -> Path:
    """Initialise ``workspace_root`` as a git repository."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    run_git(workspace_root, "init", "--quiet")
    run_git(workspace_root, "config", "user.email", "test@example.com")
    run_git(workspace_root, "config", "user.name", "Test")
    run_git(workspace_root, "config", "commit.gpgsign", "false")
    return workspace_root

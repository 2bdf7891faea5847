"""Tests for the git-backed store, cloning from a local repository."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from hookspace.models.config import RemoteRepoConfig
from hookspace.models.hook import RemoteRepo
from hookspace.store import GitStore, Store, StoreError

pytestmark = [pytest.mark.anyio, pytest.mark.git]

MANIFEST = "- id: fmt\n  name: Format\n  entry: fmt\n  language: python\n"


@pytest.fixture
def upstream(tmp_path: Path, git_repo: Path, git_cmd: Callable[..., str]) -> str:
    """A hook repository tagged ``v1``; returned as a ``file://`` URL."""
    source = tmp_path / "upstream"
    source.mkdir()
    git_cmd(source, "init", "--quiet")
    git_cmd(source, "config", "user.email", "test@example.com")
    git_cmd(source, "config", "user.name", "Test")
    git_cmd(source, "config", "commit.gpgsign", "false")
    (source / ".pre-commit-hooks.yaml").write_text(MANIFEST, encoding="utf-8")
    git_cmd(source, "add", "-A")
    git_cmd(source, "commit", "--quiet", "-m", "hooks")
    git_cmd(source, "tag", "v1")
    return source.as_uri()


@pytest.fixture
def store(tmp_path: Path) -> GitStore:
    return GitStore(tmp_path / "home")


def test_git_store_satisfies_protocol(store: GitStore) -> None:
    assert isinstance(store, Store)


async def test_clone_checks_out_manifest(store: GitStore, upstream: str, reporter) -> None:
    config = RemoteRepoConfig(repo=upstream, rev="v1")

    path = await store.clone(config, reporter)

    assert path == store.repo_path(config)
    repo = RemoteRepo.load(upstream, "v1", path)
    assert list(repo.hooks) == ["fmt"]
    assert reporter.started == [f"{upstream}@v1"]
    assert reporter.finished == [0]


async def test_existing_checkout_is_reused(store: GitStore, upstream: str, reporter) -> None:
    config = RemoteRepoConfig(repo=upstream, rev="v1")

    first = await store.clone(config)
    marker = first / "marker"
    marker.write_text("kept", encoding="utf-8")
    second = await store.clone(config, reporter)

    assert second == first
    assert marker.read_text(encoding="utf-8") == "kept"
    assert reporter.started == []


async def test_bad_rev_leaves_nothing_behind(store: GitStore, upstream: str, tmp_path: Path) -> None:
    config = RemoteRepoConfig(repo=upstream, rev="does-not-exist")

    with pytest.raises(StoreError):
        await store.clone(config)

    assert not store.repo_path(config).exists()
    assert list((tmp_path / "home" / "repos").iterdir()) == []


def test_repo_path_depends_on_identity(store: GitStore) -> None:
    a = store.repo_path(RemoteRepoConfig(repo="https://example.com/a", rev="v1"))
    b = store.repo_path(RemoteRepoConfig(repo="https://example.com/a", rev="v2"))

    assert a != b
    assert a.parent == b.parent
    assert a == store.repo_path(RemoteRepoConfig(repo="https://example.com/a", rev="v1"))


async def test_concurrently_created_checkout_wins(
    store: GitStore,
    upstream: str,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    config = RemoteRepoConfig(repo=upstream, rev="v1")
    real_rename = os.rename

    def racing_rename(src: str | Path, dst: str | Path) -> None:
        Path(dst).mkdir()
        (Path(dst) / "winner").write_text("other process", encoding="utf-8")
        real_rename(src, dst)

    monkeypatch.setattr(os, "rename", racing_rename)

    path = await store.clone(config)

    assert path == store.repo_path(config)
    assert (path / "winner").is_file()
    assert [p.name for p in path.parent.iterdir()] == [path.name]


async def test_failed_move_raises_store_error(
    store: GitStore,
    upstream: str,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    config = RemoteRepoConfig(repo=upstream, rev="v1")

    def denied(src: str | Path, dst: str | Path) -> None:
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(os, "rename", denied)

    with pytest.raises(StoreError, match="Cannot move checkout"):
        await store.clone(config)

    assert list(store.repo_path(config).parent.iterdir()) == []


async def test_home_that_is_a_file(tmp_path: Path) -> None:
    home = tmp_path / "home"
    home.write_text("", encoding="utf-8")

    with pytest.raises(StoreError, match="Cannot create a checkout"):
        await GitStore(home).clone(RemoteRepoConfig(repo="https://example.com/a", rev="v1"))

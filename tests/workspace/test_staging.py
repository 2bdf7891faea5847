from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from hookspace.workspace.discovery import discover_workspace
from hookspace.workspace.staging import ConfigNotStagedError, check_configs_staged

pytestmark = pytest.mark.anyio


@pytest.fixture
def staged_tree(git_repo: Path, make_project: Callable[..., Path], git_cmd: Callable[..., str]) -> Path:
    for relative in (".", "pkg-a", "pkg-b"):
        make_project(relative)
    git_cmd(git_repo, "add", "-A")
    git_cmd(git_repo, "commit", "--quiet", "-m", "init")
    return git_repo


async def test_all_staged(staged_tree: Path) -> None:
    await check_configs_staged(discover_workspace(staged_tree), staged_tree)


async def test_staged_but_uncommitted_is_fine(
    staged_tree: Path,
    make_project: Callable[..., Path],
    git_cmd: Callable[..., str],
) -> None:
    make_project("pkg-c")
    git_cmd(staged_tree, "add", "pkg-c")

    await check_configs_staged(discover_workspace(staged_tree), staged_tree)


async def test_single_modified_config(staged_tree: Path) -> None:
    path = staged_tree / "pkg-a" / ".pre-commit-config.yaml"
    path.write_text("repos: []\n", encoding="utf-8")

    with pytest.raises(ConfigNotStagedError) as exc_info:
        await check_configs_staged(discover_workspace(staged_tree), staged_tree)

    assert exc_info.value.paths == [Path("pkg-a/.pre-commit-config.yaml")]
    assert str(exc_info.value) == (
        "configuration file is not staged, run `git add pkg-a/.pre-commit-config.yaml` to stage it"
    )


async def test_several_unstaged_configs_sorted(staged_tree: Path, make_project: Callable[..., Path]) -> None:
    (staged_tree / "pkg-b" / ".pre-commit-config.yaml").write_text("repos: []\n", encoding="utf-8")
    make_project("new")
    (staged_tree / ".pre-commit-config.yaml").write_text("repos: []\n", encoding="utf-8")

    with pytest.raises(ConfigNotStagedError) as exc_info:
        await check_configs_staged(discover_workspace(staged_tree), staged_tree)

    assert exc_info.value.paths == [
        Path(".pre-commit-config.yaml"),
        Path("new/.pre-commit-config.yaml"),
        Path("pkg-b/.pre-commit-config.yaml"),
    ]
    assert str(exc_info.value) == (
        "The following configuration files are not staged, `git add` them first:\n"
        "  .pre-commit-config.yaml\n"
        "  new/.pre-commit-config.yaml\n"
        "  pkg-b/.pre-commit-config.yaml"
    )


async def test_unrelated_changes_ignored(staged_tree: Path) -> None:
    (staged_tree / "pkg-a" / "main.py").write_text("print('hi')\n", encoding="utf-8")

    await check_configs_staged(discover_workspace(staged_tree), staged_tree)


async def test_paths_sorted_by_posix_form(
    workspace_root: Path,
    make_project: Callable[..., Path],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    make_project(".")
    make_project("b")
    seen: list[Path] = []

    async def fake_paths_not_staged(paths: list[Path], cwd: Path) -> list[Path]:
        seen.extend(paths)
        return [Path(f"{name}/.pre-commit-config.yaml") for name in ("z", "a-b", "a")]

    monkeypatch.setattr("hookspace.git.paths_not_staged", fake_paths_not_staged)

    with pytest.raises(ConfigNotStagedError) as exc_info:
        await check_configs_staged(discover_workspace(workspace_root), workspace_root)

    assert [p.as_posix() for p in exc_info.value.paths] == [
        "a-b/.pre-commit-config.yaml",
        "a/.pre-commit-config.yaml",
        "z/.pre-commit-config.yaml",
    ]
    assert seen == [workspace_root / "b" / ".pre-commit-config.yaml", workspace_root / ".pre-commit-config.yaml"]

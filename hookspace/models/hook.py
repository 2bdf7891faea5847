"""Resolved hook sources (``Repo``) and fully assembled hooks (``Hook``).

Repos are compared by identity, not by value: one ``RemoteRepo`` instance is
shared by every project that declares the same ``(repo, rev)`` pair.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from hookspace.config import manifest_file_in, read_manifest
from hookspace.models.config import ManifestHook, MetaHook

if TYPE_CHECKING:
    from hookspace.models.project import Project


@dataclass(frozen=True, eq=False)
class RemoteRepo:
    """A fetched repository and the hooks its manifest advertises."""

    url: str
    rev: str
    path: Path
    hooks: dict[str, ManifestHook] = field(default_factory=dict)

    @classmethod
    def load(cls, url: str, rev: str, path: Path) -> RemoteRepo:
        """Read the checkout's manifest.  Raises ``ManifestError``."""
        manifest = read_manifest(manifest_file_in(path))
        return cls(url=url, rev=rev, path=path, hooks={hook.id: hook for hook in manifest})

    def get_hook(self, hook_id: str) -> ManifestHook | None:
        return self.hooks.get(hook_id)

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True, eq=False)
class LocalRepo:
    hooks: tuple[ManifestHook, ...] = ()

    def __str__(self) -> str:
        return "local"


@dataclass(frozen=True, eq=False)
class MetaRepo:
    hooks: tuple[MetaHook, ...] = ()

    def __str__(self) -> str:
        return "meta"


type Repo = RemoteRepo | LocalRepo | MetaRepo


@dataclass(frozen=True)
class Hook:
    """One fully merged hook, ready for the executor.

    ``idx`` is the hook's position in the global execution order.
    """

    project: Project = field(repr=False)
    repo: Repo = field(repr=False, compare=False)
    idx: int

    id: str
    name: str
    entry: str
    language: str
    alias: str = ""
    files: str = ""
    exclude: str = "^$"
    types: tuple[str, ...] = ("file",)
    types_or: tuple[str, ...] = ()
    exclude_types: tuple[str, ...] = ()
    additional_dependencies: tuple[str, ...] = ()
    args: tuple[str, ...] = ()
    always_run: bool = False
    fail_fast: bool = False
    pass_filenames: bool = True
    description: str = ""
    language_version: str = "default"
    log_file: str | None = None
    require_serial: bool = False
    stages: tuple[str, ...] = ()
    """Empty means the hook runs in every stage."""
    verbose: bool = False

    @property
    def work_dir(self) -> Path:
        """Directory the hook runs in."""
        return self.project.root

    @property
    def relative_path(self) -> Path:
        """Project scope relative to the workspace root; selects the files the hook sees."""
        return self.project.relative_path

    def __str__(self) -> str:
        if self.alias:
            return f"{self.id} ({self.alias})"
        return self.id

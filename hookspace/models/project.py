"""Project and workspace data models.

A ``Project`` is one directory governed by its own configuration file; a
``Workspace`` is every project discovered under a root, in resolution order.

Both are frozen.  Discovery and repo resolution build new values with
``dataclasses.replace`` while they still own them exclusively, so nothing
observable is ever mutated after it has been handed out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from hookspace.config import read_config
from hookspace.models.config import Config
from hookspace.models.hook import Repo


@dataclass(frozen=True, eq=False)
class Project:
    root: Path
    """Absolute path of the project directory."""
    config_path: Path
    """Absolute path of the configuration file."""
    config: Config = field(repr=False)
    relative_path: Path = Path()
    """Project directory relative to the workspace root.

    Hooks run in this directory and only see files below it.  Empty when the
    configuration file was given explicitly.
    """
    depth: int = 0
    idx: int = 0
    repos: tuple[Repo, ...] = field(default=(), repr=False)
    """Resolved repos, positionally matching ``config.repos``."""

    @classmethod
    def from_config_file(cls, config_path: Path, root: Path | None = None) -> Project:
        """Load a project from its configuration file.

        ``root`` defaults to the directory containing the file.  Raises
        ``ConfigError`` subclasses from the loader.
        """
        logger.debug("Loading project configuration from `{}`", config_path)
        config = read_config(config_path)
        return cls(root=root or config_path.parent, config_path=config_path, config=config)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Project):
            return NotImplemented
        return self.config_path == other.config_path

    def __hash__(self) -> int:
        return hash(self.config_path)

    def __str__(self) -> str:
        if not self.relative_path.parts:
            return "."
        return self.relative_path.as_posix()


@dataclass(frozen=True)
class Workspace:
    root: Path
    projects: tuple[Project, ...]
    """Deepest projects first; see ``hookspace.workspace.discovery``."""

    @property
    def config_files(self) -> list[Path]:
        return [project.config_path for project in self.projects]

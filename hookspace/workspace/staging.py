"""Pre-flight check that every configuration file is staged.

Running hooks against configuration the index does not contain would not be
reproducible, so unstaged configuration is always fatal.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from hookspace import git

if TYPE_CHECKING:
    from hookspace.models.project import Workspace


class ConfigNotStagedError(RuntimeError):
    """One or more configuration files have changes not in the index.

    ``paths`` are relative to the git root, sorted.
    """

    def __init__(self, paths: list[Path]) -> None:
        self.paths = paths
        if len(paths) == 1:
            message = f"configuration file is not staged, run `git add {paths[0].as_posix()}` to stage it"
        else:
            listing = "\n".join(f"  {path.as_posix()}" for path in paths)
            message = f"The following configuration files are not staged, `git add` them first:\n{listing}"
        super().__init__(message)


async def check_configs_staged(workspace: Workspace, git_root: Path) -> None:
    """Raise ``ConfigNotStagedError`` unless every project's config is staged."""
    non_staged = await git.paths_not_staged(workspace.config_files, cwd=git_root)
    if not non_staged:
        logger.debug("All {} configuration file(s) staged", len(workspace.projects))
        return
    raise ConfigNotStagedError(sorted(non_staged, key=lambda p: p.as_posix()))

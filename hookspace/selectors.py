"""Path selectors restricting which projects discovery visits."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePath


class SelectorError(ValueError):
    """A selector names a path outside the workspace."""

    def __init__(self, selector: str, root: Path) -> None:
        super().__init__(f"Selector `{selector}` is outside the workspace root `{root}`")


@dataclass(frozen=True)
class Selectors:
    """Include / skip paths relative to the workspace root.

    An empty ``includes`` selects everything not skipped.
    """

    includes: tuple[PurePath, ...] = ()
    skips: tuple[PurePath, ...] = ()

    @classmethod
    def from_args(
        cls,
        includes: Iterable[str],
        skips: Iterable[str],
        *,
        root: Path,
        cwd: Path,
    ) -> Selectors:
        """Normalize command-line paths (relative to ``cwd``) against ``root``."""
        return cls(
            includes=tuple(_normalize(arg, root, cwd) for arg in includes),
            skips=tuple(_normalize(arg, root, cwd) for arg in skips),
        )

    def matches_path(self, path: PurePath) -> bool:
        """Whether discovery should descend into the workspace-relative ``path``.

        Ancestors of an included path match too, otherwise a nested include
        could never be reached.
        """
        if any(_contains(skip, path) for skip in self.skips):
            return False
        if not self.includes:
            return True
        return any(_contains(include, path) or _contains(path, include) for include in self.includes)


def _contains(parent: PurePath, child: PurePath) -> bool:
    return child.parts[: len(parent.parts)] == parent.parts


def _normalize(arg: str, root: Path, cwd: Path) -> PurePath:
    absolute = Path(os.path.normpath(cwd / arg))
    try:
        return PurePath(absolute.relative_to(root))
    except ValueError:
        raise SelectorError(arg, root) from None

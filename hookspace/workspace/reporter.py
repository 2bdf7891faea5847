"""Progress reporting for hook initialization.

Reporters are purely observational: nothing they do affects resolution.
"""

from __future__ import annotations

import itertools
import time
from typing import Protocol, runtime_checkable

from loguru import logger


@runtime_checkable
class HookInitReporter(Protocol):
    def on_clone_start(self, repo: str) -> int:
        """A fetch of ``repo`` started; return an id for ``on_clone_complete``."""
        ...

    def on_clone_complete(self, id: int) -> None: ...

    def on_complete(self) -> None:
        """All repos are resolved and all hooks are assembled."""
        ...


class LogReporter:
    """Reports clone progress through the log."""

    def __init__(self) -> None:
        self._ids = itertools.count()
        self._started: dict[int, tuple[str, float]] = {}

    def on_clone_start(self, repo: str) -> int:
        id = next(self._ids)
        self._started[id] = (repo, time.monotonic())
        logger.info("Cloning {}", repo)
        return id

    def on_clone_complete(self, id: int) -> None:
        repo, started = self._started.pop(id)
        logger.info("Cloned {} in {:.2f}s", repo, time.monotonic() - started)

    def on_complete(self) -> None:
        logger.debug("Hook initialization complete")

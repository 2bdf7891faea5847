"""Store interface for fetched hook repositories.

The store materializes a remote repository at a pinned revision on the local
filesystem and returns the checkout path.  Workspace resolution deduplicates
before calling ``clone``, but implementations must still tolerate concurrent
calls for the same repository.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from hookspace.models.config import RemoteRepoConfig
    from hookspace.workspace.reporter import HookInitReporter


class StoreError(RuntimeError):
    """A repository could not be fetched or checked out."""


@runtime_checkable
class Store(Protocol):
    async def clone(self, repo: RemoteRepoConfig, reporter: HookInitReporter | None = None) -> Path:
        """Return the local checkout of ``repo`` at its ``rev``.  Raises ``StoreError``."""
        ...

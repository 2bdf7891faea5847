"""Hook initialization for a discovered workspace.

Ties the stages together: resolve repos for all projects at once (so shared
remotes are fetched once), then assemble hooks project by project in
workspace order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hookspace.models.project import Workspace
from hookspace.workspace.assembler import assemble_hooks
from hookspace.workspace.resolver import resolve_repos

if TYPE_CHECKING:
    from hookspace.models.hook import Hook
    from hookspace.store.base import Store
    from hookspace.workspace.reporter import HookInitReporter


async def init_hooks(
    workspace: Workspace,
    store: Store,
    reporter: HookInitReporter | None = None,
) -> tuple[Workspace, list[Hook]]:
    """Resolve repos and assemble hooks.

    Returns the workspace with resolved projects alongside the globally
    ordered hooks.
    """
    projects = await resolve_repos(workspace.projects, store, reporter)
    resolved = Workspace(root=workspace.root, projects=tuple(projects))
    hooks = assemble_hooks(resolved.projects)

    if reporter is not None:
        reporter.on_complete()
    return resolved, hooks

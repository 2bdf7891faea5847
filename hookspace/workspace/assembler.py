"""Hook assembly -- merges configuration layers into ordered ``Hook`` values.

Merge order (later layers win, field by field):

1. Base definition: the remote manifest entry, or the inline ``local`` /
   ``meta`` definition.
2. Per-hook overrides from the project's config for that hook id.
3. Project-wide defaults (``default_language_version``, ``default_stages``),
   applied only to fields the override layer did not set.

Hooks are numbered globally: projects in workspace order, then repos and
hooks in declaration order.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from loguru import logger

from hookspace.models.config import (
    LocalRepoConfig,
    ManifestHook,
    MetaRepoConfig,
    RemoteRepoConfig,
)
from hookspace.models.hook import Hook, RemoteRepo, Repo

if TYPE_CHECKING:
    from hookspace.models.config import Config, HookOptions
    from hookspace.models.project import Project

_SEQUENCE_FIELDS = ("types", "types_or", "exclude_types", "additional_dependencies", "args", "stages")

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class HookNotFoundError(LookupError):
    """A config references a hook id the repo's manifest does not advertise."""

    def __init__(self, hook: str, repo: str) -> None:
        super().__init__(f"Hook `{hook}` not present in repo `{repo}`")
        self.hook = hook
        self.repo = repo


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class HookBuilder:
    """Accumulates the merge layers for one hook."""

    def __init__(self, project: Project, repo: Repo, hook: ManifestHook, idx: int) -> None:
        self._project = project
        self._repo = repo
        self._idx = idx
        self._fields: dict[str, Any] = hook.model_dump(exclude_none=True)
        self._explicit: set[str] = set()

    def update(self, options: HookOptions) -> None:
        """Apply the fields ``options`` sets explicitly."""
        overrides = options.explicit_fields()
        self._fields.update(overrides)
        self._explicit.update(overrides)

    def combine(self, config: Config) -> None:
        """Fill project-wide defaults into fields no override has set."""
        if "language_version" not in self._explicit:
            version = config.default_language_version.get(self._fields["language"])
            if version is not None:
                self._fields["language_version"] = version
        if "stages" not in self._explicit and config.default_stages is not None:
            self._fields["stages"] = config.default_stages

    def build(self) -> Hook:
        fields = dict(self._fields)
        for name in _SEQUENCE_FIELDS:
            if name in fields:
                fields[name] = tuple(fields[name])
        return Hook(project=self._project, repo=self._repo, idx=self._idx, **fields)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_project_hooks(project: Project, start: int = 0) -> list[Hook]:
    """Assemble the hooks of one resolved project, numbered from ``start``.

    Raises ``HookNotFoundError`` at the first unknown remote hook id; nothing
    after it is assembled.
    """
    hooks: list[Hook] = []

    # Lengths differ only if the project was never resolved; that is a bug, not a user error.
    for repo_config, repo in zip(project.config.repos, project.repos, strict=True):
        match repo_config:
            case RemoteRepoConfig():
                assert isinstance(repo, RemoteRepo)
                for hook_config in repo_config.hooks:
                    base = repo.get_hook(hook_config.id)
                    if base is None:
                        raise HookNotFoundError(hook_config.id, str(repo))
                    builder = HookBuilder(project, repo, base, start + len(hooks))
                    builder.update(hook_config)
                    builder.combine(project.config)
                    hooks.append(builder.build())
            case LocalRepoConfig():
                for hook_config in repo_config.hooks:
                    builder = HookBuilder(project, repo, hook_config, start + len(hooks))
                    builder.update(hook_config)
                    builder.combine(project.config)
                    hooks.append(builder.build())
            case MetaRepoConfig():
                for meta_hook in repo_config.hooks:
                    hook_config = ManifestHook.from_meta(meta_hook)
                    builder = HookBuilder(project, repo, hook_config, start + len(hooks))
                    builder.update(meta_hook)
                    builder.combine(project.config)
                    hooks.append(builder.build())

    logger.debug("Project `{}`: {} hook(s)", project, len(hooks))
    return hooks


def assemble_hooks(projects: Iterable[Project]) -> list[Hook]:
    """Assemble all projects' hooks into one globally numbered sequence."""
    hooks: list[Hook] = []
    for project in projects:
        hooks.extend(build_project_hooks(project, start=len(hooks)))
    return hooks

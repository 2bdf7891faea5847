"""Configuration data models.

Pure Pydantic models for ``.pre-commit-config.yaml`` (``Config``) and for the
hook manifests advertised by remote repositories (``ManifestHook``).  Parsing
from disk lives in ``hookspace.config``.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, model_validator

CONFIG_FILE = ".pre-commit-config.yaml"
MANIFEST_FILE = ".pre-commit-hooks.yaml"

# -- Hook definitions --------------------------------------------------------


class HookOptions(BaseModel):
    """Every optional hook field.

    Only fields present in the source mapping end up in ``model_fields_set``;
    that set is what an override layer contributes when layers are merged.
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    entry: str | None = None
    language: str | None = None
    alias: str | None = None
    files: str | None = None
    exclude: str | None = None
    types: list[str] | None = None
    types_or: list[str] | None = None
    exclude_types: list[str] | None = None
    additional_dependencies: list[str] | None = None
    args: list[str] | None = None
    always_run: bool | None = None
    fail_fast: bool | None = None
    pass_filenames: bool | None = None
    description: str | None = None
    language_version: str | None = None
    log_file: str | None = None
    require_serial: bool | None = None
    stages: list[str] | None = None
    verbose: bool | None = None

    def explicit_fields(self) -> dict[str, Any]:
        """Fields set in the source mapping, excluding ``id`` and nulls."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "id" and getattr(self, name) is not None
        }


class RemoteHookConfig(HookOptions):
    """A hook reference under a remote repo, with per-hook overrides."""

    id: str


class ManifestHook(HookOptions):
    """A complete hook definition (remote manifest entry or ``local`` hook)."""

    id: str
    name: str
    entry: str
    language: str

    @classmethod
    def from_meta(cls, hook: MetaHook) -> ManifestHook:
        """Normalize a meta hook into the common hook-definition shape."""
        return cls.model_validate(hook.model_dump(exclude_none=True))


META_HOOKS: dict[str, dict[str, Any]] = {
    "check-hooks-apply": {
        "name": "Check hooks apply to the repository",
        "files": r"^\.pre-commit-config\.yaml$",
    },
    "check-useless-excludes": {
        "name": "Check for useless excludes",
        "files": r"^\.pre-commit-config\.yaml$",
    },
    "identity": {
        "name": "identity",
        "verbose": True,
    },
}


class MetaHook(HookOptions):
    """A built-in hook provided by the tool itself.

    Unset fields are filled from the built-in definition, so a meta hook is
    always fully specified once parsed.
    """

    id: str
    name: str
    entry: str
    language: Literal["meta"] = "meta"

    @model_validator(mode="before")
    @classmethod
    def _fill_builtin(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        hook_id = data.get("id")
        builtin = META_HOOKS.get(hook_id) if isinstance(hook_id, str) else None
        if builtin is None:
            msg = f"unknown meta hook `{hook_id}`, expected one of: {', '.join(sorted(META_HOOKS))}"
            raise ValueError(msg)
        return {"entry": hook_id, "language": "meta", **builtin, **data}


# -- Repo entries ------------------------------------------------------------


class RemoteRepoConfig(BaseModel):
    """A repository fetched from ``repo`` at ``rev``."""

    repo: str
    rev: str
    hooks: list[RemoteHookConfig] = Field(default_factory=list)

    @property
    def identity(self) -> tuple[str, str]:
        """Deduplication key: two entries with the same identity share one fetch."""
        return (self.repo, self.rev)


class LocalRepoConfig(BaseModel):
    """Hooks defined inline in the configuration file."""

    repo: Literal["local"]
    hooks: list[ManifestHook] = Field(default_factory=list)


class MetaRepoConfig(BaseModel):
    """Built-in hooks provided by the tool."""

    repo: Literal["meta"]
    hooks: list[MetaHook] = Field(default_factory=list)


def _repo_kind(value: Any) -> str:
    repo = value.get("repo") if isinstance(value, dict) else getattr(value, "repo", None)
    if repo in ("local", "meta"):
        return repo
    return "remote"


RepoConfig = Annotated[
    Annotated[RemoteRepoConfig, Tag("remote")]
    | Annotated[LocalRepoConfig, Tag("local")]
    | Annotated[MetaRepoConfig, Tag("meta")],
    Discriminator(_repo_kind),
]


# -- Top-level config --------------------------------------------------------


class Config(BaseModel):
    """A parsed ``.pre-commit-config.yaml``."""

    model_config = ConfigDict(extra="ignore")

    repos: list[RepoConfig] = Field(default_factory=list)
    default_language_version: dict[str, str] = Field(default_factory=dict)
    default_stages: list[str] | None = None
    files: str | None = None
    exclude: str | None = None
    fail_fast: bool = False
    minimum_version: str | None = None

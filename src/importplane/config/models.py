"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (IMPORTPLANE__SECTION__KEY)
3. Repo YAML (.importplane/config.yaml)
4. Global YAML (~/.config/importplane/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    IMPORTPLANE__<SECTION>__<KEY>=<VALUE>

Examples:
    IMPORTPLANE__LOGGING__LEVEL=DEBUG
    IMPORTPLANE__RESOLVER__STUB_PATH=typings
    IMPORTPLANE__AUTOIMPORT__LAZY_EDIT=true
"""

from __future__ import annotations

import sysconfig
from collections.abc import Callable
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from importplane.config.constants import DEFAULT_STUB_PATH

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
PathPredicate = Callable[[Path, Path], bool]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        IMPORTPLANE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG traces every resolution step.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ExecutionEnvironment(BaseModel):
    """A sub-tree of the project with its own root and extra paths."""

    root: Path | None = None
    extra_paths: list[Path] = Field(default_factory=list)

    def contains(self, path: Path, is_under: PathPredicate | None = None) -> bool:
        """True when *path* is the root or below it.

        *is_under* supplies the file system's comparison (case folding); the
        default compares path parts exactly.
        """
        if self.root is None:
            return False
        if is_under is not None:
            return is_under(path, self.root)
        return path == self.root or self.root in path.parents


class ResolverConfig(BaseModel):
    """Search roots for module resolution.

    Relative paths are resolved against ``project_root``. An empty or missing
    ``project_root`` means "no project root": side-by-side lookups then stay
    in the requesting file's own directory.

    Env vars:
        IMPORTPLANE__RESOLVER__PROJECT_ROOT: Project root directory
        IMPORTPLANE__RESOLVER__STUB_PATH: Stub override directory (default: typings)
        IMPORTPLANE__RESOLVER__TYPESHED_PATH: User typeshed checkout
        IMPORTPLANE__RESOLVER__TYPESHED_FALLBACK_PATH: Bundled typeshed copy
        IMPORTPLANE__RESOLVER__USE_INTERPRETER_PATHS: Add the running interpreter's site-packages
    """

    project_root: Path | None = Field(
        default=None,
        description="Project root. Side-by-side lookups never walk above it.",
    )
    extra_paths: list[Path] = Field(
        default_factory=list,
        description="Additional import roots searched after the project root, in order.",
    )
    stub_path: Path | None = Field(
        default=Path(DEFAULT_STUB_PATH),
        description="Stub override directory. An exact match here wins over everything else.",
    )
    typeshed_path: Path | None = Field(
        default=None,
        description="User-specified typeshed checkout (stdlib/ and stubs/<dist>/ layout).",
    )
    typeshed_fallback_path: Path | None = Field(
        default=None,
        description="Bundled typeshed copy consulted after the user typeshed path.",
    )
    library_paths: list[Path] = Field(
        default_factory=list,
        description="Installed-package roots (site-packages), in search order.",
    )
    use_interpreter_paths: bool = Field(
        default=False,
        description="Append the running interpreter's purelib/platlib to library_paths.",
    )
    execution_environments: list[ExecutionEnvironment] = Field(default_factory=list)
    case_sensitive: bool | None = Field(
        default=None,
        description="File system case sensitivity. None detects it from the project root.",
    )

    @field_validator("project_root", mode="before")
    @classmethod
    def empty_root_is_none(cls, v: object) -> object:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @model_validator(mode="after")
    def resolve_relative_paths(self) -> ResolverConfig:
        root = self.project_root
        if root is not None:
            root = root.expanduser()
            self.project_root = root

        def _anchor(p: Path | None) -> Path | None:
            if p is None:
                return None
            p = p.expanduser()
            if p.is_absolute():
                return p
            return root / p if root is not None else None

        self.stub_path = _anchor(self.stub_path)
        self.typeshed_path = _anchor(self.typeshed_path)
        self.typeshed_fallback_path = _anchor(self.typeshed_fallback_path)
        self.extra_paths = [p for p in (_anchor(e) for e in self.extra_paths) if p is not None]
        self.library_paths = [p for p in (_anchor(e) for e in self.library_paths) if p is not None]
        if self.use_interpreter_paths:
            for key in ("purelib", "platlib"):
                site = Path(sysconfig.get_paths()[key])
                if site not in self.library_paths:
                    self.library_paths.append(site)
        for env in self.execution_environments:
            env.root = _anchor(env.root)
            env.extra_paths = [p for p in (_anchor(e) for e in env.extra_paths) if p is not None]
        return self

    def default_execution_environment(self) -> ExecutionEnvironment:
        return ExecutionEnvironment(root=self.project_root, extra_paths=list(self.extra_paths))

    def find_execution_environment(
        self, path: Path, is_under: PathPredicate | None = None
    ) -> ExecutionEnvironment:
        """Return the first environment whose root contains *path*."""
        for env in self.execution_environments:
            if env.contains(path, is_under):
                return env
        return self.default_execution_environment()


class AutoImportConfig(BaseModel):
    """Auto-import candidate search settings.

    Env vars:
        IMPORTPLANE__AUTOIMPORT__LAZY_EDIT: Skip computing text edits for candidates
        IMPORTPLANE__AUTOIMPORT__EXACT_MATCH_MAX_LENGTH: Words this short require exact matches
    """

    lazy_edit: bool = Field(
        default=False,
        description="Return insertion text only; callers compute edits on resolve.",
    )
    exact_match_max_length: int = Field(
        default=2,
        description="Typed words up to this length only match names exactly. "
        "TRADEOFF: Lower values return long, noisy candidate lists.",
    )
    fuzzy_similarity_limit: float = Field(
        default=0.25,
        description="Similarity limit handed to the candidate search for longer words. "
        "Any value other than 1.0 selects prefix-plus-subsequence matching.",
    )
    max_results: int = Field(
        default=500,
        description="Maximum candidates returned by the completion facade; 0 means no limit.",
    )
    include_library_files: bool = Field(
        default=True,
        description="Index files under library_paths as candidate modules.",
    )
    include_typeshed: bool = Field(
        default=False,
        description="Index typeshed stdlib and third-party stubs as candidate modules. "
        "TRADEOFF: Complete stdlib coverage at the cost of parsing thousands of stubs.",
    )

    @field_validator("exact_match_max_length", "max_results")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v


class ImportPlaneConfig(BaseModel):
    """Root configuration for importplane.

    All settings can be configured via:
    1. Environment variables: IMPORTPLANE__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    autoimport: AutoImportConfig = Field(default_factory=AutoImportConfig)

"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (IMPORTPLANE__SECTION__KEY)
3. Repo config (.importplane/config.yaml)
4. Global config (~/.config/importplane/config.yaml)
5. Built-in defaults (lowest priority)

The resolver's project root defaults to the repository root the config was
loaded for.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from importplane.config.constants import CONFIG_DIR_NAME, CONFIG_FILE_NAME
from importplane.config.models import (
    AutoImportConfig,
    ImportPlaneConfig,
    LoggingConfig,
    ResolverConfig,
)
from importplane.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/importplane/config.yaml").expanduser()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class ImportPlaneSettings(BaseSettings):
        """Root config. Env vars: IMPORTPLANE__LOGGING__LEVEL, IMPORTPLANE__RESOLVER__STUB_PATH, etc."""

        model_config = SettingsConfigDict(
            env_prefix="IMPORTPLANE__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        resolver: ResolverConfig = ResolverConfig()
        autoimport: AutoImportConfig = AutoImportConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return ImportPlaneSettings


def load_config(
    repo_root: Path | None = None, config_file: Path | None = None, **kwargs: Any
) -> ImportPlaneConfig:
    """Load config: defaults < global yaml < repo yaml < env vars < kwargs.

    Args:
        repo_root: Repository root to load config from.
                   Defaults to current working directory.
        config_file: Explicit YAML file used in place of the repo config.
                     It must exist.
        **kwargs: Override values (highest precedence), one dict per section.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax, validation errors or a missing
            explicit config file.
    """
    repo_root = (repo_root or Path.cwd()).resolve()

    yaml_config = _load_yaml(GLOBAL_CONFIG_PATH)
    if config_file is not None:
        if not config_file.is_file():
            raise ConfigError.file_not_found(str(config_file))
        repo_config = _load_yaml(config_file)
    else:
        repo_config = _load_yaml(repo_root / CONFIG_DIR_NAME / CONFIG_FILE_NAME)
    yaml_config = _deep_merge(yaml_config, repo_config)

    resolver_section = yaml_config.get("resolver")
    if not isinstance(resolver_section, dict):
        resolver_section = {}
    if "project_root" not in resolver_section:
        yaml_config = _deep_merge(yaml_config, {"resolver": {"project_root": str(repo_root)}})

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

    return ImportPlaneConfig.model_validate(settings.model_dump())

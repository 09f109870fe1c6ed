from __future__ import annotations

import random
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from paramix.constants import DEFAULT_LAUNCHED_BY
from paramix.defaults import validate_defaults
from paramix.exceptions import ConfigError
from paramix.extraction.models import ExtractionQuery
from paramix.logging import get_logger
from paramix.store import ParameterStore, RunInfo, is_reserved

__all__ = [
    "ParamixConfig",
    "RunConfig",
    "load_config",
    "get_user_config_path",
    "PROJECT_CONFIG_NAME",
]

logger = get_logger(__name__)

PROJECT_CONFIG_NAME = "paramix.yaml"

_project_config_path: ContextVar[Path | None] = ContextVar(
    "paramix_project_config_path", default=None
)


class RunConfig(BaseModel):
    """Settings for the identity of test runs.

    Attributes:
        launched_by: Value of the ``__launchedBy`` built-in parameter.
        random_seed: Seed for the run's random source. Unseeded when None;
            set it to make ``__random_*`` functions and random selections
            reproducible.
    """

    launched_by: str = DEFAULT_LAUNCHED_BY
    random_seed: int | None = None


class YamlConfigSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from YAML files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file) as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"Invalid YAML in {yaml_file}: {e}",
                    field=None,
                    value=None,
                ) from e
            if loaded is None:
                logger.warning("config_file_empty", path=str(yaml_file))
            elif not isinstance(loaded, dict):
                raise ConfigError(
                    message=f"Config file {yaml_file} must contain a mapping",
                    value=loaded,
                )
            else:
                self._config_data = loaded

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get value for a specific field from the YAML config."""
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return the complete config data."""
        return self._config_data


class ParamixConfig(BaseSettings):
    """Root configuration object.

    Example paramix.yaml:
        parameters:
          host: api.example.com
          base_url: https://${host}
          run_tag: ${__random_hex('8')}

        extractions:
          - parameter: post_id
            type: jsonpath
            query: $.post.id

        run:
          launched_by: ci
          random_seed: 42
    """

    model_config = SettingsConfigDict(
        env_prefix="PARAMIX_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    parameters: dict[str, str] = Field(default_factory=dict)
    extractions: list[ExtractionQuery] = Field(default_factory=list)
    run: RunConfig = Field(default_factory=RunConfig)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @field_validator("parameters", mode="before")
    @classmethod
    def coerce_parameter_values(cls, v: Any) -> Any:
        """Accept YAML scalars such as ``port: 8080`` as parameter text."""
        if isinstance(v, dict):
            return {
                str(k): ("" if value is None else _scalar_text(value))
                for k, value in v.items()
            }
        return v

    @field_validator("parameters")
    @classmethod
    def check_parameter_names(cls, v: dict[str, str]) -> dict[str, str]:
        reserved = sorted(name for name in v if is_reserved(name))
        if reserved:
            raise ValueError(f"reserved parameter names: {', '.join(reserved)}")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order of settings sources.

        Priority (highest to lowest):
        1. Init settings (explicit keyword arguments)
        2. Environment variables (PARAMIX_*)
        3. Project YAML config (./paramix.yaml or the --config path)
        4. User YAML config (~/.config/paramix/config.yaml)
        """
        project_config_path = (
            _project_config_path.get() or Path.cwd() / PROJECT_CONFIG_NAME
        )
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_config_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )

    def new_store(self, run: RunInfo | None = None) -> ParameterStore:
        """Create an empty store for one run configured by ``run``."""
        seed = self.run.random_seed
        return ParameterStore(
            run=run or RunInfo(launched_by=self.run.launched_by),
            rng=random.Random(seed) if seed is not None else None,
        )

    def compile_defaults(self, seed: ParameterStore | None = None) -> ParameterStore:
        """Compute the configured default parameters.

        Raises:
            ConfigValidationError: If any default cannot be computed.
        """
        return validate_defaults(
            self.parameters, seed if seed is not None else self.new_store()
        )


def _scalar_text(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/paramix/config.yaml
    """
    return Path.home() / ".config" / "paramix" / "config.yaml"


@contextmanager
def _project_config(path: Path) -> Iterator[None]:
    token = _project_config_path.set(path)
    try:
        yield
    finally:
        _project_config_path.reset(token)


def load_config(config_path: Path | None = None) -> ParamixConfig:
    """Load configuration with hierarchy: defaults -> user -> project -> env.

    Args:
        config_path: Optional path to project config file. Defaults to
            ./paramix.yaml

    Returns:
        ParamixConfig instance with merged configuration

    Raises:
        ConfigError: If a config file is not valid YAML or the merged
            configuration does not validate.
    """
    if config_path is None:
        config_path = Path.cwd() / PROJECT_CONFIG_NAME

    if not config_path.exists():
        logger.info("project_config_missing", path=str(config_path))

    try:
        with _project_config(config_path):
            return ParamixConfig()
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e

"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with SKILLCAST_ prefix
3. .env file (if SKILLCAST_ENV_FILE points at one)
4. Layered YAML config files:
   - Project config: .skillcast/config.yaml (highest)
   - User config: ~/.config/skillcast/config.yaml
   - Built-in defaults: bundled defaults/config.yaml (lowest)

Nested config uses double underscore delimiter:
  SKILLCAST_SELECTION__MATCHER=cosine
  SKILLCAST_SKILLS__LOAD_TIMEOUT=5
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import skillcast.config.sources as sources
import skillcast.config.types as types

_PROJECT_MARKERS = (".skillcast", ".git", "pyproject.toml")


def _get_env_file() -> str | None:
    """Return SKILLCAST_ENV_FILE if it names an existing file."""
    if env_file := _os.environ.get("SKILLCAST_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


def find_project_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path | None:
    """
    Find the project root directory.

    Walks up from start_path (default: cwd) looking for a .skillcast
    directory, a .git directory or a pyproject.toml.

    Returns:
        The first directory containing a marker, or None.
    """
    current = (start_path or _pathlib.Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        for marker in _PROJECT_MARKERS:
            if (candidate / marker).exists():
                return candidate
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    skillcast configuration settings.

    All settings can be overridden via environment variables with SKILLCAST_ prefix.
    For nested config, use double underscore: SKILLCAST_SELECTION__MATCHER=cosine

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (SKILLCAST_*)
    3. .env file
    4. Project config (.skillcast/config.yaml)
    5. User config (~/.config/skillcast/config.yaml)
    6. Built-in defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="SKILLCAST_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args) (highest)
        2. env_settings (SKILLCAST_* env vars)
        3. dotenv_settings (.env file)
        4. layered YAML config
        5. (defaults via Field definitions) (lowest)
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.LayeredYamlSettingsSource(settings_cls, find_project_root()),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env file."""
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    version: int = _pydantic.Field(default=1, description="Config schema version")

    skills: types.SkillsConfig = _pydantic.Field(default_factory=types.SkillsConfig)
    """Skill source settings."""

    selection: types.SelectionConfig = _pydantic.Field(default_factory=types.SelectionConfig)
    """Selection settings."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)
    """Logging settings."""

    @property
    def project_root(self) -> _pathlib.Path | None:
        """Project root detected from the current directory."""
        return find_project_root()

    def get_unknown_keys(self) -> dict[str, _typing.Any]:
        """Config keys not in the schema, as dotted paths."""
        result: dict[str, _typing.Any] = {}
        if self.model_extra:
            result.update(self.model_extra)
        for name in ("skills", "selection", "logging"):
            section: types.ConfigBase = getattr(self, name)
            result.update(section.collect_all_extra_fields(name))
        return result

    def to_display_dict(self) -> dict[str, _typing.Any]:
        """Known settings as plain data, for `config show`."""
        return {
            "version": self.version,
            "skills": self.skills.model_dump(exclude=set(self.skills.get_extra_fields())),
            "selection": self.selection.model_dump(
                exclude=set(self.selection.get_extra_fields())
            ),
            "logging": self.logging.model_dump(exclude=set(self.logging.get_extra_fields())),
        }

"""Configuration type definitions for skillcast settings.

These are the config sections nested within the main Settings class:

- SkillsConfig: where skills come from and how they are loaded
- SelectionConfig: budget, separator, matcher, conflict groups
- LoggingConfig: log level for the CLI

Design decision: All types use `extra="allow"` to preserve unknown fields.
This lets `config show` report keys that look like typos instead of
dropping them silently.
"""

import typing as _typing

import pydantic as _pydantic

import skillcast.constants as constants

# =============================================================================
# Base class with introspection
# =============================================================================


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for all config types.

    Unknown fields are preserved rather than silently dropped.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Return fields that were provided but not in the schema."""
        return dict(self.model_extra) if self.model_extra else {}

    def collect_all_extra_fields(
        self,
        prefix: str = "",
    ) -> dict[str, _typing.Any]:
        """
        Recursively collect extra fields from this config and nested configs.

        Returns a flat dict with dotted paths as keys, e.g.:
            {"selection.matchr": "cosine"}
        """
        result: dict[str, _typing.Any] = {}

        for key, value in self.get_extra_fields().items():
            path = f"{prefix}.{key}" if prefix else key
            result[path] = value

        for field_name in self.__class__.model_fields:
            value = getattr(self, field_name, None)
            if isinstance(value, ConfigBase):
                child_prefix = f"{prefix}.{field_name}" if prefix else field_name
                result.update(value.collect_all_extra_fields(child_prefix))

        return result


# =============================================================================
# Skill loading
# =============================================================================


class SkillsConfig(ConfigBase):
    """
    Skill source settings.

    YAML section: skills.*
    """

    paths: list[str] = _pydantic.Field(default_factory=list)
    """Extra skill directories, searched after $SKILLCAST_SKILL_PATH."""

    include_global: bool = True
    """Whether ~/.config/skillcast/skills is searched."""

    load_timeout: float = _pydantic.Field(default=constants.DEFAULT_LOAD_TIMEOUT, gt=0)
    """Seconds allowed for a full corpus load."""

    max_workers: int = _pydantic.Field(default=constants.DEFAULT_MAX_WORKERS, ge=1, le=64)
    """Threads used to read and parse documents."""


# =============================================================================
# Selection
# =============================================================================


class SelectionConfig(ConfigBase):
    """
    Selection settings.

    YAML section: selection.*

    Conflict groups map a group tag to the skill ids it covers:

    ```yaml
    selection:
      conflict_groups:
        database-access: [sqlalchemy-patterns, django-orm]
    ```
    """

    default_budget_chars: int = _pydantic.Field(default=constants.DEFAULT_BUDGET_CHARS, ge=1)
    """Budget used when a query does not give one."""

    separator: str = constants.DEFAULT_SEPARATOR
    """Separator between bodies; its length is charged per selected skill."""

    matcher: _typing.Literal["lexical", "cosine"] = "lexical"
    """Matcher used to rank skills."""

    conflict_groups: dict[str, list[str]] = _pydantic.Field(default_factory=dict)
    """Group tag -> skill ids sharing that scope."""


# =============================================================================
# Logging
# =============================================================================


class LoggingConfig(ConfigBase):
    """
    Logging settings.

    YAML section: logging.*
    """

    level: _typing.Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    """Log level for the skillcast logger."""

    @_pydantic.field_validator("level", mode="before")
    @classmethod
    def _upper(cls, value: _typing.Any) -> _typing.Any:
        return value.upper() if isinstance(value, str) else value

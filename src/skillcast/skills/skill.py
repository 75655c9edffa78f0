"""
Skill definition and skill document parsing.

A skill document is markdown with YAML frontmatter. The frontmatter
contains metadata; the body contains the guidance that gets injected.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import re as _re
import typing as _typing

import pydantic as _pydantic
import yaml as _yaml

import skillcast.constants as constants
import skillcast.errors as errors

# Regex to extract YAML frontmatter from markdown
_FRONTMATTER_RE = _re.compile(
    r"^---\s*\n(.*?)\n---\s*\n?(.*)$",
    _re.DOTALL,
)

_SLUG_SEPARATOR_RE = _re.compile(r"[\W_]+")


def skill_id_from_name(name: str) -> str:
    """
    Derive the stable skill id from a skill name.

    Lowercases the name and collapses every run of non-alphanumeric
    characters into a single hyphen.

    Example:
        >>> skill_id_from_name("FastAPI Best Practices")
        'fastapi-best-practices'
    """
    return _SLUG_SEPARATOR_RE.sub("-", name.lower()).strip("-")


class SkillFrontmatter(_pydantic.BaseModel):
    """
    Frontmatter parsed from a skill document.

    Required fields:
    - name: Human-readable skill name (the id is derived from it)
    - description: Trigger phrase - when the skill applies

    The optional metadata mapping carries version, priority and
    conflict-group tags.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    name: str = _pydantic.Field(
        ...,
        min_length=1,
        description="Skill name",
    )

    description: str = _pydantic.Field(
        ...,
        min_length=1,
        description="What the skill does and when to use it",
    )

    metadata: dict[str, _typing.Any] = _pydantic.Field(
        default_factory=dict,
        description="Custom metadata (version, priority, conflict-group)",
    )

    @_pydantic.field_validator("name", "description")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @_pydantic.field_validator("metadata", mode="before")
    @classmethod
    def _metadata_mapping(cls, value: _typing.Any) -> _typing.Any:
        if value is None:
            return {}
        return value

    @_pydantic.field_validator("metadata")
    @classmethod
    def _version_text(cls, value: dict[str, _typing.Any]) -> dict[str, _typing.Any]:
        # YAML reads `1.10` as the float 1.1; only strings and integers are exact.
        version = value.get("version")
        if version is None or isinstance(version, str):
            return value
        if isinstance(version, int) and not isinstance(version, bool):
            return value
        raise ValueError(
            f"metadata.version must be a string, got {version!r} (quote it in YAML)"
        )

    @property
    def version(self) -> str:
        """Version string from metadata.version (empty if absent; integers as text)."""
        value = self.metadata.get("version")
        return "" if value is None else str(value)

    @property
    def priority(self) -> int | None:
        """Declared priority from metadata.priority."""
        value = self.metadata.get("priority")
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @property
    def conflict_groups(self) -> tuple[str, ...]:
        """Conflict-group tags from metadata (string or list)."""
        raw = self.metadata.get("conflict-group", self.metadata.get("conflict_groups"))
        if raw is None:
            return ()
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, (list, tuple)):
            return ()
        return tuple(sorted({str(tag).strip() for tag in raw if str(tag).strip()}))


@_dataclasses.dataclass(frozen=True)
class Skill:
    """
    A validated skill record.

    Instances are immutable; a corpus reload creates new ones.
    """

    id: str
    """Stable identifier derived from the name."""

    name: str
    """Skill name from frontmatter."""

    description: str
    """Trigger phrase used for matching."""

    body: str
    """Guidance body (markdown after frontmatter)."""

    version: str = ""
    """Version from metadata.version."""

    declared_priority: int | None = None
    """Optional priority from metadata.priority."""

    conflict_groups: tuple[str, ...] = ()
    """Conflict-group tags declared by the document."""

    locator: str = ""
    """Where the document was read from (not part of identity)."""

    @property
    def body_size(self) -> int:
        """Number of characters in the body."""
        return len(self.body)

    @property
    def body_line_count(self) -> int:
        """Number of lines in the body."""
        return len(self.body.splitlines())

    @property
    def exceeds_soft_limit(self) -> bool:
        """Whether body exceeds the soft limit."""
        return self.body_line_count > constants.SKILL_BODY_SOFT_LIMIT

    def content_key(self) -> tuple[_typing.Any, ...]:
        """Everything that defines the skill's content (excludes locator)."""
        return (
            self.id,
            self.name,
            self.description,
            self.body,
            self.version,
            self.declared_priority,
            self.conflict_groups,
        )

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "body_size": self.body_size,
            "body_lines": self.body_line_count,
            "exceeds_limit": self.exceeds_soft_limit,
            "declared_priority": self.declared_priority,
            "conflict_groups": list(self.conflict_groups),
            "locator": self.locator,
        }


def parse_skill_markdown(content: str) -> tuple[SkillFrontmatter, str]:
    """
    Parse a skill document into frontmatter and body.

    Args:
        content: Raw markdown content.

    Returns:
        Tuple of (frontmatter, body).

    Raises:
        ValueError: If frontmatter is missing or invalid.
    """
    match = _FRONTMATTER_RE.match(content.lstrip("\ufeff"))
    if not match:
        raise ValueError("skill document must have YAML frontmatter (---)")

    frontmatter_yaml = match.group(1)
    body = match.group(2).strip()

    try:
        data = _yaml.safe_load(frontmatter_yaml) or {}
        if not isinstance(data, dict):
            raise ValueError("frontmatter must be a YAML mapping")
        frontmatter = SkillFrontmatter.model_validate(data)
    except _yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in frontmatter: {e}") from e
    except _pydantic.ValidationError as e:
        missing = sorted(
            str(err["loc"][0])
            for err in e.errors()
            if err["type"] == "missing" and err["loc"]
        )
        if missing:
            raise ValueError(f"missing required field(s): {', '.join(missing)}") from e
        raise ValueError(f"Invalid skill frontmatter: {e}") from e

    return frontmatter, body


def parse_skill(content: str, locator: str = "") -> Skill:
    """
    Parse a skill document into a validated Skill.

    Args:
        content: Raw document text.
        locator: Where the document came from (for diagnostics).

    Returns:
        Parsed Skill.

    Raises:
        MalformedDocument: If the document cannot become a Skill.
    """
    try:
        frontmatter, body = parse_skill_markdown(content)
    except ValueError as e:
        raise errors.MalformedDocument(locator, str(e)) from e

    skill_id = skill_id_from_name(frontmatter.name)
    if not skill_id:
        raise errors.MalformedDocument(
            locator, f"name {frontmatter.name!r} has no alphanumeric characters"
        )

    return Skill(
        id=skill_id,
        name=frontmatter.name,
        description=frontmatter.description,
        body=body,
        version=frontmatter.version,
        declared_priority=frontmatter.priority,
        conflict_groups=frontmatter.conflict_groups,
        locator=locator,
    )

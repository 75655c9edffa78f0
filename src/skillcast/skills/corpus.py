"""
Immutable corpus snapshots.

A Corpus is created by a full load and never mutated. Reloading yields
a new Corpus with a higher snapshot version.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import itertools as _itertools
import threading as _threading
import types as _types
import typing as _typing

import skillcast.skills.skill as skill_module

_version_counter = _itertools.count(1)
_version_lock = _threading.Lock()


def next_snapshot_version() -> int:
    """Return the next process-wide snapshot version."""
    with _version_lock:
        return next(_version_counter)


@_dataclasses.dataclass(frozen=True)
class Corpus:
    """An ordered, immutable collection of skills tagged with a version."""

    skills: tuple[skill_module.Skill, ...]
    """Skills sorted by id."""

    snapshot_version: int
    """Monotonically increasing load counter."""

    _by_id: _typing.Mapping[str, skill_module.Skill] = _dataclasses.field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.skills, key=lambda s: s.id))
        object.__setattr__(self, "skills", ordered)
        object.__setattr__(
            self, "_by_id", _types.MappingProxyType({s.id: s for s in ordered})
        )

    @classmethod
    def empty(cls) -> Corpus:
        """A corpus with no skills."""
        return cls(skills=(), snapshot_version=next_snapshot_version())

    def __len__(self) -> int:
        return len(self.skills)

    def __iter__(self) -> _typing.Iterator[skill_module.Skill]:
        return iter(self.skills)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._by_id

    @property
    def ids(self) -> tuple[str, ...]:
        """Skill ids in corpus order."""
        return tuple(s.id for s in self.skills)

    def get(self, skill_id: str) -> skill_module.Skill | None:
        """Get a skill by id."""
        return self._by_id.get(skill_id)

    def same_content(self, other: Corpus) -> bool:
        """Structural equality ignoring snapshot identity and locators."""
        return [s.content_key() for s in self.skills] == [
            s.content_key() for s in other.skills
        ]

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "snapshot_version": self.snapshot_version,
            "skill_count": len(self.skills),
            "skills": [s.to_dict() for s in self.skills],
        }

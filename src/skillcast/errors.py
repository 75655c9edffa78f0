"""
Error taxonomy for skillcast.

Document-level errors never abort a load, load-level errors always do,
and query-level errors never touch the published index.
"""

from __future__ import annotations

import typing as _typing


class SkillcastError(Exception):
    """Base class for all skillcast errors."""

    pass


class MalformedDocument(SkillcastError):
    """A skill document could not be parsed into a Skill.

    Recovered during a load: the document is skipped and the error is
    recorded as a load warning.
    """

    def __init__(self, locator: str, reason: str) -> None:
        self.locator = locator
        self.reason = reason
        super().__init__(f"Malformed skill document {locator}: {reason}")


class DuplicateSkillName(SkillcastError):
    """Two documents resolve to the same skill id. Aborts the load."""

    def __init__(self, skill_id: str, locators: _typing.Sequence[str]) -> None:
        self.skill_id = skill_id
        self.locators = tuple(locators)
        super().__init__(
            f"Duplicate skill id '{skill_id}' defined by: {', '.join(self.locators)}"
        )


class LoadTimeout(SkillcastError):
    """Loading document sources did not finish in time. Aborts the load."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Skill corpus load did not finish within {timeout:g}s")


class InvalidQuery(SkillcastError, ValueError):
    """A query was rejected before scoring (e.g. non-positive budget)."""

    pass


class InternalConsistencyError(SkillcastError):
    """A selection and a corpus disagree. Indicates a bug."""

    pass

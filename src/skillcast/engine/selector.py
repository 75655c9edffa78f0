"""
Budget-bounded, conflict-resolved selection of ranked skills.

Selection rules, in order:

1. Ids the caller excluded are removed everywhere (exclusion beats pinning).
2. Pinned skills go first, in the order given, and are never dropped.
   Pinning more than the budget marks the selection truncated and
   reports BudgetTooSmall.
3. Ranked skills are taken as the longest prefix of the ranking whose
   cumulative cost fits the remaining budget. The first skill that
   does not fit ends selection; nothing further down is considered.
4. A ranked skill sharing a conflict-group tag with a pinned or
   higher-ranked selected skill is demoted and the prefix rule is
   applied again, until no conflict remains.

Because of rule 3, the selection for a smaller budget is always a
prefix of the selection for a larger one.
"""

from __future__ import annotations

import collections.abc as _collections_abc
import dataclasses as _dataclasses
import enum as _enum
import logging as _logging
import types as _types
import typing as _typing

import skillcast.constants as constants
import skillcast.engine.index as index_module
import skillcast.engine.matcher as matcher_module
import skillcast.errors as errors
import skillcast.skills.corpus as corpus_module

_logger = _logging.getLogger(__name__)

ConflictGroups = _typing.Mapping[str, frozenset[str]]
"""Skill id -> conflict-group tags."""


class InclusionReason(str, _enum.Enum):
    """Why a skill was or was not included."""

    PINNED = "pinned"
    RANKED = "ranked"
    EXCLUDED_BY_BUDGET = "excluded-by-budget"
    EXCLUDED_BY_CONFLICT = "excluded-by-conflict"
    EXCLUDED_BY_REQUEST = "excluded-by-request"
    NOT_FOUND = "not-found"

    @property
    def is_selected(self) -> bool:
        return self in (InclusionReason.PINNED, InclusionReason.RANKED)


class DiagnosticCode(str, _enum.Enum):
    """Non-fatal conditions reported alongside a selection."""

    BUDGET_TOO_SMALL = "BudgetTooSmall"
    PINNED_CONFLICT = "PinnedConflict"


@_dataclasses.dataclass(frozen=True, eq=False)
class Selection:
    """The externally observable result of a query."""

    selected: tuple[str, ...]
    """Selected ids in injection order (pinned first, then ranked)."""

    reasons: _typing.Mapping[str, InclusionReason]
    """Reason for every selected id and every id that was left out."""

    truncated: bool
    """Whether budget limits cut anything (or pinned content overflowed)."""

    codes: tuple[DiagnosticCode, ...]
    """Diagnostic codes, e.g. BudgetTooSmall."""

    budget_chars: int
    """Budget the selection was made for."""

    used_chars: int
    """Budget consumed by the selection, separator overhead included."""

    snapshot_version: int
    """Corpus snapshot the selection refers to."""

    @property
    def excluded(self) -> tuple[str, ...]:
        """Corpus ids that were considered but left out (unknown ids are not counted)."""
        return tuple(
            i
            for i, r in self.reasons.items()
            if not r.is_selected and r is not InclusionReason.NOT_FOUND
        )

    @property
    def excluded_count(self) -> int:
        return len(self.excluded)

    def reason_for(self, skill_id: str) -> InclusionReason | None:
        return self.reasons.get(skill_id)

    def has_code(self, code: DiagnosticCode) -> bool:
        return code in self.codes

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "snapshot_version": self.snapshot_version,
            "selected": list(self.selected),
            "reasons": {i: r.value for i, r in self.reasons.items()},
            "excluded_count": self.excluded_count,
            "truncated": self.truncated,
            "codes": [c.value for c in self.codes],
            "budget_chars": self.budget_chars,
            "used_chars": self.used_chars,
        }


def validate_budget(budget_chars: _typing.Any) -> int:
    """
    Check a budget before any scoring happens.

    Raises:
        InvalidQuery: If the budget is not a positive integer.
    """
    if isinstance(budget_chars, bool) or not isinstance(budget_chars, int):
        raise errors.InvalidQuery(f"budget must be an integer, got {budget_chars!r}")
    if budget_chars <= 0:
        raise errors.InvalidQuery(f"budget must be positive, got {budget_chars}")
    return budget_chars


def build_conflict_groups(
    corpus: corpus_module.Corpus,
    configured: _collections_abc.Mapping[str, _collections_abc.Iterable[str]] | None = None,
) -> ConflictGroups:
    """
    Combine declared and configured conflict-group tags.

    Args:
        corpus: Corpus whose skills may declare tags in their metadata.
        configured: Group tag -> skill ids, from configuration. Ids not in
            the corpus are ignored.

    Returns:
        Skill id -> tags, for skills with at least one tag.
    """
    groups: dict[str, set[str]] = {}
    for skill in corpus:
        if skill.conflict_groups:
            groups.setdefault(skill.id, set()).update(skill.conflict_groups)

    for tag, members in (configured or {}).items():
        for skill_id in members:
            if skill_id in corpus:
                groups.setdefault(skill_id, set()).add(tag)
            else:
                _logger.debug("Conflict group %s names unknown skill %s", tag, skill_id)

    return _types.MappingProxyType(
        {skill_id: frozenset(tags) for skill_id, tags in sorted(groups.items())}
    )


def _take_prefix(
    candidates: _collections_abc.Sequence[str],
    remaining: int,
    cost: _collections_abc.Callable[[str], int],
) -> list[str]:
    """Longest prefix of candidates whose total cost fits remaining."""
    used = 0
    for position, skill_id in enumerate(candidates):
        item_cost = cost(skill_id)
        if used + item_cost > remaining:
            return list(candidates[:position])
        used += item_cost
    return list(candidates)


def _first_conflict(
    accepted: _collections_abc.Sequence[str],
    pinned: _collections_abc.Sequence[str],
    groups: ConflictGroups,
) -> str | None:
    """Highest-ranked accepted id that overlaps an earlier selection."""
    seen: set[str] = set()
    for skill_id in pinned:
        seen.update(groups.get(skill_id, ()))
    for skill_id in accepted:
        tags = groups.get(skill_id, frozenset())
        if tags & seen:
            return skill_id
        seen.update(tags)
    return None


def select(
    ranked: _collections_abc.Sequence[matcher_module.MatchScore],
    *,
    index: index_module.SkillIndex,
    budget_chars: int,
    pinned: _collections_abc.Sequence[str] = (),
    excluded: _collections_abc.Iterable[str] = (),
    conflict_groups: ConflictGroups | None = None,
    separator_overhead: int = len(constants.DEFAULT_SEPARATOR),
) -> Selection:
    """
    Turn a ranking into a budget-bounded selection.

    Args:
        ranked: Matcher output in ranking order.
        index: Index of the corpus the ranking was computed on.
        budget_chars: Injection budget (characters, > 0).
        pinned: Ids to force-include, in order.
        excluded: Ids to force-exclude.
        conflict_groups: Skill id -> conflict-group tags.
        separator_overhead: Fixed cost charged per selected skill.

    Returns:
        The Selection.

    Raises:
        InvalidQuery: If the budget is not a positive integer.
    """
    validate_budget(budget_chars)
    groups: ConflictGroups = conflict_groups or {}

    def cost(skill_id: str) -> int:
        skill = index.get(skill_id)
        assert skill is not None
        return skill.body_size + separator_overhead

    excluded_set = set(excluded)
    not_found: set[str] = set()
    requested_out: set[str] = set()
    for skill_id in excluded_set:
        if skill_id in index:
            requested_out.add(skill_id)
        else:
            not_found.add(skill_id)

    pinned_ids: list[str] = []
    for skill_id in pinned:
        if skill_id in excluded_set or skill_id in pinned_ids:
            continue
        if skill_id not in index:
            not_found.add(skill_id)
            continue
        pinned_ids.append(skill_id)

    codes: list[DiagnosticCode] = []
    pinned_cost = sum(cost(i) for i in pinned_ids)
    pinned_overflow = pinned_cost > budget_chars
    pinned_conflict = _first_conflict(pinned_ids[1:], pinned_ids[:1], groups) is not None

    pinned_set = set(pinned_ids)
    candidates = [
        m.skill_id
        for m in ranked
        if m.score > 0
        and m.skill_id in index
        and m.skill_id not in pinned_set
        and m.skill_id not in excluded_set
    ]

    remaining = budget_chars - pinned_cost
    conflicted: list[str] = []
    accepted = _take_prefix(candidates, remaining, cost)
    # Each pass removes one candidate, so this terminates.
    while (offender := _first_conflict(accepted, pinned_ids, groups)) is not None:
        _logger.debug("Demoting %s: conflict-group overlap", offender)
        candidates.remove(offender)
        conflicted.append(offender)
        accepted = _take_prefix(candidates, remaining, cost)

    over_budget = candidates[len(accepted):]

    if pinned_overflow or (candidates and not accepted):
        codes.append(DiagnosticCode.BUDGET_TOO_SMALL)
    if pinned_conflict:
        codes.append(DiagnosticCode.PINNED_CONFLICT)

    reasons: dict[str, InclusionReason] = {}
    for skill_id in pinned_ids:
        reasons[skill_id] = InclusionReason.PINNED
    for skill_id in accepted:
        reasons[skill_id] = InclusionReason.RANKED
    rank_position = {skill_id: pos for pos, skill_id in enumerate(m.skill_id for m in ranked)}
    left_out = sorted(
        [(i, InclusionReason.EXCLUDED_BY_BUDGET) for i in over_budget]
        + [(i, InclusionReason.EXCLUDED_BY_CONFLICT) for i in conflicted],
        key=lambda item: rank_position[item[0]],
    )
    for skill_id, reason in left_out:
        reasons[skill_id] = reason
    for skill_id in sorted(requested_out):
        reasons[skill_id] = InclusionReason.EXCLUDED_BY_REQUEST
    for skill_id in sorted(not_found):
        reasons[skill_id] = InclusionReason.NOT_FOUND

    return Selection(
        selected=tuple(pinned_ids + accepted),
        reasons=_types.MappingProxyType(reasons),
        truncated=pinned_overflow or bool(over_budget),
        codes=tuple(codes),
        budget_chars=budget_chars,
        used_chars=pinned_cost + sum(cost(i) for i in accepted),
        snapshot_version=index.snapshot_version,
    )

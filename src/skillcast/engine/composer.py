"""
Bundle composition.

Turns a Selection into the ordered content handed to the consuming
agent, together with machine-readable diagnostics explaining what was
left out and why.
"""

from __future__ import annotations

import collections.abc as _collections_abc
import dataclasses as _dataclasses
import json as _json
import typing as _typing

import skillcast.constants as constants
import skillcast.engine.selector as selector_module
import skillcast.errors as errors
import skillcast.skills.corpus as corpus_module
import skillcast.skills.loader as loader_module


@_dataclasses.dataclass(frozen=True)
class BundleEntry:
    """One skill's content in a bundle."""

    id: str
    name: str
    body: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "body": self.body}


@_dataclasses.dataclass(frozen=True, eq=False)
class BundleDiagnostics:
    """Why the bundle contains what it contains."""

    selected: tuple[str, ...]
    reasons: _typing.Mapping[str, selector_module.InclusionReason]
    excluded_count: int
    truncated: bool
    codes: tuple[selector_module.DiagnosticCode, ...]
    budget_chars: int
    used_chars: int
    snapshot_version: int
    load_warnings: tuple[loader_module.LoadWarning, ...] = ()

    @property
    def budget_too_small(self) -> bool:
        return selector_module.DiagnosticCode.BUDGET_TOO_SMALL in self.codes

    def to_dict(self) -> dict[str, _typing.Any]:
        return {
            "snapshot_version": self.snapshot_version,
            "selected": list(self.selected),
            "reasons": {i: r.value for i, r in self.reasons.items()},
            "excluded_count": self.excluded_count,
            "truncated": self.truncated,
            "codes": [c.value for c in self.codes],
            "budget_chars": self.budget_chars,
            "used_chars": self.used_chars,
            "load_warnings": [w.to_dict() for w in self.load_warnings],
        }


@_dataclasses.dataclass(frozen=True, eq=False)
class Bundle:
    """Ordered skill content plus diagnostics."""

    entries: tuple[BundleEntry, ...]
    diagnostics: BundleDiagnostics

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(e.id for e in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def render(self, separator: str = constants.DEFAULT_SEPARATOR) -> str:
        """Skill bodies joined by the separator."""
        return separator.join(e.body for e in self.entries)

    def to_dict(self, *, include_bodies: bool = True) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        if include_bodies:
            entries: list[dict[str, str]] = [e.to_dict() for e in self.entries]
        else:
            entries = [{"id": e.id, "name": e.name} for e in self.entries]
        return {
            "entries": entries,
            "diagnostics": self.diagnostics.to_dict(),
        }

    def to_json(self, *, include_bodies: bool = True, indent: int | None = 2) -> str:
        """Stable JSON encoding; identical bundles give identical text."""
        return _json.dumps(
            self.to_dict(include_bodies=include_bodies),
            indent=indent,
            ensure_ascii=False,
        )


def compose(
    corpus: corpus_module.Corpus,
    selection: selector_module.Selection,
    *,
    load_warnings: _collections_abc.Sequence[loader_module.LoadWarning] = (),
) -> Bundle:
    """
    Render a selection against the corpus it was made from.

    Raises:
        InternalConsistencyError: If the selection was made on another
            snapshot or names an id missing from the corpus.
    """
    if selection.snapshot_version != corpus.snapshot_version:
        raise errors.InternalConsistencyError(
            f"Selection for snapshot {selection.snapshot_version} composed "
            f"against snapshot {corpus.snapshot_version}"
        )

    entries: list[BundleEntry] = []
    for skill_id in selection.selected:
        skill = corpus.get(skill_id)
        if skill is None:
            raise errors.InternalConsistencyError(
                f"Selection references unknown skill '{skill_id}' "
                f"(snapshot {corpus.snapshot_version})"
            )
        entries.append(BundleEntry(id=skill.id, name=skill.name, body=skill.body))

    diagnostics = BundleDiagnostics(
        selected=selection.selected,
        reasons=selection.reasons,
        excluded_count=selection.excluded_count,
        truncated=selection.truncated,
        codes=selection.codes,
        budget_chars=selection.budget_chars,
        used_chars=selection.used_chars,
        snapshot_version=selection.snapshot_version,
        load_warnings=tuple(load_warnings),
    )
    return Bundle(entries=tuple(entries), diagnostics=diagnostics)

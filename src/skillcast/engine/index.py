"""
Read-only token index over a corpus.

The index maps normalized tokens from each skill's name and
description to the ids that contain them, and precomputes the
per-skill statistics the matchers need. It is built once per corpus
and shared by any number of concurrent queries.
"""

from __future__ import annotations

import collections as _collections
import dataclasses as _dataclasses
import math as _math
import re as _re
import types as _types
import typing as _typing

import skillcast.constants as constants
import skillcast.skills.corpus as corpus_module
import skillcast.skills.skill as skill_module

# Runs of Unicode letters/digits; underscore counts as a separator
_TOKEN_RE = _re.compile(r"[^\W_]+")


def tokenize(text: str) -> list[str]:
    """
    Split text into normalized tokens.

    Lowercases, splits on non-alphanumeric boundaries and drops tokens
    shorter than MIN_TOKEN_LENGTH. No stemming.

    Example:
        >>> tokenize("FastAPI + Pydantic v2 models")
        ['fastapi', 'pydantic', 'v2', 'models']
    """
    return [
        token
        for token in _TOKEN_RE.findall(text.lower())
        if len(token) >= constants.MIN_TOKEN_LENGTH
    ]


def skill_text(skill: skill_module.Skill) -> str:
    """The text a skill is indexed on."""
    return f"{skill.name} {skill.description}"


def _freeze(mapping: dict[str, _typing.Any]) -> _typing.Mapping[str, _typing.Any]:
    return _types.MappingProxyType(mapping)


@_dataclasses.dataclass(frozen=True, eq=False)
class SkillIndex:
    """
    Immutable index over one corpus snapshot.

    Use build_index() rather than constructing directly.
    """

    corpus: corpus_module.Corpus
    """The indexed corpus."""

    postings: _typing.Mapping[str, frozenset[str]]
    """Token -> ids of skills whose name/description contain it."""

    token_sets: _typing.Mapping[str, frozenset[str]]
    """Skill id -> distinct tokens."""

    term_frequencies: _typing.Mapping[str, _typing.Mapping[str, float]]
    """Skill id -> token -> count / total token count."""

    idf: _typing.Mapping[str, float]
    """Token -> inverse corpus frequency, ln(1 + N / df)."""

    @property
    def snapshot_version(self) -> int:
        """Version of the indexed corpus."""
        return self.corpus.snapshot_version

    @property
    def document_count(self) -> int:
        """Number of indexed skills."""
        return len(self.corpus)

    @property
    def skills(self) -> tuple[skill_module.Skill, ...]:
        """Indexed skills in corpus order."""
        return self.corpus.skills

    def get(self, skill_id: str) -> skill_module.Skill | None:
        """Get a skill by id."""
        return self.corpus.get(skill_id)

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self.corpus

    def token_weight(self, token: str) -> float:
        """IDF of a token, 0.0 if no skill contains it."""
        return self.idf.get(token, 0.0)

    def candidates(self, tokens: _typing.Iterable[str]) -> set[str]:
        """Ids of skills that contain at least one of the tokens."""
        found: set[str] = set()
        for token in tokens:
            found.update(self.postings.get(token, ()))
        return found


def build_index(corpus: corpus_module.Corpus) -> SkillIndex:
    """
    Build the index for a corpus.

    Pure and deterministic; linear in the total token count.
    """
    postings: dict[str, set[str]] = _collections.defaultdict(set)
    token_sets: dict[str, frozenset[str]] = {}
    term_frequencies: dict[str, _typing.Mapping[str, float]] = {}

    for skill in corpus:
        tokens = tokenize(skill_text(skill))
        counts = _collections.Counter(tokens)
        total = len(tokens)
        token_sets[skill.id] = frozenset(counts)
        term_frequencies[skill.id] = _freeze(
            {token: counts[token] / total for token in sorted(counts)}
        )
        for token in counts:
            postings[token].add(skill.id)

    n = len(corpus)
    idf = {
        token: _math.log(1.0 + n / len(ids))
        for token, ids in sorted(postings.items())
    }

    return SkillIndex(
        corpus=corpus,
        postings=_freeze({token: frozenset(ids) for token, ids in sorted(postings.items())}),
        token_sets=_freeze(token_sets),
        term_frequencies=_freeze(term_frequencies),
        idf=_freeze(idf),
    )

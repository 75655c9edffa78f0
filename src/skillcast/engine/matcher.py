"""
Relevance scoring of skills against a query context.

Matchers are pure: the same index and context text always produce the
same ranked list. Every matcher shares the ordering rules:

1. Higher score
2. More matched query tokens
3. Shorter description (the more specific trigger wins)
4. Lexicographic skill id

Skills scoring zero are never returned.
"""

from __future__ import annotations

import abc as _abc
import collections as _collections
import dataclasses as _dataclasses
import math as _math
import typing as _typing

import skillcast.constants as constants
import skillcast.engine.index as index_module


@_dataclasses.dataclass(frozen=True)
class MatchScore:
    """Relevance of one skill for one query."""

    skill_id: str
    score: float
    matched_token_count: int

    def to_dict(self) -> dict[str, _typing.Any]:
        return {
            "skill_id": self.skill_id,
            "score": self.score,
            "matched_token_count": self.matched_token_count,
        }


def rank_key(
    index: index_module.SkillIndex,
    match: MatchScore,
) -> tuple[float, int, int, str]:
    """Sort key implementing the total ranking order."""
    skill = index.get(match.skill_id)
    description_length = len(skill.description) if skill is not None else 0
    return (-match.score, -match.matched_token_count, description_length, match.skill_id)


class Matcher(_abc.ABC):
    """
    Base class for matchers.

    Subclasses score a single skill; candidate selection, the zero rule
    and ordering live here so every matcher ranks the same way.
    """

    name: _typing.ClassVar[str]

    def score(
        self,
        index: index_module.SkillIndex,
        context_text: str,
    ) -> list[MatchScore]:
        """
        Score every skill sharing at least one token with the context.

        Args:
            index: Index of the corpus snapshot.
            context_text: Free text describing the task.

        Returns:
            Non-zero scores in ranking order.
        """
        query_counts = _collections.Counter(index_module.tokenize(context_text))
        if not query_counts:
            return []

        results: list[MatchScore] = []
        for skill_id in sorted(index.candidates(query_counts)):
            match = self._score_skill(index, skill_id, query_counts)
            if match.score > 0:
                results.append(match)

        results.sort(key=lambda m: rank_key(index, m))
        return results

    @_abc.abstractmethod
    def _score_skill(
        self,
        index: index_module.SkillIndex,
        skill_id: str,
        query_counts: _typing.Mapping[str, int],
    ) -> MatchScore:
        """Score one candidate skill."""
        ...


class LexicalMatcher(Matcher):
    """
    IDF-weighted token overlap.

    Each distinct query token found in the skill's name/description
    contributes its inverse corpus frequency, so tokens shared by many
    skills count for less.
    """

    name = "lexical"

    def _score_skill(
        self,
        index: index_module.SkillIndex,
        skill_id: str,
        query_counts: _typing.Mapping[str, int],
    ) -> MatchScore:
        skill_tokens = index.token_sets[skill_id]
        matched = sorted(token for token in query_counts if token in skill_tokens)
        total = _math.fsum(index.token_weight(token) for token in matched)
        return MatchScore(
            skill_id=skill_id,
            score=round(total, constants.SCORE_PRECISION),
            matched_token_count=len(matched),
        )


class CosineMatcher(Matcher):
    """Cosine similarity of tf-idf vectors (query vs. name/description)."""

    name = "cosine"

    def _score_skill(
        self,
        index: index_module.SkillIndex,
        skill_id: str,
        query_counts: _typing.Mapping[str, int],
    ) -> MatchScore:
        query_total = sum(query_counts.values())
        query_vector = {
            token: (count / query_total) * index.token_weight(token)
            for token, count in query_counts.items()
        }
        skill_vector = {
            token: tf * index.token_weight(token)
            for token, tf in index.term_frequencies[skill_id].items()
        }

        matched = sorted(token for token in query_vector if token in skill_vector)
        dot = _math.fsum(query_vector[t] * skill_vector[t] for t in matched)
        query_norm = _math.sqrt(_math.fsum(v * v for v in query_vector.values()))
        skill_norm = _math.sqrt(_math.fsum(v * v for v in skill_vector.values()))
        similarity = dot / (query_norm * skill_norm) if query_norm and skill_norm else 0.0

        return MatchScore(
            skill_id=skill_id,
            score=round(similarity, constants.SCORE_PRECISION),
            matched_token_count=len(matched),
        )


_MATCHERS: dict[str, type[Matcher]] = {
    LexicalMatcher.name: LexicalMatcher,
    CosineMatcher.name: CosineMatcher,
}


def available_matchers() -> list[str]:
    """Names accepted by get_matcher()."""
    return sorted(_MATCHERS)


def get_matcher(name: str = constants.DEFAULT_MATCHER) -> Matcher:
    """
    Create a matcher by name.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return _MATCHERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown matcher '{name}'. Available: {', '.join(available_matchers())}"
        ) from None


def score(
    index: index_module.SkillIndex,
    context_text: str,
    matcher: Matcher | None = None,
) -> list[MatchScore]:
    """Rank skills for a context using the given (or default) matcher."""
    return (matcher or LexicalMatcher()).score(index, context_text)

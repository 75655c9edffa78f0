"""
Tests for matchers.

Tests verify that:
- The lexical matcher ranks by summed IDF of matched tokens
- Ties break on matched count, description length, then id
- Zero-score skills are never returned
- The cosine matcher follows the same rules
"""

import math as _math
import typing as _typing

import pytest as _pytest

import skillcast.engine.index as index
import skillcast.engine.matcher as matcher
import skillcast.skills as skills

QUERY = "best practices for fastapi pydantic models"


class TestLexicalMatcher:
    """Tests for LexicalMatcher."""

    def test_example_ranking(self, sample_index: index.SkillIndex) -> None:
        ranked = matcher.LexicalMatcher().score(sample_index, QUERY)

        assert [m.skill_id for m in ranked] == ["fastapi", "python"]
        assert ranked[0].matched_token_count == 4
        assert ranked[1].matched_token_count == 2

    def test_score_is_sum_of_idf(self, sample_index: index.SkillIndex) -> None:
        ranked = matcher.LexicalMatcher().score(sample_index, QUERY)
        expected = round(2 * _math.log(2.5) + 2 * _math.log(4.0), 9)
        assert ranked[0].score == expected

    def test_repeated_query_tokens_count_once(self, sample_index: index.SkillIndex) -> None:
        once = matcher.LexicalMatcher().score(sample_index, "fastapi")
        many = matcher.LexicalMatcher().score(sample_index, "fastapi fastapi FASTAPI")
        assert once == many

    def test_zero_scores_never_returned(self, sample_index: index.SkillIndex) -> None:
        ranked = matcher.LexicalMatcher().score(sample_index, QUERY)
        assert "javascript" not in {m.skill_id for m in ranked}
        assert all(m.score > 0 for m in ranked)

    def test_no_tokens_no_matches(self, sample_index: index.SkillIndex) -> None:
        assert matcher.LexicalMatcher().score(sample_index, "a ? !") == []

    def test_deterministic(self, sample_index: index.SkillIndex) -> None:
        m = matcher.LexicalMatcher()
        assert m.score(sample_index, QUERY) == m.score(sample_index, QUERY)

    def test_shorter_description_wins_tie(
        self,
        make_corpus: _typing.Callable[..., skills.Corpus],
    ) -> None:
        c = make_corpus(
            {"id": "verbose", "name": "Verbose", "description": "lint code carefully"},
            {"id": "terse", "name": "Terse", "description": "lint code"},
        )
        ranked = matcher.LexicalMatcher().score(index.build_index(c), "lint code")
        assert [m.skill_id for m in ranked] == ["terse", "verbose"]
        assert ranked[0].score == ranked[1].score

    def test_id_breaks_remaining_tie(
        self,
        make_corpus: _typing.Callable[..., skills.Corpus],
    ) -> None:
        c = make_corpus(
            {"id": "zed", "name": "Zed", "description": "lint code"},
            {"id": "ant", "name": "Ant", "description": "lint code"},
        )
        ranked = matcher.LexicalMatcher().score(index.build_index(c), "lint")
        assert [m.skill_id for m in ranked] == ["ant", "zed"]

    def test_empty_corpus(self) -> None:
        idx = index.build_index(skills.Corpus.empty())
        assert matcher.LexicalMatcher().score(idx, QUERY) == []


class TestCosineMatcher:
    """Tests for CosineMatcher."""

    def test_example_ranking(self, sample_index: index.SkillIndex) -> None:
        ranked = matcher.CosineMatcher().score(sample_index, QUERY)
        assert [m.skill_id for m in ranked] == ["fastapi", "python"]

    def test_scores_bounded(self, sample_index: index.SkillIndex) -> None:
        for m in matcher.CosineMatcher().score(sample_index, QUERY):
            assert 0 < m.score <= 1

    def test_identical_text_scores_one(
        self,
        make_corpus: _typing.Callable[..., skills.Corpus],
    ) -> None:
        c = make_corpus(
            {"id": "docker", "name": "Docker", "description": "container images"},
            {"id": "kube", "name": "Kube", "description": "cluster deployments"},
        )
        ranked = matcher.CosineMatcher().score(
            index.build_index(c), "Docker container images"
        )
        assert ranked[0].skill_id == "docker"
        assert ranked[0].score == _pytest.approx(1.0)


class TestMatcherRegistry:
    """Tests for get_matcher() and score()."""

    def test_available(self) -> None:
        assert matcher.available_matchers() == ["cosine", "lexical"]

    @_pytest.mark.parametrize("name", ["lexical", "cosine"])
    def test_get_matcher(self, name: str) -> None:
        assert matcher.get_matcher(name).name == name

    def test_unknown_matcher(self) -> None:
        with _pytest.raises(ValueError, match="Unknown matcher 'fuzzy'"):
            matcher.get_matcher("fuzzy")

    def test_score_defaults_to_lexical(self, sample_index: index.SkillIndex) -> None:
        assert matcher.score(sample_index, QUERY) == matcher.LexicalMatcher().score(
            sample_index, QUERY
        )

    def test_match_score_to_dict(self) -> None:
        m = matcher.MatchScore(skill_id="x", score=1.5, matched_token_count=2)
        assert m.to_dict() == {"skill_id": "x", "score": 1.5, "matched_token_count": 2}

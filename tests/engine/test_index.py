"""
Tests for tokenization and the skill index.

Tests verify that:
- Tokenization is lowercase, Unicode-aware and drops short tokens
- Postings, token sets and term frequencies cover name + description
- IDF follows ln(1 + N / df)
"""

import math as _math
import typing as _typing

import pytest as _pytest

import skillcast.engine.index as index
import skillcast.skills as skills


class TestTokenize:
    """Tests for tokenize()."""

    def test_lowercases_and_splits(self) -> None:
        assert index.tokenize("FastAPI + Pydantic v2 models") == [
            "fastapi",
            "pydantic",
            "v2",
            "models",
        ]

    def test_drops_single_characters(self) -> None:
        assert index.tokenize("a b c go") == ["go"]

    def test_underscore_splits(self) -> None:
        assert index.tokenize("snake_case") == ["snake", "case"]

    def test_unicode_letters_kept(self) -> None:
        assert index.tokenize("Größe über") == ["größe", "über"]

    def test_no_stemming(self) -> None:
        assert index.tokenize("models model") == ["models", "model"]

    def test_empty_text(self) -> None:
        assert index.tokenize("  !!  ") == []


class TestBuildIndex:
    """Tests for build_index()."""

    def test_postings_cover_name_and_description(
        self,
        sample_index: index.SkillIndex,
    ) -> None:
        assert sample_index.postings["fastapi"] == frozenset({"fastapi"})
        assert sample_index.postings["best"] == frozenset({"fastapi", "python"})
        assert sample_index.postings["development"] == frozenset({"javascript", "python"})

    def test_token_sets(self, sample_index: index.SkillIndex) -> None:
        assert sample_index.token_sets["javascript"] == frozenset(
            {"javascript", "typescript", "development"}
        )

    def test_idf_formula(self, sample_index: index.SkillIndex) -> None:
        assert sample_index.idf["best"] == _pytest.approx(_math.log(1 + 3 / 2))
        assert sample_index.idf["pydantic"] == _pytest.approx(_math.log(1 + 3 / 1))

    def test_token_weight_unknown_is_zero(self, sample_index: index.SkillIndex) -> None:
        assert sample_index.token_weight("cobol") == 0.0

    def test_term_frequencies_normalized(self, sample_index: index.SkillIndex) -> None:
        # "Python" + "python development best practices" -> python appears twice of five
        tf = sample_index.term_frequencies["python"]
        assert tf["python"] == _pytest.approx(2 / 5)
        assert sum(tf.values()) == _pytest.approx(1.0)

    def test_candidates(self, sample_index: index.SkillIndex) -> None:
        assert sample_index.candidates(["best", "typescript"]) == {
            "fastapi",
            "python",
            "javascript",
        }
        assert sample_index.candidates(["cobol"]) == set()

    def test_mappings_are_read_only(self, sample_index: index.SkillIndex) -> None:
        with _pytest.raises(TypeError):
            sample_index.idf["new"] = 1.0  # type: ignore[index]

    def test_exposes_corpus(
        self,
        sample_corpus: skills.Corpus,
        sample_index: index.SkillIndex,
    ) -> None:
        assert sample_index.snapshot_version == sample_corpus.snapshot_version
        assert sample_index.document_count == 3
        assert "python" in sample_index
        assert sample_index.get("python") is sample_corpus.get("python")

    def test_skill_without_tokens_indexed(
        self,
        make_corpus: _typing.Callable[..., skills.Corpus],
    ) -> None:
        c = make_corpus({"id": "x", "name": "X", "description": "!"})
        idx = index.build_index(c)
        assert idx.token_sets["x"] == frozenset()
        assert idx.term_frequencies["x"] == {}

    def test_empty_corpus(self) -> None:
        idx = index.build_index(skills.Corpus.empty())
        assert idx.document_count == 0
        assert dict(idx.postings) == {}

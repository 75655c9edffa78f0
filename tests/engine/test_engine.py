"""
Tests for SkillEngine.

Tests verify that:
- The example queries produce the expected bundles
- Reloads publish a new snapshot atomically
- In-flight queries keep the snapshot they started with
- Failed reloads leave the published snapshot untouched
"""

import concurrent.futures as _futures
import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import skillcast.config as config
import skillcast.engine as engine
import skillcast.engine.index as index
import skillcast.errors as errors
import skillcast.skills as skills

QUERY = "best practices for fastapi pydantic models"


@_pytest.fixture
def sample_engine(sample_source: skills.InMemorySource) -> engine.SkillEngine:
    return engine.SkillEngine.from_sources([sample_source])


class TestExampleQueries:
    """The three-skill python/javascript/fastapi corpus."""

    def test_fastapi_then_python(self, sample_engine: engine.SkillEngine) -> None:
        bundle = sample_engine.match(QUERY, 10_000)

        assert bundle.ids == ("fastapi", "python")
        assert "javascript" not in bundle.diagnostics.reasons

    def test_tiny_budget_gives_empty_bundle(self, sample_engine: engine.SkillEngine) -> None:
        fastapi = sample_engine.corpus.get("fastapi")
        assert fastapi is not None

        bundle = sample_engine.match(QUERY, fastapi.body_size - 1)

        assert bundle.entries == ()
        assert bundle.diagnostics.budget_too_small
        assert bundle.render() == ""

    def test_pinned_javascript(self, sample_engine: engine.SkillEngine) -> None:
        javascript = sample_engine.corpus.get("javascript")
        assert javascript is not None
        budget = javascript.body_size + len(sample_engine.separator)

        bundle = sample_engine.match(QUERY, budget, pinned=["javascript"])

        assert bundle.ids == ("javascript",)
        assert bundle.diagnostics.reasons["javascript"] == engine.InclusionReason.PINNED

    def test_invalid_budget(self, sample_engine: engine.SkillEngine) -> None:
        with _pytest.raises(errors.InvalidQuery):
            sample_engine.match(QUERY, 0)

    def test_cosine_matcher(self, sample_source: skills.InMemorySource) -> None:
        eng = engine.SkillEngine.from_sources(
            [sample_source], matcher=engine.get_matcher("cosine")
        )
        assert eng.match(QUERY, 10_000).ids == ("fastapi", "python")

    def test_configured_conflict_groups(self, sample_source: skills.InMemorySource) -> None:
        eng = engine.SkillEngine.from_sources(
            [sample_source], conflict_groups={"python-web": ["fastapi", "python"]}
        )
        bundle = eng.match(QUERY, 10_000)
        assert bundle.ids == ("fastapi",)
        assert bundle.diagnostics.reasons["python"] == engine.InclusionReason.EXCLUDED_BY_CONFLICT

    def test_custom_separator(self, sample_source: skills.InMemorySource) -> None:
        eng = engine.SkillEngine.from_sources([sample_source], separator="\n")
        bundle = eng.match(QUERY, 10_000)
        assert bundle.diagnostics.used_chars == sum(
            eng.corpus.get(i).body_size + 1 for i in bundle.ids  # type: ignore[union-attr]
        )


class TestQuery:
    """Tests for the Query record."""

    def test_pins_deduplicated(self) -> None:
        query = engine.Query("text", 10, pinned=("a", "b", "a"))
        assert query.pinned == ("a", "b")

    def test_excluded_frozen(self) -> None:
        query = engine.Query("text", 10, excluded={"a"})  # type: ignore[arg-type]
        assert query.excluded == frozenset({"a"})

    def test_budget_validated(self) -> None:
        with _pytest.raises(errors.InvalidQuery):
            engine.Query("text", -5)

    def test_execute(self, sample_engine: engine.SkillEngine) -> None:
        bundle = sample_engine.execute(engine.Query(QUERY, 10_000, excluded=frozenset({"python"})))
        assert bundle.ids == ("fastapi",)


class TestHotSwap:
    """Snapshot publication and reload behaviour."""

    def test_empty_engine(self) -> None:
        eng = engine.SkillEngine()
        assert len(eng.corpus) == 0
        assert eng.match(QUERY, 100).entries == ()

    def test_reload_publishes_new_snapshot(
        self,
        sample_engine: engine.SkillEngine,
        make_skill_doc: _typing.Callable[..., str],
    ) -> None:
        before = sample_engine.snapshot
        source = skills.InMemorySource({"k": make_skill_doc("Kotlin", "kotlin coroutines")})

        after = sample_engine.reload([source])

        assert sample_engine.snapshot is after
        assert after.version > before.version
        assert sample_engine.corpus.ids == ("kotlin",)
        # old snapshot untouched
        assert before.corpus.ids == ("fastapi", "javascript", "python")

    def test_reload_same_documents_structurally_equal(
        self,
        sample_engine: engine.SkillEngine,
        sample_source: skills.InMemorySource,
    ) -> None:
        before = sample_engine.corpus
        sample_engine.reload([sample_source])
        assert sample_engine.corpus.same_content(before)
        assert sample_engine.corpus.snapshot_version != before.snapshot_version

    def test_failed_reload_keeps_snapshot(
        self,
        sample_engine: engine.SkillEngine,
        make_skill_doc: _typing.Callable[..., str],
    ) -> None:
        before = sample_engine.snapshot
        dup_a = skills.InMemorySource({"a": make_skill_doc("Same", "one")})
        dup_b = skills.InMemorySource({"b": make_skill_doc("Same", "two")})

        with _pytest.raises(errors.DuplicateSkillName):
            sample_engine.reload([dup_a, dup_b])

        assert sample_engine.snapshot is before
        assert sample_engine.match(QUERY, 10_000).ids == ("fastapi", "python")

    def test_stale_publish_ignored(self, sample_engine: engine.SkillEngine) -> None:
        stale = skills.Corpus(skills=(), snapshot_version=0)
        current = sample_engine.snapshot

        assert sample_engine.publish(stale) is current
        assert sample_engine.snapshot is current

    def test_load_warnings_reach_bundle(
        self,
        sample_documents: dict[str, str],
    ) -> None:
        documents = dict(sample_documents)
        documents["broken/SKILL.md"] = "no frontmatter here"
        eng = engine.SkillEngine.from_sources([skills.InMemorySource(documents)])

        bundle = eng.match(QUERY, 10_000)

        assert [w.locator for w in bundle.diagnostics.load_warnings] == ["broken/SKILL.md"]

    def test_in_flight_query_keeps_snapshot(
        self,
        sample_source: skills.InMemorySource,
        make_skill_doc: _typing.Callable[..., str],
    ) -> None:
        replacement = skills.InMemorySource(
            {"f": make_skill_doc("FastAPI", "fastapi only", body="Replaced body")}
        )
        holder: dict[str, engine.SkillEngine] = {}

        class _ReloadingMatcher(engine.LexicalMatcher):
            """Publishes a new corpus while the query is being scored."""

            def score(
                self,
                skill_index: index.SkillIndex,
                context_text: str,
            ) -> list[engine.MatchScore]:
                holder["engine"].reload([replacement])
                return super().score(skill_index, context_text)

        eng = engine.SkillEngine.from_sources([sample_source], matcher=_ReloadingMatcher())
        holder["engine"] = eng
        started_on = eng.snapshot

        bundle = eng.match(QUERY, 10_000)

        assert bundle.diagnostics.snapshot_version == started_on.version
        assert bundle.ids == ("fastapi", "python")
        assert eng.snapshot.version > started_on.version
        assert eng.corpus.get("fastapi").body == "Replaced body"  # type: ignore[union-attr]

    def test_concurrent_queries_during_reloads(
        self,
        sample_engine: engine.SkillEngine,
        sample_source: skills.InMemorySource,
    ) -> None:
        def query() -> tuple[str, ...]:
            return sample_engine.match(QUERY, 10_000).ids

        def reload() -> None:
            sample_engine.reload([sample_source])

        with _futures.ThreadPoolExecutor(max_workers=8) as pool:
            queries = [pool.submit(query) for _ in range(40)]
            reloads = [pool.submit(reload) for _ in range(10)]
            results = [f.result() for f in queries]
            for f in reloads:
                f.result()

        assert set(results) == {("fastapi", "python")}


class TestFromSettings:
    """Engine construction from Settings."""

    def test_loads_configured_paths(
        self,
        tmp_path: _pathlib.Path,
        write_skill: _typing.Callable[..., _pathlib.Path],
    ) -> None:
        skills_dir = tmp_path / "skills"
        write_skill(skills_dir, "rust", "Rust", "rust ownership rules")
        settings = config.Settings.construct_without_dotenv(
            skills={"paths": [str(skills_dir)], "include_global": False},
            selection={"matcher": "cosine"},
        )

        eng = engine.SkillEngine.from_settings(settings)

        assert eng.corpus.ids == ("rust",)
        assert eng.match("rust ownership", 1000).ids == ("rust",)

    def test_search_paths(self, tmp_path: _pathlib.Path) -> None:
        settings = config.Settings.construct_without_dotenv(
            skills={"paths": [str(tmp_path / "a")], "include_global": False}
        )
        paths = engine.get_configured_search_paths(
            settings, project_root=tmp_path, extra_paths=[tmp_path / "b"]
        )
        assert paths == [
            (tmp_path / "a").resolve(),
            (tmp_path / "b").resolve(),
            tmp_path / ".skillcast" / "skills",
        ]

"""
Query engine with hot-swappable corpus snapshots.

The engine owns the current (corpus, index) pair. Publishing a new
corpus builds its index first and then swaps the reference, so queries
either see the old snapshot or the new one, never a mix. A query
captures the snapshot once when it starts and keeps using it even if a
reload publishes a newer one meanwhile.
"""

from __future__ import annotations

import collections.abc as _collections_abc
import dataclasses as _dataclasses
import logging as _logging
import pathlib as _pathlib
import threading as _threading
import typing as _typing

import skillcast.constants as constants
import skillcast.engine.composer as composer_module
import skillcast.engine.index as index_module
import skillcast.engine.matcher as matcher_module
import skillcast.engine.selector as selector_module
import skillcast.skills.corpus as corpus_module
import skillcast.skills.loader as loader_module
import skillcast.skills.sources as sources_module

if _typing.TYPE_CHECKING:
    import skillcast.config as _config

_logger = _logging.getLogger(__name__)

ConflictConfig = _collections_abc.Mapping[str, _collections_abc.Iterable[str]]
"""Configured conflict groups: group tag -> skill ids."""


@_dataclasses.dataclass(frozen=True, eq=False)
class EngineSnapshot:
    """Everything a query needs, for one corpus version."""

    corpus: corpus_module.Corpus
    index: index_module.SkillIndex
    conflict_groups: selector_module.ConflictGroups
    load_warnings: tuple[loader_module.LoadWarning, ...] = ()

    @property
    def version(self) -> int:
        return self.corpus.snapshot_version

    @classmethod
    def build(
        cls,
        corpus: corpus_module.Corpus,
        *,
        load_warnings: _collections_abc.Sequence[loader_module.LoadWarning] = (),
        conflict_groups: ConflictConfig | None = None,
    ) -> EngineSnapshot:
        """Index a corpus and resolve its conflict groups."""
        return cls(
            corpus=corpus,
            index=index_module.build_index(corpus),
            conflict_groups=selector_module.build_conflict_groups(corpus, conflict_groups),
            load_warnings=tuple(load_warnings),
        )


@_dataclasses.dataclass(frozen=True)
class Query:
    """A request for guidance."""

    context_text: str
    budget_chars: int
    pinned: tuple[str, ...] = ()
    excluded: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        selector_module.validate_budget(self.budget_chars)
        deduped: list[str] = []
        for skill_id in self.pinned:
            if skill_id not in deduped:
                deduped.append(skill_id)
        object.__setattr__(self, "pinned", tuple(deduped))
        object.__setattr__(self, "excluded", frozenset(self.excluded))


def run_query(
    snapshot: EngineSnapshot,
    query: Query,
    *,
    matcher: matcher_module.Matcher | None = None,
    separator: str = constants.DEFAULT_SEPARATOR,
) -> composer_module.Bundle:
    """Match, select and compose against one snapshot."""
    ranked = matcher_module.score(snapshot.index, query.context_text, matcher)
    selection = selector_module.select(
        ranked,
        index=snapshot.index,
        budget_chars=query.budget_chars,
        pinned=query.pinned,
        excluded=query.excluded,
        conflict_groups=snapshot.conflict_groups,
        separator_overhead=len(separator),
    )
    return composer_module.compose(
        snapshot.corpus,
        selection,
        load_warnings=snapshot.load_warnings,
    )


class SkillEngine:
    """
    Entry point for skill queries.

    Thread-safe: any number of threads may call match() while another
    thread reloads.
    """

    def __init__(
        self,
        snapshot: EngineSnapshot | None = None,
        *,
        matcher: matcher_module.Matcher | None = None,
        conflict_groups: ConflictConfig | None = None,
        separator: str = constants.DEFAULT_SEPARATOR,
    ) -> None:
        """
        Initialize the engine.

        Args:
            snapshot: Initial snapshot (an empty corpus if None).
            matcher: Matcher to rank with (lexical if None).
            conflict_groups: Configured group tag -> skill ids, applied to
                every published corpus.
            separator: Separator between bodies; its length is the
                per-skill budget overhead.
        """
        self._matcher = matcher or matcher_module.LexicalMatcher()
        self._conflict_config = {
            tag: tuple(ids) for tag, ids in (conflict_groups or {}).items()
        }
        self._separator = separator
        self._lock = _threading.Lock()
        self._snapshot = snapshot or EngineSnapshot.build(
            corpus_module.Corpus.empty(), conflict_groups=self._conflict_config
        )

    @classmethod
    def from_sources(
        cls,
        sources: _collections_abc.Iterable[sources_module.DocumentSource],
        *,
        timeout: float | None = constants.DEFAULT_LOAD_TIMEOUT,
        max_workers: int | None = None,
        **kwargs: _typing.Any,
    ) -> SkillEngine:
        """Create an engine and load its first corpus."""
        engine = cls(**kwargs)
        engine.reload(sources, timeout=timeout, max_workers=max_workers)
        return engine

    @classmethod
    def from_settings(
        cls,
        settings: _config.Settings,
        *,
        project_root: _pathlib.Path | None = None,
        extra_paths: _collections_abc.Sequence[_pathlib.Path] = (),
    ) -> SkillEngine:
        """Create an engine configured and loaded from Settings."""
        paths = get_configured_search_paths(
            settings, project_root=project_root, extra_paths=extra_paths
        )
        return cls.from_sources(
            sources_module.sources_for_paths(paths),
            timeout=settings.skills.load_timeout,
            max_workers=settings.skills.max_workers,
            matcher=matcher_module.get_matcher(settings.selection.matcher),
            conflict_groups=settings.selection.conflict_groups,
            separator=settings.selection.separator,
        )

    @property
    def snapshot(self) -> EngineSnapshot:
        """The currently published snapshot."""
        with self._lock:
            return self._snapshot

    @property
    def corpus(self) -> corpus_module.Corpus:
        return self.snapshot.corpus

    @property
    def separator(self) -> str:
        return self._separator

    def publish(
        self,
        corpus: corpus_module.Corpus,
        *,
        load_warnings: _collections_abc.Sequence[loader_module.LoadWarning] = (),
    ) -> EngineSnapshot:
        """Index a corpus and make it current for subsequent queries."""
        snapshot = EngineSnapshot.build(
            corpus,
            load_warnings=load_warnings,
            conflict_groups=self._conflict_config,
        )
        with self._lock:
            if snapshot.version < self._snapshot.version:
                _logger.warning(
                    "Ignoring stale corpus v%d (current v%d)",
                    snapshot.version,
                    self._snapshot.version,
                )
                return self._snapshot
            self._snapshot = snapshot
        _logger.info("Published corpus v%d (%d skills)", snapshot.version, len(corpus))
        return snapshot

    def reload(
        self,
        sources: _collections_abc.Iterable[sources_module.DocumentSource],
        *,
        timeout: float | None = constants.DEFAULT_LOAD_TIMEOUT,
        max_workers: int | None = None,
    ) -> EngineSnapshot:
        """
        Load sources into a new corpus and publish it.

        On any load error the current snapshot stays in place.

        Raises:
            DuplicateSkillName: If two documents share an id.
            LoadTimeout: If loading exceeds timeout.
        """
        result = loader_module.load_corpus(sources, timeout=timeout, max_workers=max_workers)
        return self.publish(result.corpus, load_warnings=result.warnings)

    def execute(self, query: Query) -> composer_module.Bundle:
        """Run a prepared query on the current snapshot."""
        snapshot = self.snapshot
        return run_query(snapshot, query, matcher=self._matcher, separator=self._separator)

    def match(
        self,
        context_text: str,
        budget_chars: int,
        pinned: _collections_abc.Sequence[str] | None = None,
        excluded: _collections_abc.Iterable[str] | None = None,
    ) -> composer_module.Bundle:
        """
        Select and compose the skills relevant to a context.

        Args:
            context_text: Free text describing the task.
            budget_chars: Maximum body characters to inject (> 0).
            pinned: Ids to force-include, in order.
            excluded: Ids to force-exclude.

        Returns:
            The Bundle with diagnostics.

        Raises:
            InvalidQuery: If the budget is not a positive integer.
        """
        query = Query(
            context_text=context_text,
            budget_chars=budget_chars,
            pinned=tuple(pinned or ()),
            excluded=frozenset(excluded or ()),
        )
        return self.execute(query)


def get_configured_search_paths(
    settings: _config.Settings,
    *,
    project_root: _pathlib.Path | None = None,
    extra_paths: _collections_abc.Sequence[_pathlib.Path] = (),
) -> list[_pathlib.Path]:
    """Search paths from settings plus any explicit extra paths."""
    configured = [_pathlib.Path(p) for p in settings.skills.paths]
    return sources_module.get_skill_search_paths(
        project_root,
        extra_paths=[*configured, *extra_paths],
        include_global=settings.skills.include_global,
    )

"""
Corpus loading from document sources.

Documents are read and parsed independently on a thread pool. The
result is sorted by skill id, so completion order never shows up in
the corpus. A bad document is skipped with a warning; duplicate ids or
an exceeded timeout abort the whole load.
"""

from __future__ import annotations

import collections.abc as _collections_abc
import concurrent.futures as _futures
import dataclasses as _dataclasses
import logging as _logging
import time as _time
import typing as _typing

import skillcast.constants as constants
import skillcast.errors as errors
import skillcast.skills.corpus as corpus_module
import skillcast.skills.skill as skill_module
import skillcast.skills.sources as sources_module

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True)
class LoadWarning:
    """A document that was skipped during a load."""

    locator: str
    reason: str

    @classmethod
    def from_error(cls, error: errors.MalformedDocument) -> LoadWarning:
        return cls(locator=error.locator, reason=error.reason)

    def to_dict(self) -> dict[str, str]:
        return {"locator": self.locator, "reason": self.reason}


@_dataclasses.dataclass(frozen=True)
class LoadResult:
    """Outcome of a successful load."""

    corpus: corpus_module.Corpus
    """The loaded corpus."""

    warnings: tuple[LoadWarning, ...] = ()
    """Documents that were skipped, in locator order."""


def _load_document(
    source: sources_module.DocumentSource,
    locator: str,
) -> skill_module.Skill:
    """Read and parse one document."""
    try:
        content = source.read(locator)
    except (OSError, UnicodeDecodeError) as e:
        raise errors.MalformedDocument(locator, f"cannot read document: {e}") from e

    skill = skill_module.parse_skill(content, locator)

    if skill.exceeds_soft_limit:
        _logger.warning(
            "Skill %s exceeds recommended body limit (%d lines > %d)",
            skill.id,
            skill.body_line_count,
            constants.SKILL_BODY_SOFT_LIMIT,
        )
    return skill


def _wait_all(
    futures: _collections_abc.Collection[_futures.Future[_typing.Any]],
    deadline: float | None,
    timeout: float | None,
) -> None:
    """Wait for every future or raise LoadTimeout at the deadline."""
    if not futures:
        return
    remaining = None if deadline is None else max(0.0, deadline - _time.monotonic())
    _done, not_done = _futures.wait(futures, timeout=remaining)
    if not_done:
        for future in not_done:
            future.cancel()
        assert timeout is not None
        raise errors.LoadTimeout(timeout)


def _check_duplicates(skills: _collections_abc.Sequence[skill_module.Skill]) -> None:
    """Raise DuplicateSkillName for the first id defined more than once."""
    by_id: dict[str, list[str]] = {}
    for skill in skills:
        by_id.setdefault(skill.id, []).append(skill.locator)
    for skill_id in sorted(by_id):
        locators = by_id[skill_id]
        if len(locators) > 1:
            raise errors.DuplicateSkillName(skill_id, sorted(locators))


def load_corpus(
    sources: _collections_abc.Iterable[sources_module.DocumentSource],
    *,
    timeout: float | None = None,
    max_workers: int | None = None,
) -> LoadResult:
    """
    Load every document from the given sources into a new Corpus.

    Args:
        sources: Document sources to read.
        timeout: Seconds allowed for the whole load (None waits forever).
        max_workers: Thread pool size (defaults to DEFAULT_MAX_WORKERS).

    Returns:
        LoadResult with the corpus and any skipped-document warnings.

    Raises:
        DuplicateSkillName: If two documents resolve to the same id.
        LoadTimeout: If the load does not finish within timeout.
    """
    source_list = list(sources)
    deadline = None if timeout is None else _time.monotonic() + timeout
    executor = _futures.ThreadPoolExecutor(
        max_workers=max_workers or constants.DEFAULT_MAX_WORKERS,
        thread_name_prefix="skillcast-load",
    )
    try:
        listings = [executor.submit(src.list_documents) for src in source_list]
        _wait_all(listings, deadline, timeout)

        documents: list[tuple[str, _futures.Future[skill_module.Skill]]] = []
        for src, listing in zip(source_list, listings):
            for locator in listing.result():
                documents.append((locator, executor.submit(_load_document, src, locator)))
        _wait_all([future for _, future in documents], deadline, timeout)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    skills: list[skill_module.Skill] = []
    warnings: list[LoadWarning] = []
    for locator, future in documents:
        try:
            skills.append(future.result())
        except errors.MalformedDocument as e:
            _logger.warning("Skipping skill document %s: %s", locator, e.reason)
            warnings.append(LoadWarning.from_error(e))

    _check_duplicates(skills)

    corpus = corpus_module.Corpus(
        skills=tuple(skills),
        snapshot_version=corpus_module.next_snapshot_version(),
    )
    _logger.debug(
        "Loaded corpus v%d: %d skills from %d sources (%d skipped)",
        corpus.snapshot_version,
        len(corpus),
        len(source_list),
        len(warnings),
    )
    return LoadResult(
        corpus=corpus,
        warnings=tuple(sorted(warnings, key=lambda w: (w.locator, w.reason))),
    )

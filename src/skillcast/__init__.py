"""
skillcast - skill discovery and context injection

Loads a corpus of skill documents, ranks them against a task
description and assembles a deterministic, size-bounded bundle of
their guidance for an agent's context.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("skillcast")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "skillcast Contributors"

from skillcast.engine import Bundle, Query, SkillEngine  # noqa: E402
from skillcast.errors import (  # noqa: E402
    DuplicateSkillName,
    InternalConsistencyError,
    InvalidQuery,
    LoadTimeout,
    MalformedDocument,
    SkillcastError,
)
from skillcast.skills import Corpus, Skill, load_corpus  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "Bundle",
    "Corpus",
    "Query",
    "Skill",
    "SkillEngine",
    "load_corpus",
    "SkillcastError",
    "MalformedDocument",
    "DuplicateSkillName",
    "LoadTimeout",
    "InvalidQuery",
    "InternalConsistencyError",
]

"""
Skill matching, selection and composition.

Pipeline per query:
    Index -> Matcher -> Selector -> Composer -> Bundle

The index is built once per corpus snapshot; everything after it is a
pure function of (snapshot, query).
"""

from skillcast.engine.composer import Bundle, BundleDiagnostics, BundleEntry, compose
from skillcast.engine.engine import (
    EngineSnapshot,
    Query,
    SkillEngine,
    get_configured_search_paths,
    run_query,
)
from skillcast.engine.index import SkillIndex, build_index, tokenize
from skillcast.engine.matcher import (
    CosineMatcher,
    LexicalMatcher,
    Matcher,
    MatchScore,
    available_matchers,
    get_matcher,
    score,
)
from skillcast.engine.selector import (
    ConflictGroups,
    DiagnosticCode,
    InclusionReason,
    Selection,
    build_conflict_groups,
    select,
    validate_budget,
)

__all__ = [
    # Index
    "SkillIndex",
    "build_index",
    "tokenize",
    # Matching
    "Matcher",
    "LexicalMatcher",
    "CosineMatcher",
    "MatchScore",
    "available_matchers",
    "get_matcher",
    "score",
    # Selection
    "ConflictGroups",
    "DiagnosticCode",
    "InclusionReason",
    "Selection",
    "build_conflict_groups",
    "select",
    "validate_budget",
    # Composition
    "Bundle",
    "BundleDiagnostics",
    "BundleEntry",
    "compose",
    # Engine
    "EngineSnapshot",
    "Query",
    "SkillEngine",
    "get_configured_search_paths",
    "run_query",
]

"""
Shared constants for skillcast.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Loading defaults
SKILL_FILE_NAME = "SKILL.md"
"""File that marks a directory as a skill."""

SKILL_BODY_SOFT_LIMIT = 500
"""Soft limit for skill bodies (lines). Longer bodies load with a warning."""

DEFAULT_LOAD_TIMEOUT = 30.0
"""Default timeout for a full corpus load (seconds)."""

DEFAULT_MAX_WORKERS = 8
"""Default number of threads used to read and parse documents."""

# Index defaults
MIN_TOKEN_LENGTH = 2
"""Tokens shorter than this are dropped by the tokenizer."""

SCORE_PRECISION = 9
"""Decimal places kept in match scores."""

# Selection defaults
DEFAULT_BUDGET_CHARS = 20_000
"""Default injection budget (characters of body content)."""

DEFAULT_SEPARATOR = "\n\n---\n\n"
"""Separator placed between skill bodies in a rendered bundle.

Its length is the fixed per-item overhead charged against the budget.
"""

DEFAULT_MATCHER = "lexical"
"""Default matcher name."""

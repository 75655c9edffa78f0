"""
Base classes for CLI output.

Implements a layered rendering system:
- Layer 1: PlainTextRenderer - Just strings, fully testable
- Layer 2: JSONRenderer - Structured output, machine-readable
- Layer 3: RichConsoleRenderer - Tables and colors

All renderers implement the same interface, so CLI commands stay
independent of the output format.
"""

import abc as _abc
import collections.abc as _collections_abc

import skillcast.engine.composer as composer
import skillcast.skills.corpus as corpus_module
import skillcast.skills.loader as loader
import skillcast.skills.skill as skill_module


class Renderer(_abc.ABC):
    """Abstract base class for all renderers."""

    @_abc.abstractmethod
    def show_bundle(self, bundle: composer.Bundle, *, separator: str) -> None:
        """Display a query result: content and diagnostics."""
        ...

    @_abc.abstractmethod
    def show_corpus(
        self,
        corpus: corpus_module.Corpus,
        warnings: _collections_abc.Sequence[loader.LoadWarning] = (),
    ) -> None:
        """Display a corpus listing."""
        ...

    @_abc.abstractmethod
    def show_skill(self, skill: skill_module.Skill, *, body: bool = False) -> None:
        """Display one skill."""
        ...

    @_abc.abstractmethod
    def show_error(self, error: str) -> None:
        """Display an error message."""
        ...

"""
JSON renderer (Layer 2).

Outputs machine-readable JSON for automation and scripting.
"""

import collections.abc as _collections_abc
import json as _json
import sys as _sys
import typing as _typing

import skillcast.engine.composer as composer
import skillcast.skills.corpus as corpus_module
import skillcast.skills.loader as loader
import skillcast.skills.skill as skill_module
import skillcast.ui.base as base


class JSONRenderer(base.Renderer):
    """JSON output renderer; one JSON document per call."""

    def __init__(
        self,
        output: _typing.TextIO | None = None,
        *,
        indent: int = 2,
        include_bodies: bool = True,
    ) -> None:
        self._output = output or _sys.stdout
        self._indent = indent
        self._include_bodies = include_bodies

    def _emit(self, data: _typing.Any) -> None:
        self._output.write(_json.dumps(data, indent=self._indent, ensure_ascii=False) + "\n")

    def show_bundle(self, bundle: composer.Bundle, *, separator: str) -> None:
        data = bundle.to_dict(include_bodies=self._include_bodies)
        if self._include_bodies:
            data["content"] = bundle.render(separator)
        self._emit(data)

    def show_corpus(
        self,
        corpus: corpus_module.Corpus,
        warnings: _collections_abc.Sequence[loader.LoadWarning] = (),
    ) -> None:
        data = corpus.to_dict()
        data["warnings"] = [w.to_dict() for w in warnings]
        self._emit(data)

    def show_skill(self, skill: skill_module.Skill, *, body: bool = False) -> None:
        data = skill.to_dict()
        if body:
            data["body"] = skill.body
        self._emit(data)

    def show_error(self, error: str) -> None:
        self._emit({"error": error})

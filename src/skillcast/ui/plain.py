"""
Plain text renderer (Layer 1).

Writes plain strings without any formatting. Used when output is piped
and by tests.
"""

import collections.abc as _collections_abc
import sys as _sys
import typing as _typing

import skillcast.engine.composer as composer
import skillcast.skills.corpus as corpus_module
import skillcast.skills.loader as loader
import skillcast.skills.skill as skill_module
import skillcast.ui.base as base


class PlainTextRenderer(base.Renderer):
    """Plain text output renderer."""

    def __init__(
        self,
        output: _typing.TextIO | None = None,
        error_output: _typing.TextIO | None = None,
    ) -> None:
        self._output = output or _sys.stdout
        self._error_output = error_output or _sys.stderr

    def _write(self, text: str = "") -> None:
        self._output.write(text + "\n")

    def show_bundle(self, bundle: composer.Bundle, *, separator: str) -> None:
        if bundle.entries:
            self._write(bundle.render(separator))
        diag = bundle.diagnostics
        self._error_output.write(
            f"selected: {', '.join(diag.selected) or '(none)'}\n"
            f"excluded: {diag.excluded_count}  truncated: {str(diag.truncated).lower()}  "
            f"used: {diag.used_chars}/{diag.budget_chars}\n"
        )
        for skill_id, reason in diag.reasons.items():
            if not reason.is_selected:
                self._error_output.write(f"  {skill_id}: {reason.value}\n")
        for code in diag.codes:
            self._error_output.write(f"diagnostic: {code.value}\n")
        for warning in diag.load_warnings:
            self._error_output.write(f"warning: {warning.locator}: {warning.reason}\n")

    def show_corpus(
        self,
        corpus: corpus_module.Corpus,
        warnings: _collections_abc.Sequence[loader.LoadWarning] = (),
    ) -> None:
        if not corpus.skills:
            self._write("No skills found.")
        else:
            self._write(f"Skills ({len(corpus)}):")
            self._write(f"{'Id':<32} {'Chars':<8} {'Version':<10} Description")
            self._write("-" * 78)
            for s in corpus:
                limit_warn = " ⚠" if s.exceeds_soft_limit else ""
                self._write(
                    f"{s.id:<32} {s.body_size:<8} {s.version or '-':<10} "
                    f"{s.description}{limit_warn}"
                )
        for warning in warnings:
            self._write(f"Skipped {warning.locator}: {warning.reason}")

    def show_skill(self, skill: skill_module.Skill, *, body: bool = False) -> None:
        self._write(f"Skill: {skill.name}")
        self._write(f"  Id: {skill.id}")
        self._write(f"  Description: {skill.description}")
        if skill.version:
            self._write(f"  Version: {skill.version}")
        self._write(f"  Body: {skill.body_size} chars, {skill.body_line_count} lines")
        if skill.declared_priority is not None:
            self._write(f"  Priority: {skill.declared_priority}")
        if skill.conflict_groups:
            self._write(f"  Conflict groups: {', '.join(skill.conflict_groups)}")
        if skill.locator:
            self._write(f"  Source: {skill.locator}")
        if body:
            self._write()
            self._write("--- Body ---")
            self._write(skill.body)

    def show_error(self, error: str) -> None:
        self._error_output.write(f"Error: {error}\n")

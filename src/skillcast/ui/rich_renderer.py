"""
Rich console renderer (Layer 3).

Tables and colors for interactive terminals. Bundle content is written
verbatim; only diagnostics are decorated.
"""

import collections.abc as _collections_abc

import rich.console as _rich_console
import rich.markup as _rich_markup
import rich.panel as _rich_panel
import rich.table as _rich_table
import rich.text as _rich_text

import skillcast.engine.composer as composer
import skillcast.engine.selector as selector
import skillcast.skills.corpus as corpus_module
import skillcast.skills.loader as loader
import skillcast.skills.skill as skill_module
import skillcast.ui.base as base


def _esc(value: str) -> str:
    return _rich_markup.escape(value)


_REASON_STYLES = {
    selector.InclusionReason.PINNED: "bold cyan",
    selector.InclusionReason.RANKED: "green",
    selector.InclusionReason.EXCLUDED_BY_BUDGET: "yellow",
    selector.InclusionReason.EXCLUDED_BY_CONFLICT: "magenta",
    selector.InclusionReason.EXCLUDED_BY_REQUEST: "dim",
    selector.InclusionReason.NOT_FOUND: "red",
}


class RichConsoleRenderer(base.Renderer):
    """Rich console output renderer."""

    def __init__(
        self,
        console: _rich_console.Console | None = None,
        error_console: _rich_console.Console | None = None,
    ) -> None:
        self._console = console or _rich_console.Console(highlight=False)
        self._error_console = error_console or _rich_console.Console(stderr=True)

    def show_bundle(self, bundle: composer.Bundle, *, separator: str) -> None:
        if bundle.entries:
            self._console.print(_rich_text.Text(bundle.render(separator)))

        diag = bundle.diagnostics
        table = _rich_table.Table(
            title=f"Selection (snapshot v{diag.snapshot_version})",
            show_lines=False,
        )
        table.add_column("Skill")
        table.add_column("Reason")
        for skill_id, reason in diag.reasons.items():
            table.add_row(skill_id, _rich_text.Text(reason.value, style=_REASON_STYLES[reason]))
        self._error_console.print(table)

        summary = (
            f"used {diag.used_chars}/{diag.budget_chars} chars, "
            f"{diag.excluded_count} excluded, truncated={str(diag.truncated).lower()}"
        )
        self._error_console.print(summary)
        for code in diag.codes:
            self._error_console.print(f"[yellow]⚠ {code.value}[/yellow]")
        for warning in diag.load_warnings:
            self._error_console.print(
                f"[yellow]skipped[/yellow] {_esc(warning.locator)}: {_esc(warning.reason)}"
            )

    def show_corpus(
        self,
        corpus: corpus_module.Corpus,
        warnings: _collections_abc.Sequence[loader.LoadWarning] = (),
    ) -> None:
        if not corpus.skills:
            self._console.print("No skills found.")
        else:
            table = _rich_table.Table(title=f"Skills ({len(corpus)})")
            table.add_column("Id", style="cyan")
            table.add_column("Chars", justify="right")
            table.add_column("Version")
            table.add_column("Description")
            for s in corpus:
                description = s.description + (" ⚠" if s.exceeds_soft_limit else "")
                table.add_row(
                    s.id,
                    str(s.body_size),
                    _rich_text.Text(s.version or "-"),
                    _rich_text.Text(description),
                )
            self._console.print(table)
        for warning in warnings:
            self._error_console.print(
                f"[yellow]skipped[/yellow] {_esc(warning.locator)}: {_esc(warning.reason)}"
            )

    def show_skill(self, skill: skill_module.Skill, *, body: bool = False) -> None:
        lines = [
            f"[bold]Id:[/bold] {_esc(skill.id)}",
            f"[bold]Description:[/bold] {_esc(skill.description)}",
            f"[bold]Body:[/bold] {skill.body_size} chars, {skill.body_line_count} lines",
        ]
        if skill.version:
            lines.append(f"[bold]Version:[/bold] {_esc(skill.version)}")
        if skill.declared_priority is not None:
            lines.append(f"[bold]Priority:[/bold] {skill.declared_priority}")
        if skill.conflict_groups:
            lines.append(f"[bold]Conflict groups:[/bold] {_esc(', '.join(skill.conflict_groups))}")
        if skill.locator:
            lines.append(f"[bold]Source:[/bold] {_esc(skill.locator)}")
        self._console.print(_rich_panel.Panel("\n".join(lines), title=_esc(skill.name)))
        if body:
            self._console.print(_rich_text.Text(skill.body))

    def show_error(self, error: str) -> None:
        self._error_console.print(f"[red]Error:[/red] {_esc(error)}")

"""
Main CLI entry point for skillcast.

Provides the command-line interface using Click.

Exit codes:
    0  success (diagnostics such as BudgetTooSmall are still success)
    1  load or configuration error (DuplicateSkillName, LoadTimeout, ...)
    2  invalid query (non-positive budget)
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.logging as _rich_logging
import yaml as _yaml

import skillcast
import skillcast.config as config
import skillcast.config.sources as config_sources
import skillcast.engine as engine
import skillcast.errors as errors
import skillcast.skills as skills
import skillcast.ui as ui

EXIT_OK = 0
EXIT_LOAD_ERROR = 1
EXIT_INVALID_QUERY = 2

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_LOGGER_NAME = "skillcast"


def _configure_logging(level: str) -> None:
    """Send skillcast logs to stderr through rich."""
    logger = _logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    if not any(getattr(h, "_skillcast_handler", False) for h in logger.handlers):
        handler = _rich_logging.RichHandler(
            console=_rich_console.Console(stderr=True),
            show_path=False,
            show_time=False,
        )
        handler._skillcast_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)


def _get_renderer(json_output: bool) -> ui.Renderer:
    """Pick a renderer for the current output stream."""
    if json_output:
        return ui.JSONRenderer()
    if _sys.stdout.isatty():
        return ui.RichConsoleRenderer()
    return ui.PlainTextRenderer()


def _fail(renderer: ui.Renderer, message: str, code: int) -> _typing.NoReturn:
    renderer.show_error(message)
    raise SystemExit(code)


def _load_engine(
    settings: config.Settings,
    paths: tuple[_pathlib.Path, ...],
    timeout: float | None,
    renderer: ui.Renderer,
) -> engine.SkillEngine:
    """Load the configured corpus or exit with the load-error code."""
    search_paths = engine.get_configured_search_paths(
        settings,
        project_root=settings.project_root,
        extra_paths=paths,
    )
    _logging.getLogger(__name__).debug("Skill search paths: %s", search_paths)
    try:
        return engine.SkillEngine.from_sources(
            skills.sources_for_paths(search_paths),
            timeout=timeout if timeout is not None else settings.skills.load_timeout,
            max_workers=settings.skills.max_workers,
            matcher=engine.get_matcher(settings.selection.matcher),
            conflict_groups=settings.selection.conflict_groups,
            separator=settings.selection.separator,
        )
    except (errors.DuplicateSkillName, errors.LoadTimeout) as e:
        _fail(renderer, str(e), EXIT_LOAD_ERROR)
    except OSError as e:
        _fail(renderer, f"cannot read skill sources: {e}", EXIT_LOAD_ERROR)


_path_option = _click.option(
    "--path",
    "paths",
    multiple=True,
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    help="Additional skill directory (repeatable)",
)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(skillcast.__version__, "-v", "--version", prog_name="skillcast")
@_click.option("--verbose", is_flag=True, help="Enable debug logging on stderr")
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool) -> None:
    """skillcast - select and bundle skill guidance for an agent's context."""
    try:
        settings = config.Settings()
    except config.ConfigFileError as e:
        _click.echo(f"Error: {e}", err=True)
        raise SystemExit(EXIT_LOAD_ERROR) from None
    except _pydantic.ValidationError as e:
        _click.echo(f"Error: invalid configuration: {e}", err=True)
        raise SystemExit(EXIT_LOAD_ERROR) from None

    _configure_logging("DEBUG" if verbose else settings.logging.level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# =============================================================================
# Query
# =============================================================================


@cli.command(name="match")
@_click.argument("context_text", required=False)
@_click.option("-b", "--budget", type=int, default=None, help="Injection budget in characters")
@_click.option("--pin", "pinned", multiple=True, help="Skill id to force-include (repeatable)")
@_click.option("--exclude", "excluded", multiple=True, help="Skill id to leave out (repeatable)")
@_path_option
@_click.option("--timeout", type=float, default=None, help="Load timeout in seconds")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--no-bodies", is_flag=True, help="Omit skill bodies from JSON output")
@_click.pass_context
def match_command(
    ctx: _click.Context,
    context_text: str | None,
    budget: int | None,
    pinned: tuple[str, ...],
    excluded: tuple[str, ...],
    paths: tuple[_pathlib.Path, ...],
    timeout: float | None,
    json_output: bool,
    no_bodies: bool,
) -> None:
    """Select the skills relevant to CONTEXT_TEXT (or stdin if omitted / '-')."""
    settings: config.Settings = ctx.obj["settings"]
    renderer: ui.Renderer = (
        ui.JSONRenderer(include_bodies=not no_bodies) if json_output else _get_renderer(False)
    )

    budget_chars = budget if budget is not None else settings.selection.default_budget_chars
    try:
        engine.validate_budget(budget_chars)
    except errors.InvalidQuery as e:
        _fail(renderer, str(e), EXIT_INVALID_QUERY)

    if context_text is None or context_text == "-":
        context_text = _click.get_text_stream("stdin").read()

    skill_engine = _load_engine(settings, paths, timeout, renderer)
    bundle = skill_engine.match(
        context_text,
        budget_chars,
        pinned=list(pinned),
        excluded=list(excluded),
    )
    renderer.show_bundle(bundle, separator=skill_engine.separator)


# =============================================================================
# Skill Commands
# =============================================================================


@cli.command(name="list")
@_path_option
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def list_command(
    ctx: _click.Context,
    paths: tuple[_pathlib.Path, ...],
    json_output: bool,
) -> None:
    """List all discovered skills."""
    settings: config.Settings = ctx.obj["settings"]
    renderer = _get_renderer(json_output)
    skill_engine = _load_engine(settings, paths, None, renderer)
    snapshot = skill_engine.snapshot
    renderer.show_corpus(snapshot.corpus, snapshot.load_warnings)


@cli.command(name="show")
@_click.argument("skill_id")
@_path_option
@_click.option("--body", is_flag=True, help="Show full skill body")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def show_command(
    ctx: _click.Context,
    skill_id: str,
    paths: tuple[_pathlib.Path, ...],
    body: bool,
    json_output: bool,
) -> None:
    """Show details for a specific skill."""
    settings: config.Settings = ctx.obj["settings"]
    renderer = _get_renderer(json_output)
    skill_engine = _load_engine(settings, paths, None, renderer)

    skill = skill_engine.corpus.get(skill_id)
    if skill is None:
        _fail(renderer, f"Skill '{skill_id}' not found", EXIT_LOAD_ERROR)
    renderer.show_skill(skill, body=body)


@cli.command(name="validate")
@_click.argument("path", type=_click.Path(exists=True, path_type=_pathlib.Path))
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
def validate_command(path: _pathlib.Path, json_output: bool) -> None:
    """Validate a skill directory (or a single skill file)."""
    skill_file = path / "SKILL.md" if path.is_dir() else path

    result: dict[str, _typing.Any] = {
        "path": str(path),
        "valid": False,
        "warnings": [],
        "error": None,
    }

    try:
        content = skill_file.read_text(encoding="utf-8")
        skill = skills.parse_skill(content, str(skill_file))
    except OSError as e:
        result["error"] = f"cannot read {skill_file}: {e}"
    except errors.MalformedDocument as e:
        result["error"] = e.reason
    else:
        result["valid"] = True
        result["id"] = skill.id
        result["name"] = skill.name
        result["body_size"] = skill.body_size
        result["body_lines"] = skill.body_line_count
        if skill.exceeds_soft_limit:
            result["warnings"].append(
                f"Body exceeds recommended limit ({skill.body_line_count} lines)"
            )

    if json_output:
        _click.echo(_json.dumps(result, indent=2))
    else:
        _click.echo(f"Skill: {path}")
        if result["error"]:
            _click.echo("  Status: ✗ invalid")
            _click.echo(f"  Error: {result['error']}")
        elif result["warnings"]:
            _click.echo("  Status: ⚠ valid with warnings")
            for warning in result["warnings"]:
                _click.echo(f"  Warning: {warning}")
        else:
            _click.echo("  Status: ✓ valid")
        if result.get("id"):
            _click.echo(f"  Id: {result['id']}")
            _click.echo(f"  Body: {result['body_size']} chars")

    if not result["valid"]:
        raise SystemExit(EXIT_LOAD_ERROR)


# =============================================================================
# Config Commands
# =============================================================================


@cli.group(name="config")
def config_group() -> None:
    """Configuration commands."""
    pass


@config_group.command(name="show")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option(
    "--sources",
    "show_sources",
    is_flag=True,
    help="Also list the config files that contributed values",
)
@_click.pass_context
def config_show(ctx: _click.Context, json_output: bool, show_sources: bool) -> None:
    """Show the effective configuration."""
    settings: config.Settings = ctx.obj["settings"]
    data = settings.to_display_dict()
    layers = _config_layers(settings).get_loaded_layers() if show_sources else []

    if json_output:
        if show_sources:
            data = {
                "config": data,
                "sources": [{"layer": name, "path": str(path)} for name, path in layers],
            }
        _click.echo(_json.dumps(data, indent=2))
    else:
        for name, path in layers:
            _click.echo(f"# {name}: {path}")
        _click.echo(_yaml.safe_dump(data, sort_keys=False, default_flow_style=False).rstrip())

    unknown = settings.get_unknown_keys()
    for key in sorted(unknown):
        _click.echo(f"Warning: unknown config key '{key}'", err=True)


@config_group.command(name="path")
@_click.option("--all", "show_all", is_flag=True, help="Show all paths even if not found")
@_click.pass_context
def config_path(ctx: _click.Context, show_all: bool) -> None:
    """Show configuration file paths and their status.

    Examples:
        skillcast config path        # Show existing config files
        skillcast config path --all  # Show all possible paths
    """
    settings: config.Settings = ctx.obj["settings"]
    for name, path, exists in _config_layers(settings).get_layer_paths():
        if exists or show_all:
            status = "✓" if exists else "✗"
            _click.echo(f"{status} {name}: {path}")


def _config_layers(settings: config.Settings) -> config_sources.LayeredYamlSettingsSource:
    """Fresh YAML layer source for provenance display."""
    return config_sources.LayeredYamlSettingsSource(config.Settings, settings.project_root)


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="skillcast")


if __name__ == "__main__":
    main()

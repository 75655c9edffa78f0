"""
Shared pytest fixtures for skillcast tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pytest as _pytest
import yaml as _yaml

import skillcast.engine as engine
import skillcast.skills as skills

# =============================================================================
# Environment isolation
# =============================================================================


@_pytest.fixture(autouse=True)
def isolated_env(
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> _pathlib.Path:
    """
    Keep the user's real config and skills out of every test.

    Removes all SKILLCAST_* variables, points the user config directory
    at an empty temp dir and HOME at a temp home (no global skills).
    """
    for key in list(_os.environ):
        if key.startswith("SKILLCAST_"):
            monkeypatch.delenv(key, raising=False)

    home = tmp_path / "home"
    home.mkdir()
    user_config = tmp_path / "user-config"
    user_config.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("SKILLCAST_CONFIG_DIR", str(user_config))
    return user_config


@_pytest.fixture
def project_dir(tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch) -> _pathlib.Path:
    """A project root (marked by .skillcast/) that is also the cwd."""
    project = tmp_path / "project"
    (project / ".skillcast" / "skills").mkdir(parents=True)
    monkeypatch.chdir(project)
    return project


# =============================================================================
# Skill documents
# =============================================================================


def _render_document(
    name: str,
    description: str,
    body: str = "Instructions.",
    metadata: dict[str, _typing.Any] | None = None,
) -> str:
    frontmatter: dict[str, _typing.Any] = {"name": name, "description": description}
    if metadata:
        frontmatter["metadata"] = metadata
    header = _yaml.safe_dump(frontmatter, sort_keys=False).strip()
    return f"---\n{header}\n---\n\n{body}\n"


@_pytest.fixture
def make_skill_doc() -> _typing.Callable[..., str]:
    """Factory producing SKILL.md text from name, description, body, metadata."""
    return _render_document


@_pytest.fixture
def write_skill() -> _typing.Callable[..., _pathlib.Path]:
    """
    Factory writing <root>/<dirname>/SKILL.md.

    Usage:
        write_skill(root, "python", "Python", "python best practices", body="...")
    """

    def _write(
        root: _pathlib.Path,
        dirname: str,
        name: str,
        description: str,
        body: str = "Instructions.",
        metadata: dict[str, _typing.Any] | None = None,
    ) -> _pathlib.Path:
        skill_dir = root / dirname
        skill_dir.mkdir(parents=True, exist_ok=True)
        skill_file = skill_dir / "SKILL.md"
        skill_file.write_text(
            _render_document(name, description, body, metadata), encoding="utf-8"
        )
        return skill_file

    return _write


SAMPLE_SKILLS = {
    "python": (
        "Python",
        "python development best practices",
        "Prefer explicit imports.\nType-annotate public functions.",
    ),
    "javascript": (
        "JavaScript",
        "javascript typescript development",
        "Enable strict mode in tsconfig.",
    ),
    "fastapi": (
        "FastAPI",
        "fastapi best practices with pydantic",
        "Declare request bodies as pydantic models.\nUse dependency injection for sessions.",
    ),
}
"""locator -> (name, description, body) for the three-skill corpus."""


@_pytest.fixture
def sample_documents() -> dict[str, str]:
    """Locator -> document text for the python/javascript/fastapi corpus."""
    return {
        f"{key}/SKILL.md": _render_document(name, description, body)
        for key, (name, description, body) in SAMPLE_SKILLS.items()
    }


@_pytest.fixture
def sample_source(sample_documents: dict[str, str]) -> skills.InMemorySource:
    return skills.InMemorySource(sample_documents, name="sample")


@_pytest.fixture
def sample_corpus(sample_source: skills.InMemorySource) -> skills.Corpus:
    """The three-skill corpus, freshly loaded."""
    return skills.load_corpus([sample_source]).corpus


@_pytest.fixture
def sample_index(sample_corpus: skills.Corpus) -> engine.SkillIndex:
    return engine.build_index(sample_corpus)


@_pytest.fixture
def make_corpus() -> _typing.Callable[..., skills.Corpus]:
    """
    Factory building a Corpus directly from Skill keyword dicts.

    Usage:
        make_corpus({"name": "A", "description": "alpha", "body": "x"}, ...)
    """

    def _make(*entries: dict[str, _typing.Any]) -> skills.Corpus:
        built = []
        for entry in entries:
            fields = dict(entry)
            fields.setdefault("id", skills.skill_id_from_name(fields["name"]))
            fields.setdefault("body", "Instructions.")
            built.append(skills.Skill(**fields))
        return skills.Corpus(
            skills=tuple(built),
            snapshot_version=skills.next_snapshot_version(),
        )

    return _make

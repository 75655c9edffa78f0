"""
Document sources and skill search paths.

The loader never touches the filesystem directly. It consumes
DocumentSource objects, which list document locators and read their
raw text.

Skill directories are searched in this order:
1. ~/.config/skillcast/skills/ - User skills (global)
2. $SKILLCAST_SKILL_PATH - Custom paths (colon-separated)
3. Project .skillcast/skills/ - Project-local skills

Every root contributes to one corpus; the same skill id in two roots
is a duplicate, not an override.
"""

from __future__ import annotations

import abc as _abc
import collections.abc as _collections_abc
import os as _os
import pathlib as _pathlib

import skillcast.constants as constants

ENV_SKILL_PATH = "SKILLCAST_SKILL_PATH"


def get_global_skills_path() -> _pathlib.Path:
    """Get the path to global skills directory."""
    return _pathlib.Path.home() / ".config" / "skillcast" / "skills"


def get_project_skills_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Get the path to project-local skills directory."""
    return project_root / ".skillcast" / "skills"


def get_skill_search_paths(
    project_root: _pathlib.Path | None = None,
    *,
    extra_paths: _collections_abc.Sequence[_pathlib.Path] = (),
    include_global: bool = True,
) -> list[_pathlib.Path]:
    """
    Get all skill search paths.

    Args:
        project_root: Project root directory. If None, the project path
                      is not included.
        extra_paths: Configured paths, searched after the env paths.
        include_global: Whether to include the user's global directory.

    Returns:
        De-duplicated list of paths to search.
    """
    paths: list[_pathlib.Path] = []

    if include_global:
        paths.append(get_global_skills_path())

    env_path = _os.environ.get(ENV_SKILL_PATH, "")
    if env_path:
        for p in env_path.split(":"):
            p = p.strip()
            if p:
                paths.append(_pathlib.Path(p).expanduser().resolve())

    for p in extra_paths:
        paths.append(_pathlib.Path(p).expanduser().resolve())

    if project_root is not None:
        paths.append(get_project_skills_path(project_root))

    unique: list[_pathlib.Path] = []
    for p in paths:
        if p not in unique:
            unique.append(p)
    return unique


class DocumentSource(_abc.ABC):
    """
    Abstract provider of raw skill documents.

    Implementations must be safe to call from worker threads: read()
    may run concurrently for different locators.
    """

    @property
    @_abc.abstractmethod
    def name(self) -> str:
        """Short description of the source, used in logs."""
        ...

    @_abc.abstractmethod
    def list_documents(self) -> list[str]:
        """Return the locators of all documents in this source."""
        ...

    @_abc.abstractmethod
    def read(self, locator: str) -> str:
        """Return the raw text of one document."""
        ...


class InMemorySource(DocumentSource):
    """Documents held in memory, keyed by locator."""

    def __init__(
        self,
        documents: _collections_abc.Mapping[str, str],
        name: str = "memory",
    ) -> None:
        self._documents = dict(documents)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def list_documents(self) -> list[str]:
        return sorted(self._documents)

    def read(self, locator: str) -> str:
        try:
            return self._documents[locator]
        except KeyError:
            raise FileNotFoundError(f"No document {locator!r} in {self._name}") from None


class DirectorySource(DocumentSource):
    """
    Skills stored as directories, each holding a SKILL.md file.

    Missing roots are treated as empty so that optional search paths
    (global, project) need no special casing.
    """

    def __init__(self, root: _pathlib.Path) -> None:
        self._root = _pathlib.Path(root)

    @property
    def name(self) -> str:
        return str(self._root)

    @property
    def root(self) -> _pathlib.Path:
        """Directory scanned by this source."""
        return self._root

    def list_documents(self) -> list[str]:
        if not self._root.is_dir():
            return []

        locators: list[str] = []
        for skill_dir in sorted(self._root.iterdir()):
            if not skill_dir.is_dir() or skill_dir.name.startswith("."):
                continue
            skill_file = skill_dir / constants.SKILL_FILE_NAME
            if skill_file.is_file():
                locators.append(str(skill_file))
        return locators

    def read(self, locator: str) -> str:
        return _pathlib.Path(locator).read_text(encoding="utf-8")


def sources_for_paths(
    paths: _collections_abc.Iterable[_pathlib.Path],
) -> list[DocumentSource]:
    """Wrap each path in a DirectorySource."""
    return [DirectorySource(p) for p in paths]

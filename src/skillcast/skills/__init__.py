"""
Skill documents for skillcast.

A skill is a short trigger description plus a body of guidance text,
stored as markdown with YAML frontmatter. This package turns document
sources into immutable Corpus snapshots.

Skill discovery locations:
1. ~/.config/skillcast/skills/ - User skills
2. $SKILLCAST_SKILL_PATH - Custom paths (colon-separated)
3. Project .skillcast/skills/ - Project-local skills
"""

from skillcast.skills.corpus import Corpus, next_snapshot_version
from skillcast.skills.loader import LoadResult, LoadWarning, load_corpus
from skillcast.skills.skill import (
    Skill,
    SkillFrontmatter,
    parse_skill,
    parse_skill_markdown,
    skill_id_from_name,
)
from skillcast.skills.sources import (
    DirectorySource,
    DocumentSource,
    InMemorySource,
    get_global_skills_path,
    get_project_skills_path,
    get_skill_search_paths,
    sources_for_paths,
)

__all__ = [
    # Core
    "Skill",
    "SkillFrontmatter",
    "Corpus",
    "next_snapshot_version",
    # Parsing
    "parse_skill",
    "parse_skill_markdown",
    "skill_id_from_name",
    # Sources
    "DocumentSource",
    "DirectorySource",
    "InMemorySource",
    "get_global_skills_path",
    "get_project_skills_path",
    "get_skill_search_paths",
    "sources_for_paths",
    # Loading
    "LoadResult",
    "LoadWarning",
    "load_corpus",
]

"""
Skills - Composable capabilities of the greeting pipeline.

Each skill is a directory containing:
- SKILL.md: Metadata with YAML frontmatter + detailed instructions
- skill_name.py: Implementation
"""

from pathlib import Path

# Skill directories
SKILLS_DIR = Path(__file__).parent

# Import skills from subdirectories
from .parse_response.parse_response import (
    classify_response,
    content_from_turn,
    parse_response,
    turn_from_content,
)
from .generate_greeting.generate_greeting import GreetingSession
from .animate_greeting.animate_greeting import CancellationToken, GreetingAnimator

__all__ = [
    "classify_response",
    "content_from_turn",
    "parse_response",
    "turn_from_content",
    "GreetingSession",
    "GreetingAnimator",
    "CancellationToken",
    "SKILLS_DIR",
]


def list_skills() -> list[dict]:
    """
    List all available skills with their metadata.

    Returns list of dicts with name, description, and path.
    """
    import yaml

    skills = []
    for skill_dir in sorted(SKILLS_DIR.iterdir()):
        if skill_dir.is_dir() and not skill_dir.name.startswith("_"):
            skill_md = skill_dir / "SKILL.md"
            if skill_md.exists():
                content = skill_md.read_text(encoding="utf-8")
                # Extract YAML frontmatter
                if content.startswith("---"):
                    end = content.find("---", 3)
                    if end > 0:
                        frontmatter = content[3:end].strip()
                        try:
                            metadata = yaml.safe_load(frontmatter)
                            skills.append({
                                "name": metadata.get("name", skill_dir.name),
                                "description": metadata.get("description", ""),
                                "triggers": metadata.get("triggers", []),
                                "keywords": metadata.get("keywords", []),
                                "path": str(skill_dir),
                            })
                        except yaml.YAMLError:
                            pass
    return skills


def get_skill_context() -> str:
    """Get skill summaries as a markdown list."""
    skills = list_skills()
    lines = ["## Available Skills\n"]
    for skill in skills:
        lines.append(f"- **{skill['name']}**: {skill['description']}")
    return "\n".join(lines)

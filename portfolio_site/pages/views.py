"""
View helpers

Pure functions that shape content rows into what the pages display. They
take rows (ORM objects or response schemas) and return plain values, so
they are shared by the page routes and the CV export.
"""
import datetime as dt
from typing import Iterable, Optional

EXPERIENCE_FILTERS = ("all", "work", "education", "volunteer")

EXPERIENCE_TYPE_LABELS = {
    "work": "Work Experience",
    "education": "Education",
    "volunteer": "Volunteer",
}

# platform -> icon name used by the frontend icon set
SOCIAL_ICONS = {
    "github": "github",
    "linkedin": "linkedin",
    "twitter": "twitter",
    "x": "twitter",
    "email": "mail",
    "mail": "mail",
    "instagram": "instagram",
    "facebook": "facebook",
    "youtube": "youtube",
    "website": "globe",
}
DEFAULT_SOCIAL_ICON = "link"


def skill_percentage(level: Optional[int]) -> int:
    """Bar width for a skill: levels 1-5 are scaled by 20, larger levels are already percentages."""
    if not level or level < 0:
        return 0
    if level <= 5:
        return level * 20
    return min(level, 100)


def group_skills_by_category(skills: Iterable) -> dict[str, list]:
    """Category -> skills, keeping the order the skills arrive in."""
    grouped: dict[str, list] = {}
    for skill in skills:
        grouped.setdefault(skill.category, []).append(skill)
    return grouped


def format_month(value: Optional[dt.date]) -> str:
    if value is None:
        return "Present"
    return value.strftime("%b %Y")


def date_range_label(start: Optional[dt.date], end: Optional[dt.date]) -> str:
    """'Jan 2021 - Present' style range. A missing end date means ongoing."""
    return f"{format_month(start)} - {format_month(end)}"


def filter_experience(entries: Iterable, kind: str = "all") -> list:
    if kind == "all":
        return list(entries)
    return [entry for entry in entries if entry.type == kind]


def social_icon(platform: Optional[str], icon: Optional[str] = None) -> str:
    if icon:
        return icon
    return SOCIAL_ICONS.get((platform or "").strip().lower(), DEFAULT_SOCIAL_ICON)


def collect_tags(projects: Iterable) -> list[str]:
    """Unique project tags in order of first appearance."""
    seen: dict[str, None] = {}
    for project in projects:
        for tag in project.tags or []:
            seen.setdefault(tag, None)
    return list(seen)


def filter_projects_by_tag(projects: Iterable, tag: Optional[str]) -> list:
    if not tag or tag == "all":
        return list(projects)
    return [project for project in projects if tag in (project.tags or [])]


def experience_card(entry) -> dict:
    return {
        "id": entry.id,
        "position": entry.position,
        "organization": entry.organization,
        "type": entry.type,
        "type_label": EXPERIENCE_TYPE_LABELS.get(entry.type, entry.type),
        "start_date": entry.start_date,
        "end_date": entry.end_date,
        "date_range": date_range_label(entry.start_date, entry.end_date),
        "description": entry.description,
    }


def skill_bar(skill) -> dict:
    return {
        "id": skill.id,
        "name": skill.name,
        "category": skill.category,
        "level": skill.level,
        "percentage": skill_percentage(skill.level),
    }


def social_link_entry(link) -> dict:
    return {
        "id": link.id,
        "platform": link.platform,
        "url": link.url,
        "label": link.label or link.platform,
        "icon": social_icon(link.platform, link.icon),
    }

"""
CV export

Builds an HTML CV from the site content and lays it out on A4 pages with
PyMuPDF's Story API.
"""
import io
import logging
from dataclasses import dataclass, field
from html import escape
from typing import Optional

import fitz  # PyMuPDF
from sqlalchemy.orm import Session

from portfolio_site.content import service
from portfolio_site.pages.views import date_range_label, group_skills_by_category

logger = logging.getLogger(__name__)

PAGE_MARGIN = 36  # points (0.5 inch)
DEFAULT_NAME = "Curriculum Vitae"

CV_CSS = """
* { font-family: sans-serif; }
body { font-size: 10pt; color: #222222; }
h1 { font-size: 22pt; color: #2563eb; text-align: center; margin-bottom: 2pt; }
p.tagline { text-align: center; color: #444444; margin-top: 0; }
h2 { font-size: 13pt; color: #2563eb; border-bottom: 1px solid #e0e0e0; margin-top: 12pt; margin-bottom: 4pt; }
li { margin-bottom: 4pt; }
span.muted { color: #444444; }
"""


@dataclass
class CVData:
    about: Optional[object] = None
    experience: list = field(default_factory=list)
    projects: list = field(default_factory=list)
    skills: list = field(default_factory=list)
    certificates: list = field(default_factory=list)


def collect_cv_data(db: Session) -> CVData:
    """Every section is read independently; a failed read leaves that section empty."""
    return CVData(
        about=service.get_about_cached(db).first,
        experience=service.get_experience(db).items,
        projects=service.get_projects(db).items,
        skills=service.get_skills(db).items,
        certificates=service.get_certificates(db).items,
    )


def _section(title: str, items: list[str]) -> str:
    if not items:
        return ""
    rows = "".join(f"<li>{item}</li>" for item in items)
    return f"<h2>{escape(title.upper())}</h2><ul>{rows}</ul>"


def build_cv_html(data: CVData) -> str:
    about = data.about
    name = escape((about.title if about and about.title else None) or DEFAULT_NAME)
    tagline = escape(about.tagline) if about and about.tagline else ""

    parts = [f"<h1>{name}</h1>"]
    if tagline:
        parts.append(f'<p class="tagline">{tagline}</p>')
    if about and about.content:
        parts.append(f"<h2>PROFILE</h2><p>{escape(about.content)}</p>")

    parts.append(_section("Skills", [
        f"<b>{escape(category)}:</b> {escape(', '.join(s.name for s in skills))}"
        for category, skills in group_skills_by_category(data.skills).items()
    ]))

    parts.append(_section("Projects", [
        f"<b>{escape(p.title)}</b>"
        + (f" - {escape(', '.join(p.tags))}" if p.tags else "")
        + (f'<br/><span class="muted">{escape(p.description)}</span>' if p.description else "")
        for p in data.projects
    ]))

    parts.append(_section("Experience", [
        f"<b>{escape(e.position)}</b> - {escape(e.organization)} "
        f"({escape(date_range_label(e.start_date, e.end_date))})"
        + (f'<br/><span class="muted">{escape(e.description)}</span>' if e.description else "")
        for e in data.experience
    ]))

    parts.append(_section("Certifications", [
        escape(c.title)
        + (f" - {escape(c.issuer)}" if c.issuer else "")
        + (f" ({c.date.year})" if c.date else "")
        for c in data.certificates
    ]))

    return "<body>" + "".join(parts) + "</body>"


def render_pdf(html: str) -> bytes:
    """Lay the HTML out on as many A4 pages as it needs."""
    story = fitz.Story(html=html, user_css=CV_CSS)
    buffer = io.BytesIO()
    writer = fitz.DocumentWriter(buffer)

    mediabox = fitz.paper_rect("a4")
    where = mediabox + (PAGE_MARGIN, PAGE_MARGIN, -PAGE_MARGIN, -PAGE_MARGIN)

    pages = 0
    more = 1
    while more:
        device = writer.begin_page(mediabox)
        more, _ = story.place(where)
        story.draw(device)
        writer.end_page()
        pages += 1
    writer.close()

    logger.info(f"Rendered CV ({pages} page(s))")
    return buffer.getvalue()


def export_cv(db: Session) -> bytes:
    return render_pdf(build_cv_html(collect_cv_data(db)))

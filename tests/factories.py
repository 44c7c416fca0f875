"""Row builders shared by the tests."""
import datetime as dt

from portfolio_site.content.models import (
    AboutSection,
    Achievement,
    Certificate,
    Experience,
    Project,
    Skill,
    SocialLink,
    Testimonial,
)


def add(db, *rows):
    db.add_all(rows)
    db.commit()
    for row in rows:
        db.refresh(row)
    return rows if len(rows) > 1 else rows[0]


def make_project(title="Portfolio", **kwargs):
    kwargs.setdefault("tags", ["React"])
    return Project(title=title, **kwargs)


def make_experience(position, start, end=None, type="work", **kwargs):
    return Experience(
        position=position,
        organization=kwargs.pop("organization", "Acme"),
        start_date=start,
        end_date=end,
        type=type,
        **kwargs,
    )


def make_skill(name, category, level=3):
    return Skill(name=name, category=category, level=level)


def make_certificate(title, date=dt.date(2024, 1, 1), approved=True, **kwargs):
    return Certificate(title=title, issuer=kwargs.pop("issuer", "Coursera"), date=date, is_approved=approved, **kwargs)


def make_achievement(title, date=dt.date(2024, 1, 1), approved=True, **kwargs):
    return Achievement(title=title, date=date, is_approved=approved, **kwargs)


def make_testimonial(name, approved=True, **kwargs):
    return Testimonial(
        name=name,
        position=kwargs.pop("position", "Engineer"),
        company=kwargs.pop("company", "Initech"),
        content=kwargs.pop("content", "Great to work with."),
        rating=kwargs.pop("rating", 5),
        is_approved=approved,
        **kwargs,
    )


def make_social_link(platform, url, **kwargs):
    return SocialLink(platform=platform, url=url, **kwargs)


def make_about(**kwargs):
    kwargs.setdefault("title", "Jane Doe")
    kwargs.setdefault("tagline", "Builder of things")
    return AboutSection(id=1, **kwargs)

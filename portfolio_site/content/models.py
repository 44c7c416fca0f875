"""
Portfolio content models.

One table per entity, mirroring the tables of the hosted Supabase project.
All constraints beyond NOT NULL live in the remote database; the application
treats its local state as a disposable cache of these rows.
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    JSON,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB

from portfolio_site.shared.database import Base

# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite)
JSONList = JSON().with_variant(JSONB(), "postgresql")


class Project(Base):
    """Portfolio project shown on the portfolio page and the CV."""
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    image_url = Column(String(500))
    tags = Column(JSONList, default=list)  # ["React", "Supabase"], order preserved
    link = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Experience(Base):
    """
    Work, education or volunteer entry.
    end_date NULL means the position is ongoing ("Present").
    """
    __tablename__ = "experience"

    id = Column(Integer, primary_key=True)
    position = Column(String(200), nullable=False)
    organization = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    description = Column(Text)
    type = Column(String(20), nullable=False, default="work")  # work | education | volunteer


class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    level = Column(Integer, nullable=False, default=1)  # 1-5, or 1-100 as a percentage


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    issuer = Column(String(200))
    date = Column(Date)
    description = Column(Text)
    image_url = Column(String(500))
    type = Column(String(20), default="course")  # event | course
    is_approved = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Achievement(Base):
    """Achievement entry. Only approved rows are public."""
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    organization = Column(String(200))
    date = Column(Date)
    image_url = Column(String(500))
    is_approved = Column(Boolean, nullable=False, default=False)
    awarded_by = Column(String(200))
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Testimonial(Base):
    """
    Testimonial submitted by a visitor.
    Submissions arrive unapproved; the admin flips is_approved to publish them.
    """
    __tablename__ = "testimonials"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    position = Column(String(200))
    company = Column(String(200))
    content = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False, default=5)
    image_url = Column(String(500))
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class SocialLink(Base):
    __tablename__ = "social_links"

    id = Column(Integer, primary_key=True)
    platform = Column(String(50), nullable=False)
    url = Column(String(500), nullable=False)
    icon = Column(String(50))
    label = Column(String(100))


class AboutSection(Base):
    """
    Single-row content block (id=1) with the bio shown on the home,
    about and footer sections.
    """
    __tablename__ = "about"

    id = Column(Integer, primary_key=True)
    title = Column(String(200))
    content = Column(Text)
    tagline = Column(String(300))
    footer_bio = Column(Text)
    image_url = Column(String(500))  # profile picture
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Profile(Base):
    """
    Row per Supabase auth user. is_admin gates the admin dashboard.
    """
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)  # auth.users uuid
    email = Column(String(320))
    is_admin = Column(Boolean, nullable=False, default=False)

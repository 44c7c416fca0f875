"""
Pydantic schemas for the portfolio content.

Create schemas double as the admin form drafts; Update schemas have every
field optional so that only the submitted fields are written.
"""
import datetime as dt
from typing import ClassVar, Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

ExperienceType = Literal["work", "education", "volunteer"]
CertificateType = Literal["event", "course"]


class PartialUpdate(BaseModel):
    """
    Base for the admin Update schemas.

    Fields may be left out, but the ones named in `not_null` can't be set to
    null: the row (or its response schema) requires a value there.
    """
    not_null: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        cleared = [name for name in self.not_null if name in self.model_fields_set and getattr(self, name) is None]
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


# ──────────────────────────────────────────────────────────────────────────────
# Projects
# ──────────────────────────────────────────────────────────────────────────────

class ProjectBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    link: Optional[str] = None


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(PartialUpdate):
    not_null = ("title", "tags")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = None
    tags: Optional[list[str]] = None
    link: Optional[str] = None


class ProjectResponse(ProjectBase):
    id: int
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ──────────────────────────────────────────────────────────────────────────────
# Experience
# ──────────────────────────────────────────────────────────────────────────────

class ExperienceBase(BaseModel):
    position: str = Field(..., min_length=1, max_length=200)
    organization: str = Field(..., min_length=1, max_length=200)
    start_date: dt.date
    end_date: Optional[dt.date] = None
    description: Optional[str] = None
    type: ExperienceType = "work"


class ExperienceCreate(ExperienceBase):
    pass


class ExperienceUpdate(PartialUpdate):
    not_null = ("position", "organization", "start_date", "type")

    position: Optional[str] = Field(None, min_length=1, max_length=200)
    organization: Optional[str] = Field(None, min_length=1, max_length=200)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    description: Optional[str] = None
    type: Optional[ExperienceType] = None


class ExperienceResponse(ExperienceBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


# ──────────────────────────────────────────────────────────────────────────────
# Skills
# ──────────────────────────────────────────────────────────────────────────────

class SkillBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    level: int = Field(1, ge=1, le=100)


class SkillCreate(SkillBase):
    pass


class SkillUpdate(PartialUpdate):
    not_null = ("name", "category", "level")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    level: Optional[int] = Field(None, ge=1, le=100)


class SkillResponse(SkillBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


# ──────────────────────────────────────────────────────────────────────────────
# Certificates
# ──────────────────────────────────────────────────────────────────────────────

class CertificateBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    issuer: Optional[str] = None
    # Admin drafts send "YYYY-MM-DD" strings; stored as a date
    date: Optional[dt.date] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    type: CertificateType = "course"
    is_approved: bool = True


class CertificateCreate(CertificateBase):
    pass


class CertificateUpdate(PartialUpdate):
    not_null = ("title", "type", "is_approved")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    issuer: Optional[str] = None
    date: Optional[dt.date] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    type: Optional[CertificateType] = None
    is_approved: Optional[bool] = None


class CertificateResponse(CertificateBase):
    id: int
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ──────────────────────────────────────────────────────────────────────────────
# Achievements
# ──────────────────────────────────────────────────────────────────────────────

class AchievementBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    organization: Optional[str] = None
    date: Optional[dt.date] = None
    image_url: Optional[str] = None
    is_approved: bool = False
    awarded_by: Optional[str] = None


class AchievementCreate(AchievementBase):
    pass


class AchievementUpdate(PartialUpdate):
    not_null = ("title", "is_approved")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    organization: Optional[str] = None
    date: Optional[dt.date] = None
    image_url: Optional[str] = None
    is_approved: Optional[bool] = None
    awarded_by: Optional[str] = None


class AchievementResponse(AchievementBase):
    id: int
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ──────────────────────────────────────────────────────────────────────────────
# Testimonials
# ──────────────────────────────────────────────────────────────────────────────

class TestimonialBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    position: str = Field(..., min_length=1, max_length=200)
    company: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    rating: int = Field(5, ge=1, le=5)
    image_url: Optional[str] = None


class TestimonialSubmission(TestimonialBase):
    """Public submission. Approval is never taken from the visitor."""
    pass


class TestimonialCreate(TestimonialBase):
    is_approved: bool = False


class TestimonialUpdate(PartialUpdate):
    not_null = ("name", "position", "company", "content", "rating", "is_approved")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    position: Optional[str] = Field(None, min_length=1, max_length=200)
    company: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    rating: Optional[int] = Field(None, ge=1, le=5)
    image_url: Optional[str] = None
    is_approved: Optional[bool] = None


class TestimonialResponse(TestimonialBase):
    id: int
    # Nullable columns; older rows may lack them
    position: Optional[str] = None
    company: Optional[str] = None
    is_approved: bool
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ──────────────────────────────────────────────────────────────────────────────
# Social links, about, contact messages
# ──────────────────────────────────────────────────────────────────────────────

class SocialLinkBase(BaseModel):
    platform: str = Field(..., min_length=1, max_length=50)
    url: str = Field(..., min_length=1, max_length=500)
    icon: Optional[str] = None
    label: Optional[str] = None


class SocialLinkCreate(SocialLinkBase):
    pass


class SocialLinkUpdate(PartialUpdate):
    not_null = ("platform", "url")

    platform: Optional[str] = Field(None, min_length=1, max_length=50)
    url: Optional[str] = Field(None, min_length=1, max_length=500)
    icon: Optional[str] = None
    label: Optional[str] = None


class SocialLinkResponse(SocialLinkBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class AboutUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    tagline: Optional[str] = None
    footer_bio: Optional[str] = None
    image_url: Optional[str] = None


class AboutResponse(AboutUpdate):
    id: int
    updated_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ContactSubmission(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    message: str = Field(..., min_length=1, max_length=5000)


class ContactMessageUpdate(BaseModel):
    read: Optional[bool] = None


class ContactMessageResponse(BaseModel):
    id: int
    name: str
    email: str
    message: str
    read: bool
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)

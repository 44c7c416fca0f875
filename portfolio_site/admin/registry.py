"""
Admin entity registry

Maps the URL segment used by the admin routes (/admin/{entity}) to the model,
the schemas and the storage bucket of each editable collection.
"""
from dataclasses import dataclass
from typing import Optional, Type

from pydantic import BaseModel

from portfolio_site.content import models, schemas
from portfolio_site.shared.database import Base


@dataclass(frozen=True)
class EntitySpec:
    name: str
    model: Type[Base]
    response_schema: Type[BaseModel]
    create_schema: Optional[Type[BaseModel]] = None  # None: rows can't be created from the admin
    update_schema: Optional[Type[BaseModel]] = None
    bucket: Optional[str] = None  # storage bucket for image_url, None if the entity has no image
    approvable: bool = False
    order_by: tuple = ()

    @property
    def table(self) -> str:
        return self.model.__tablename__


ENTITIES: dict[str, EntitySpec] = {
    spec.name: spec
    for spec in (
        EntitySpec(
            name="projects",
            model=models.Project,
            response_schema=schemas.ProjectResponse,
            create_schema=schemas.ProjectCreate,
            update_schema=schemas.ProjectUpdate,
            bucket="projects",
            order_by=(models.Project.created_at.desc(), models.Project.id.desc()),
        ),
        EntitySpec(
            name="experience",
            model=models.Experience,
            response_schema=schemas.ExperienceResponse,
            create_schema=schemas.ExperienceCreate,
            update_schema=schemas.ExperienceUpdate,
            order_by=(models.Experience.start_date.desc(),),
        ),
        EntitySpec(
            name="skills",
            model=models.Skill,
            response_schema=schemas.SkillResponse,
            create_schema=schemas.SkillCreate,
            update_schema=schemas.SkillUpdate,
            order_by=(models.Skill.category.asc(), models.Skill.id.asc()),
        ),
        EntitySpec(
            name="certificates",
            model=models.Certificate,
            response_schema=schemas.CertificateResponse,
            create_schema=schemas.CertificateCreate,
            update_schema=schemas.CertificateUpdate,
            bucket="certificates",
            approvable=True,
            order_by=(models.Certificate.date.desc(),),
        ),
        EntitySpec(
            name="achievements",
            model=models.Achievement,
            response_schema=schemas.AchievementResponse,
            create_schema=schemas.AchievementCreate,
            update_schema=schemas.AchievementUpdate,
            # achievement images share the certificates bucket
            bucket="certificates",
            approvable=True,
            order_by=(models.Achievement.date.desc(),),
        ),
        EntitySpec(
            name="testimonials",
            model=models.Testimonial,
            response_schema=schemas.TestimonialResponse,
            create_schema=schemas.TestimonialCreate,
            update_schema=schemas.TestimonialUpdate,
            bucket="testimonials",
            approvable=True,
            order_by=(models.Testimonial.created_at.desc(), models.Testimonial.id.desc()),
        ),
        EntitySpec(
            name="social_links",
            model=models.SocialLink,
            response_schema=schemas.SocialLinkResponse,
            create_schema=schemas.SocialLinkCreate,
            update_schema=schemas.SocialLinkUpdate,
            order_by=(models.SocialLink.id.asc(),),
        ),
        EntitySpec(
            name="contact_messages",
            model=models.ContactMessage,
            response_schema=schemas.ContactMessageResponse,
            update_schema=schemas.ContactMessageUpdate,
            order_by=(models.ContactMessage.created_at.desc(), models.ContactMessage.id.desc()),
        ),
    )
}

ABOUT_BUCKET = "profile-pictures"


def get_entity(name: str) -> Optional[EntitySpec]:
    return ENTITIES.get(name)

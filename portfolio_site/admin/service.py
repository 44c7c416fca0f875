"""
Admin mutations

Insert/update/delete per entity, image upload and removal, approval and
read flags, and the about upsert. Every write commits, then publishes the
table on the change feed so the live cache re-fetches it. Routes respond
with fetch_admin_dataset() afterwards instead of patching local state.
"""
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from portfolio_site.admin.registry import ABOUT_BUCKET, ENTITIES, EntitySpec
from portfolio_site.content.models import AboutSection
from portfolio_site.content.schemas import AboutResponse, AboutUpdate
from portfolio_site.content.service import get_about, invalidate_about_cache
from portfolio_site.media.images import compress_image, convert_google_drive_url
from portfolio_site.shared.realtime import change_feed
from portfolio_site.shared.supabase import SupabaseClient, SupabaseError
from portfolio_site.shared.upsert import atomic_upsert_singleton

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


class RecordNotFound(LookupError):
    pass


@dataclass
class ImageUpload:
    content: bytes
    content_type: str
    filename: str = ""


def fetch_admin_dataset(db: Session) -> dict[str, Any]:
    """Every collection the dashboard shows, including unapproved rows."""
    dataset: dict[str, Any] = {}
    for name, spec in ENTITIES.items():
        rows = db.query(spec.model).order_by(*spec.order_by).all()
        dataset[name] = [spec.response_schema.model_validate(row) for row in rows]

    about = get_about(db).unwrap_first()
    dataset["about"] = AboutResponse.model_validate(about) if about else None
    return dataset


def _get_row(db: Session, spec: EntitySpec, record_id: int):
    row = db.get(spec.model, record_id)
    if row is None:
        raise RecordNotFound(f"{spec.name} {record_id} not found")
    return row


def _commit(db: Session, table: str) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    change_feed.publish(table, "UPDATE")


def upload_image(storage: SupabaseClient, bucket: str, image: ImageUpload) -> str:
    """Compress and upload an image; returns the public URL."""
    content, content_type = compress_image(image.content, image.content_type)
    ext = EXTENSIONS.get(content_type, "jpg")
    path = f"{uuid4().hex}.{ext}"
    return storage.upload(bucket, path, content, content_type)


def remove_stored_image(storage: SupabaseClient, bucket: str, image_url: str) -> bool:
    """Best-effort delete of the blob behind image_url. Failures are logged."""
    path = storage.storage_path_from_url(image_url, bucket)
    try:
        storage.remove(bucket, [path])
    except SupabaseError as e:
        logger.warning(f"Could not remove {bucket}/{path} from storage: {e}")
        return False
    return True


def _normalise_image_url(data: dict) -> None:
    if data.get("image_url"):
        data["image_url"] = convert_google_drive_url(data["image_url"].strip())


def save_record(
    db: Session,
    storage: SupabaseClient,
    spec: EntitySpec,
    payload: dict,
    image: Optional[ImageUpload] = None,
    record_id: Optional[int] = None,
):
    """
    Create (record_id None) or update a row from an admin draft.

    On update, fields missing from the draft are left alone. Without a new
    file an empty or missing image_url keeps the stored one.

    Raises:
        pydantic.ValidationError: invalid draft
        RecordNotFound: unknown record_id
        SupabaseError: image upload failed
    """
    if record_id is None:
        if spec.create_schema is None:
            raise ValueError(f"{spec.name} can't be created from the admin")
        data = spec.create_schema.model_validate(payload).model_dump()
        row = None
    else:
        row = _get_row(db, spec, record_id)
        data = spec.update_schema.model_validate(payload).model_dump(exclude_unset=True)

    if spec.bucket:
        _normalise_image_url(data)
        if image is not None:
            data["image_url"] = upload_image(storage, spec.bucket, image)
        elif row is not None and not data.get("image_url"):
            data.pop("image_url", None)

    if row is None:
        row = spec.model(**data)
        db.add(row)
    else:
        for key, value in data.items():
            setattr(row, key, value)

    _commit(db, spec.table)
    db.refresh(row)
    logger.info(f"Saved {spec.name} {row.id}")
    return row


def delete_record(db: Session, storage: SupabaseClient, spec: EntitySpec, record_id: int) -> None:
    """Remove the stored image (best effort), then the row."""
    row = _get_row(db, spec, record_id)

    image_url = getattr(row, "image_url", None)
    if spec.bucket and image_url:
        remove_stored_image(storage, spec.bucket, image_url)

    db.delete(row)
    _commit(db, spec.table)
    logger.info(f"Deleted {spec.name} {record_id}")


def remove_image(db: Session, storage: SupabaseClient, spec: EntitySpec, record_id: int):
    """Delete the blob and clear image_url."""
    if not spec.bucket:
        raise ValueError(f"{spec.name} has no image")

    row = _get_row(db, spec, record_id)
    if row.image_url:
        remove_stored_image(storage, spec.bucket, row.image_url)
    row.image_url = None
    _commit(db, spec.table)
    return row


def set_approval(db: Session, spec: EntitySpec, record_id: int, approved: bool):
    if not spec.approvable:
        raise ValueError(f"{spec.name} has no approval flag")

    row = _get_row(db, spec, record_id)
    row.is_approved = approved
    _commit(db, spec.table)
    logger.info(f"{spec.name} {record_id} {'approved' if approved else 'hidden'}")
    return row


def mark_read(db: Session, record_id: int, read: bool = True):
    spec = ENTITIES["contact_messages"]
    row = _get_row(db, spec, record_id)
    row.read = read
    _commit(db, spec.table)
    return row


def update_about(
    db: Session,
    storage: SupabaseClient,
    payload: dict,
    image: Optional[ImageUpload] = None,
) -> None:
    """Upsert the single about row and drop the cached copy."""
    data = AboutUpdate.model_validate(payload).model_dump(exclude_unset=True)
    _normalise_image_url(data)

    if image is not None:
        data["image_url"] = upload_image(storage, ABOUT_BUCKET, image)
    elif not data.get("image_url"):
        data.pop("image_url", None)

    atomic_upsert_singleton(db, AboutSection, data)
    _commit(db, AboutSection.__tablename__)
    invalidate_about_cache()
    logger.info("About section updated")

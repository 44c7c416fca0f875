"""
Admin API

Every route requires an admin session (see shared.auth.require_admin).
Create and edit take a multipart form: `payload` is the JSON draft and
`file` an optional image. Each successful mutation answers with the whole
admin dataset, re-fetched after the commit.
"""
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_site.admin import service
from portfolio_site.admin.registry import EntitySpec, get_entity
from portfolio_site.media.images import upload_to_image_host
from portfolio_site.shared.auth import AdminUser, require_admin
from portfolio_site.shared.database import get_db
from portfolio_site.shared.errors import log_and_sanitize_error
from portfolio_site.shared.supabase import SupabaseClient, SupabaseError, get_supabase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class ApprovalUpdate(BaseModel):
    is_approved: bool


class ReadUpdate(BaseModel):
    read: bool = True


class RehostRequest(BaseModel):
    url: str


def _entity(name: str) -> EntitySpec:
    spec = get_entity(name)
    if spec is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection '{name}'")
    return spec


def _parse_payload(payload: str) -> dict:
    try:
        data = json.loads(payload or "{}")
    except ValueError:
        raise HTTPException(status_code=422, detail="payload must be a JSON object")
    if not isinstance(data, dict):
        raise HTTPException(status_code=422, detail="payload must be a JSON object")
    return data


async def _read_image(file: Optional[UploadFile]) -> Optional[service.ImageUpload]:
    if file is None or not file.filename:
        return None

    if file.content_type not in service.ALLOWED_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed: {', '.join(sorted(service.ALLOWED_TYPES))}",
        )

    contents = await file.read()
    if len(contents) > service.MAX_FILE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {service.MAX_FILE_SIZE // (1024*1024)} MB",
        )
    return service.ImageUpload(content=contents, content_type=file.content_type, filename=file.filename)


def _run_mutation(context: str, action, *args, **kwargs):
    """Run a service mutation, mapping failures to sanitized HTTP errors."""
    try:
        return action(*args, **kwargs)
    except service.RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"message": f"Invalid {context.lower()} data: {e.error_count()} error(s)", "category": "client_error"},
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SupabaseError as e:
        msg, _ = log_and_sanitize_error(e, context, "Image storage failed")
        raise HTTPException(status_code=502, detail={"message": msg, "category": "server_error"})
    except SQLAlchemyError as e:
        msg, _ = log_and_sanitize_error(e, context)
        raise HTTPException(status_code=500, detail={"message": msg, "category": "database"})


@router.get("")
def admin_dashboard(
    admin: AdminUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """All collections for the dashboard, unapproved rows included."""
    return service.fetch_admin_dataset(db)


@router.put("/about")
async def update_about(
    payload: str = Form("{}"),
    file: Optional[UploadFile] = File(None),
    admin: AdminUser = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: SupabaseClient = Depends(get_supabase),
):
    data = _parse_payload(payload)
    image = await _read_image(file)
    _run_mutation("About update", service.update_about, db, storage, data, image)
    return service.fetch_admin_dataset(db)


@router.post("/images/rehost")
def rehost_image(
    body: RehostRequest,
    admin: AdminUser = Depends(require_admin),
):
    """Re-upload a remote (e.g. Google Drive) image to the image host."""
    return {"url": upload_to_image_host(body.url)}


@router.patch("/contact_messages/{record_id}/read")
def mark_message_read(
    record_id: int,
    body: ReadUpdate,
    admin: AdminUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    _run_mutation("Contact message update", service.mark_read, db, record_id, body.read)
    return service.fetch_admin_dataset(db)


@router.post("/{entity}", status_code=201)
async def create_record(
    entity: str,
    payload: str = Form(...),
    file: Optional[UploadFile] = File(None),
    admin: AdminUser = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: SupabaseClient = Depends(get_supabase),
):
    spec = _entity(entity)
    data = _parse_payload(payload)
    image = await _read_image(file)
    _run_mutation(f"Creating {spec.name}", service.save_record, db, storage, spec, data, image)
    return service.fetch_admin_dataset(db)


@router.put("/{entity}/{record_id}")
async def update_record(
    entity: str,
    record_id: int,
    payload: str = Form("{}"),
    file: Optional[UploadFile] = File(None),
    admin: AdminUser = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: SupabaseClient = Depends(get_supabase),
):
    spec = _entity(entity)
    data = _parse_payload(payload)
    image = await _read_image(file)
    _run_mutation(
        f"Updating {spec.name}", service.save_record,
        db, storage, spec, data, image, record_id=record_id,
    )
    return service.fetch_admin_dataset(db)


@router.delete("/{entity}/{record_id}")
def delete_record(
    entity: str,
    record_id: int,
    admin: AdminUser = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: SupabaseClient = Depends(get_supabase),
):
    spec = _entity(entity)
    _run_mutation(f"Deleting {spec.name}", service.delete_record, db, storage, spec, record_id)
    return service.fetch_admin_dataset(db)


@router.delete("/{entity}/{record_id}/image")
def delete_record_image(
    entity: str,
    record_id: int,
    admin: AdminUser = Depends(require_admin),
    db: Session = Depends(get_db),
    storage: SupabaseClient = Depends(get_supabase),
):
    spec = _entity(entity)
    _run_mutation(f"Removing {spec.name} image", service.remove_image, db, storage, spec, record_id)
    return service.fetch_admin_dataset(db)


@router.patch("/{entity}/{record_id}/approval")
def set_approval(
    entity: str,
    record_id: int,
    body: ApprovalUpdate,
    admin: AdminUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    spec = _entity(entity)
    _run_mutation(f"Approving {spec.name}", service.set_approval, db, spec, record_id, body.is_approved)
    return service.fetch_admin_dataset(db)

"""
CV download
"""
import logging
import os
from uuid import uuid4

import aiofiles
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from starlette.background import BackgroundTask

from portfolio_site.cv.export import export_cv
from portfolio_site.shared.database import get_db

logger = logging.getLogger(__name__)

EXPORT_DIR = os.getenv("EXPORT_DIR", "/tmp/portfolio_site/exports")
CV_FILENAME = os.getenv("CV_FILENAME", "cv.pdf")

router = APIRouter(tags=["cv"])


def _discard_export(filepath: str) -> None:
    try:
        os.remove(filepath)
    except OSError as e:
        logger.warning(f"Could not remove CV export {filepath}: {e}")


@router.get("/cv.pdf", response_class=FileResponse)
async def download_cv(db: Session = Depends(get_db)):
    """Generate the CV from the current content and return it as a download."""
    content = await run_in_threadpool(export_cv, db)

    # One file per request; removed once the response has been sent
    os.makedirs(EXPORT_DIR, exist_ok=True)
    filepath = os.path.join(EXPORT_DIR, f"{uuid4().hex}.pdf")
    async with aiofiles.open(filepath, "wb") as f:
        await f.write(content)

    logger.info(f"CV written to {filepath} ({len(content)} bytes)")
    return FileResponse(
        filepath,
        media_type="application/pdf",
        filename=CV_FILENAME,
        background=BackgroundTask(_discard_export, filepath),
    )

"""
Image helpers

- Google Drive share links -> direct-view URLs
- re-hosting remote images on ImgBB
- server-side compression of uploads before they go to Storage
"""
import logging
import os
import re
from typing import Optional
from urllib.parse import urlparse

import fitz  # PyMuPDF
import requests

logger = logging.getLogger(__name__)

IMGBB_API_KEY = os.getenv("IMGBB_API_KEY")
IMGBB_UPLOAD_URL = "https://api.imgbb.com/1/upload"
IMAGE_HOST_TIMEOUT = 15

IMAGE_MAX_DIMENSION = int(os.getenv("IMAGE_MAX_DIMENSION", "1600"))
IMAGE_JPEG_QUALITY = int(os.getenv("IMAGE_JPEG_QUALITY", "80"))

DRIVE_VIEW_URL = "https://drive.google.com/uc?export=view&id={file_id}"

# Tried in order; the first match wins
DRIVE_ID_PATTERNS = [
    re.compile(r"/file/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"/open\?(?:.*&)?id=([a-zA-Z0-9_-]+)"),
    re.compile(r"/(?:uc|thumbnail)\?(?:.*&)?id=([a-zA-Z0-9_-]+)"),
]


def _is_drive_url(url: str) -> bool:
    # Share links are often pasted without the scheme
    if "://" not in url:
        url = f"https://{url.lstrip('/')}"
    host = urlparse(url).netloc.lower()
    return host == "drive.google.com" or host.endswith(".drive.google.com") or host == "docs.google.com"


def extract_drive_file_id(url: str) -> Optional[str]:
    if not url or not _is_drive_url(url):
        return None
    for pattern in DRIVE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def convert_google_drive_url(url: str) -> str:
    """
    Rewrite a Google Drive share link to its direct-view form.

    Handles /file/d/<id>/view, /d/<id>, open?id=<id>, uc?id=<id> and
    thumbnail?id=<id>. Anything else (including empty input) is returned
    unchanged.
    """
    file_id = extract_drive_file_id(url)
    if not file_id:
        return url
    return DRIVE_VIEW_URL.format(file_id=file_id)


def is_valid_image_url(url: Optional[str]) -> bool:
    """True for absolute http(s) URLs."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def upload_to_image_host(url: str) -> str:
    """
    Re-upload a remote image to ImgBB and return the hosted URL.

    Drive links are converted first so ImgBB fetches the image itself and not
    the HTML preview page. Any failure returns the input unchanged.
    """
    if not url:
        return url
    if not IMGBB_API_KEY:
        logger.warning("IMGBB_API_KEY not set, keeping original image URL")
        return url

    source = convert_google_drive_url(url)
    try:
        response = requests.post(
            IMGBB_UPLOAD_URL,
            data={"key": IMGBB_API_KEY, "image": source},
            timeout=IMAGE_HOST_TIMEOUT,
        )
        response.raise_for_status()
        hosted_url = response.json()["data"]["url"]
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        logger.error(f"Image host upload failed for {source}: {e}")
        return url

    logger.info(f"Re-hosted image {source} -> {hosted_url}")
    return hosted_url


def compress_image(
    data: bytes,
    content_type: str = "image/jpeg",
    max_dimension: int = IMAGE_MAX_DIMENSION,
    quality: int = IMAGE_JPEG_QUALITY,
) -> tuple[bytes, str]:
    """
    Downscale an uploaded image and re-encode it as JPEG.

    The image is halved until its longest side fits in max_dimension.
    Returns (content, content_type). When the data can't be decoded, or the
    JPEG would not be smaller, the original bytes and type are returned.
    """
    if not data:
        return data, content_type

    try:
        pix = fitz.Pixmap(data)
        if pix.alpha:
            pix = fitz.Pixmap(pix, 0)
        if pix.colorspace is None or pix.colorspace.n not in (1, 3):
            pix = fitz.Pixmap(fitz.csRGB, pix)

        factor = 0
        longest = max(pix.width, pix.height)
        while longest > max_dimension:
            longest //= 2
            factor += 1
        if factor:
            pix.shrink(factor)

        compressed = pix.tobytes("jpeg", jpg_quality=quality)
    except Exception as e:
        logger.warning(f"Image compression skipped: {e}")
        return data, content_type

    if len(compressed) >= len(data):
        return data, content_type

    logger.debug(f"Compressed image {len(data)} -> {len(compressed)} bytes")
    return compressed, "image/jpeg"

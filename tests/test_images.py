import random

import fitz
import pytest

from portfolio_site.media import images
from portfolio_site.media.images import (
    compress_image,
    convert_google_drive_url,
    is_valid_image_url,
    upload_to_image_host,
)

DIRECT = "https://drive.google.com/uc?export=view&id=1AbC_d-9"


@pytest.mark.parametrize("url", [
    "https://drive.google.com/file/d/1AbC_d-9/view?usp=drive_link",
    "https://drive.google.com/d/1AbC_d-9/view",
    "https://drive.google.com/open?id=1AbC_d-9",
    "https://drive.google.com/uc?id=1AbC_d-9",
    "https://drive.google.com/thumbnail?id=1AbC_d-9&sz=w1000",
    "drive.google.com/file/d/1AbC_d-9/view",
    "docs.google.com/uc?id=1AbC_d-9",
])
def test_drive_share_links_become_direct_view_urls(url):
    assert convert_google_drive_url(url) == DIRECT


def test_direct_view_url_is_stable():
    assert convert_google_drive_url(DIRECT) == DIRECT


@pytest.mark.parametrize("url", [
    "",
    "https://example.com/image.png",
    "https://example.com/file/d/1AbC_d-9/view",
    "example.com/file/d/1AbC_d-9/view",
    "https://drive.google.com/drive/folders",
])
def test_non_drive_urls_are_returned_unchanged(url):
    assert convert_google_drive_url(url) == url


def test_is_valid_image_url():
    assert is_valid_image_url("https://example.com/a.png")
    assert is_valid_image_url("http://example.com/a.png")
    assert not is_valid_image_url("")
    assert not is_valid_image_url(None)
    assert not is_valid_image_url("not a url")
    assert not is_valid_image_url("ftp://example.com/a.png")


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise images.requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        return self._payload


def test_image_host_without_key_keeps_url(monkeypatch):
    monkeypatch.setattr(images, "IMGBB_API_KEY", None)
    url = "https://drive.google.com/file/d/abc/view"
    assert upload_to_image_host(url) == url


def test_image_host_uploads_converted_url(monkeypatch):
    sent = {}

    def fake_post(url, data=None, timeout=None):
        sent.update(data)
        return FakeResponse({"data": {"url": "https://i.ibb.co/xyz/photo.jpg"}})

    monkeypatch.setattr(images, "IMGBB_API_KEY", "key")
    monkeypatch.setattr(images.requests, "post", fake_post)

    hosted = upload_to_image_host("https://drive.google.com/file/d/abc/view")

    assert hosted == "https://i.ibb.co/xyz/photo.jpg"
    assert sent["image"] == "https://drive.google.com/uc?export=view&id=abc"
    assert sent["key"] == "key"


def test_image_host_failure_returns_original(monkeypatch):
    def failing_post(url, data=None, timeout=None):
        raise images.requests.ConnectionError("offline")

    monkeypatch.setattr(images, "IMGBB_API_KEY", "key")
    monkeypatch.setattr(images.requests, "post", failing_post)

    url = "https://example.com/photo.png"
    assert upload_to_image_host(url) == url


def test_image_host_unexpected_body_returns_original(monkeypatch):
    monkeypatch.setattr(images, "IMGBB_API_KEY", "key")
    monkeypatch.setattr(images.requests, "post", lambda *a, **k: FakeResponse({"success": False}))

    assert upload_to_image_host("https://example.com/x.png") == "https://example.com/x.png"


def _noisy_png(width, height):
    samples = random.Random(7).randbytes(width * height * 3)
    pix = fitz.Pixmap(fitz.csRGB, width, height, samples, False)
    return pix.tobytes("png")


def test_compress_image_downscales_to_jpeg():
    original = _noisy_png(1200, 800)

    content, content_type = compress_image(original, "image/png", max_dimension=600)

    assert content_type == "image/jpeg"
    assert len(content) < len(original)
    result = fitz.Pixmap(content)
    assert max(result.width, result.height) <= 600


def test_compress_image_keeps_undecodable_data():
    data = b"definitely not an image"
    assert compress_image(data, "image/png") == (data, "image/png")


def test_compress_image_empty_input():
    assert compress_image(b"", "image/png") == (b"", "image/png")

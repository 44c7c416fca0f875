import json

import pytest

from portfolio_site.content import models
from portfolio_site.content.models import AboutSection, Project
from portfolio_site.content.service import ABOUT_CACHE_KEY, about_cache
from portfolio_site.shared.realtime import change_feed

from conftest import VISITOR_TOKEN
from factories import add, make_about, make_achievement, make_certificate, make_project, make_testimonial

STORED_URL = "https://test.supabase.co/storage/v1/object/public/projects/abc123.jpg"


def _payload(**fields):
    return {"payload": json.dumps(fields)}


def test_admin_requires_a_session(client):
    response = client.get("/admin")
    assert response.status_code == 401
    assert response.json()["category"] == "security"


def test_admin_rejects_non_admin_users(client, admin_headers):
    response = client.get("/admin", headers={"Authorization": f"Bearer {VISITOR_TOKEN}"})
    assert response.status_code == 403


def test_dashboard_includes_unapproved_rows(client, db, admin_headers):
    add(db, make_testimonial("Pending", approved=False))

    dataset = client.get("/admin", headers=admin_headers).json()

    assert [t["name"] for t in dataset["testimonials"]] == ["Pending"]
    assert set(dataset) >= {"projects", "experience", "skills", "certificates", "achievements",
                            "testimonials", "social_links", "contact_messages", "about"}


def test_create_project_with_image(client, db, supabase, admin_headers):
    response = client.post(
        "/admin/projects",
        data=_payload(title="New site", tags=["FastAPI"]),
        files={"file": ("shot.png", b"\x89PNG not really", "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 201
    uploads = [c for c in supabase.calls if c[0] == "upload"]
    assert len(uploads) == 1
    assert uploads[0][1] == "projects"
    created = response.json()["projects"][0]
    assert created["title"] == "New site"
    assert created["image_url"].startswith("https://test.supabase.co/storage/v1/object/public/projects/")


def test_create_normalises_drive_links(client, admin_headers):
    response = client.post(
        "/admin/projects",
        data=_payload(title="Drive", image_url="https://drive.google.com/file/d/XYZ/view"),
        headers=admin_headers,
    )
    assert response.json()["projects"][0]["image_url"] == "https://drive.google.com/uc?export=view&id=XYZ"


def test_invalid_draft_is_rejected(client, admin_headers):
    response = client.post("/admin/projects", data=_payload(description="no title"), headers=admin_headers)
    assert response.status_code == 422


def test_unknown_collection(client, admin_headers):
    response = client.post("/admin/widgets", data=_payload(title="x"), headers=admin_headers)
    assert response.status_code == 404


def test_edit_without_file_keeps_image_url(client, db, supabase, admin_headers):
    project = add(db, make_project("Old title", image_url=STORED_URL))

    response = client.put(
        f"/admin/projects/{project.id}",
        data=_payload(title="New title", image_url=""),
        headers=admin_headers,
    )

    assert response.status_code == 200
    db.expire_all()
    stored = db.get(Project, project.id)
    assert stored.title == "New title"
    assert stored.image_url == STORED_URL
    assert supabase.calls == []


@pytest.mark.parametrize("entity, make_row, field, value", [
    ("testimonials", lambda: make_testimonial("Ada"), "position", None),
    ("testimonials", lambda: make_testimonial("Ada"), "company", ""),
    ("testimonials", lambda: make_testimonial("Ada"), "rating", None),
    ("certificates", lambda: make_certificate("AWS"), "title", None),
    ("certificates", lambda: make_certificate("AWS"), "type", None),
    ("achievements", lambda: make_achievement("Hackathon"), "title", ""),
    ("achievements", lambda: make_achievement("Hackathon"), "is_approved", None),
])
def test_clearing_a_required_field_is_rejected(client, db, admin_headers, entity, make_row, field, value):
    row = add(db, make_row())

    response = client.put(f"/admin/{entity}/{row.id}", data=_payload(**{field: value}), headers=admin_headers)

    assert response.status_code == 422
    assert client.get(f"/api/{entity}").status_code == 200
    assert client.get(f"/{entity}").status_code == 200
    assert client.get("/admin", headers=admin_headers).status_code == 200


def test_clearing_project_title_is_rejected(client, db, admin_headers):
    project = add(db, make_project("Keep me"))

    response = client.put(f"/admin/projects/{project.id}", data=_payload(title=None), headers=admin_headers)

    assert response.status_code == 422
    db.expire_all()
    assert db.get(Project, project.id).title == "Keep me"


def test_testimonial_without_position_still_lists(client, db, admin_headers):
    add(db, make_testimonial("Legacy", position=None, company=None))

    public = client.get("/api/testimonials")
    page = client.get("/testimonials")

    assert public.status_code == 200
    assert public.json()[0]["position"] is None
    assert page.status_code == 200
    assert client.get("/admin", headers=admin_headers).status_code == 200


def test_edit_missing_record(client, admin_headers):
    response = client.put("/admin/projects/999", data=_payload(title="x"), headers=admin_headers)
    assert response.status_code == 404


def test_delete_removes_image_then_row(client, db, supabase, admin_headers):
    project = add(db, make_project("With image", image_url=STORED_URL))

    response = client.delete(f"/admin/projects/{project.id}", headers=admin_headers)

    assert response.status_code == 200
    assert supabase.calls == [("remove", "projects", ["abc123.jpg"])]
    assert response.json()["projects"] == []
    db.expire_all()
    assert db.get(Project, project.id) is None


def test_delete_without_image_skips_storage(client, db, supabase, admin_headers):
    project = add(db, make_project("No image"))

    client.delete(f"/admin/projects/{project.id}", headers=admin_headers)

    assert supabase.calls == []


def test_delete_survives_storage_failure(client, db, supabase, admin_headers):
    project = add(db, make_project("With image", image_url=STORED_URL))
    supabase.fail_remove = True

    response = client.delete(f"/admin/projects/{project.id}", headers=admin_headers)

    assert response.status_code == 200
    assert len([c for c in supabase.calls if c[0] == "remove"]) == 1
    db.expire_all()
    assert db.get(Project, project.id) is None


def test_remove_image_clears_field(client, db, supabase, admin_headers):
    project = add(db, make_project("With image", image_url=STORED_URL))

    response = client.delete(f"/admin/projects/{project.id}/image", headers=admin_headers)

    assert response.status_code == 200
    assert supabase.calls == [("remove", "projects", ["abc123.jpg"])]
    assert response.json()["projects"][0]["image_url"] is None


def test_upload_failure_is_reported(client, supabase, admin_headers):
    supabase.fail_upload = True

    response = client.post(
        "/admin/projects",
        data=_payload(title="New site"),
        files={"file": ("shot.png", b"png", "image/png")},
        headers=admin_headers,
    )

    assert response.status_code == 502
    assert "Error ID" in response.json()["error"]


def test_rejects_unsupported_file_types(client, admin_headers):
    response = client.post(
        "/admin/projects",
        data=_payload(title="New site"),
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_approval_toggle(client, db, admin_headers):
    pending = add(db, make_testimonial("Pending", approved=False))

    response = client.patch(
        f"/admin/testimonials/{pending.id}/approval",
        json={"is_approved": True},
        headers=admin_headers,
    )

    assert response.status_code == 200
    db.expire_all()
    assert db.get(models.Testimonial, pending.id).is_approved is True
    assert [t["name"] for t in client.get("/api/testimonials").json()] == ["Pending"]


def test_approval_not_available_for_projects(client, db, admin_headers):
    project = add(db, make_project())
    response = client.patch(f"/admin/projects/{project.id}/approval", json={"is_approved": True}, headers=admin_headers)
    assert response.status_code == 400


def test_mark_contact_message_read(client, db, admin_headers):
    client.post("/contact", json={"name": "Bob", "email": "bob@example.com", "message": "Hi"})
    message_id = client.get("/admin", headers=admin_headers).json()["contact_messages"][0]["id"]

    response = client.patch(f"/admin/contact_messages/{message_id}/read", json={"read": True}, headers=admin_headers)

    assert response.json()["contact_messages"][0]["read"] is True


def test_about_update_upserts_and_invalidates_cache(client, db, admin_headers):
    add(db, make_about())
    assert client.get("/api/about").json()["title"] == "Jane Doe"
    assert ABOUT_CACHE_KEY in about_cache

    response = client.put("/admin/about", data=_payload(title="Jane Q. Doe"), headers=admin_headers)

    assert response.status_code == 200
    assert ABOUT_CACHE_KEY not in about_cache
    assert client.get("/api/about").json()["title"] == "Jane Q. Doe"
    db.expire_all()
    assert db.query(AboutSection).count() == 1


def test_about_update_creates_row(client, db, admin_headers):
    response = client.put("/admin/about", data=_payload(tagline="Hello"), headers=admin_headers)
    assert response.json()["about"]["tagline"] == "Hello"


def test_mutations_publish_on_change_feed(client, admin_headers):
    events = []
    unsubscribe = change_feed.subscribe("projects", lambda table, event: events.append(table))
    try:
        client.post("/admin/projects", data=_payload(title="Live"), headers=admin_headers)
    finally:
        unsubscribe()

    assert events == ["projects"]


def test_rehost_image(client, admin_headers):
    # No IMGBB_API_KEY in tests: the URL comes back unchanged
    url = "https://example.com/photo.png"
    response = client.post("/admin/images/rehost", json={"url": url}, headers=admin_headers)
    assert response.json() == {"url": url}

"""
Shared fixtures

Environment is set before anything from portfolio_site is imported: the
modules read their configuration at import time.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENCRYPTION_KEY"] = "test-encryption-key-not-for-production"
os.environ["STATE_SECRET"] = "test-state-secret-not-for-production"
os.environ["RATELIMIT_ENABLED"] = "false"
os.environ["REALTIME_LISTENER_ENABLED"] = "false"
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ.pop("IMGBB_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from portfolio_site.content.models import Profile
from portfolio_site.content.service import about_cache
from portfolio_site.main import app
from portfolio_site.shared.database import Base, get_db
from portfolio_site.shared.supabase import SupabaseClient, SupabaseError, get_supabase

ADMIN_TOKEN = "admin-token"
VISITOR_TOKEN = "visitor-token"


class FakeSupabase:
    """Records storage calls and resolves tokens from a dict."""

    storage_path_from_url = staticmethod(SupabaseClient.storage_path_from_url)

    def __init__(self):
        self.url = "https://test.supabase.co"
        self.users: dict[str, dict] = {}
        self.calls: list[tuple] = []
        self.fail_remove = False
        self.fail_upload = False

    def public_url(self, bucket, path):
        return f"{self.url}/storage/v1/object/public/{bucket}/{path}"

    def upload(self, bucket, path, content, content_type):
        self.calls.append(("upload", bucket, path, content_type))
        if self.fail_upload:
            raise SupabaseError("upload rejected", 400)
        return self.public_url(bucket, path)

    def remove(self, bucket, paths):
        self.calls.append(("remove", bucket, list(paths)))
        if self.fail_remove:
            raise SupabaseError("remove failed", 500)

    def get_user(self, access_token):
        return self.users.get(access_token)

    def sign_in_with_password(self, email, password):
        for token, user in self.users.items():
            if user.get("email") == email and user.get("password") == password:
                return {"access_token": token, "refresh_token": "refresh", "expires_in": 3600, "user": user}
        raise SupabaseError("Invalid login credentials", 400)

    def sign_out(self, access_token):
        self.calls.append(("sign_out", access_token))

    def authorize_url(self, provider, redirect_to, code_challenge):
        return f"{self.url}/auth/v1/authorize?provider={provider}&code_challenge={code_challenge}"

    def exchange_code(self, auth_code, code_verifier):
        self.calls.append(("exchange_code", auth_code, code_verifier))
        return {"access_token": ADMIN_TOKEN, "refresh_token": "refresh", "expires_in": 3600,
                "user": self.users.get(ADMIN_TOKEN, {})}


class BrokenSession:
    """Session stand-in whose every query fails."""

    def __init__(self):
        self.rolled_back = False

    def query(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database unavailable"))

    def add(self, obj):
        pass

    def commit(self):
        raise OperationalError("INSERT", {}, Exception("database unavailable"))

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def clear_about_cache():
    about_cache.clear()
    yield
    about_cache.clear()


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def client(session_factory, supabase):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_supabase] = lambda: supabase
    # No context manager: the lifespan (live cache, triggers) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client(supabase):
    def override_get_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_supabase] = lambda: supabase
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(db, supabase):
    db.add(Profile(id="admin-1", email="admin@example.com", is_admin=True))
    db.add(Profile(id="visitor-1", email="visitor@example.com", is_admin=False))
    db.commit()
    supabase.users[ADMIN_TOKEN] = {"id": "admin-1", "email": "admin@example.com", "password": "secret"}
    supabase.users[VISITOR_TOKEN] = {"id": "visitor-1", "email": "visitor@example.com", "password": "hunter2"}
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Contact emails are captured instead of posted to the email function."""
    from portfolio_site.submissions import mailer

    sent = []

    def capture(payload):
        sent.append(payload)
        return True

    monkeypatch.setattr(mailer, "send_contact_email", capture)
    return sent

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SUPABASE_JWT_AUDIENCE", "authenticated")
os.environ.setdefault("APP_ENV", "test")

import uuid
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.db.base import Base
from app.db.session import enable_sqlite_savepoints
from app.deps import get_db, get_renderer, get_storage
from app.main import app
from app.services.pdf_render import PdfRenderer, RenderedPage
from app.services.storage_service import SlideStorage


class FakeStorage(SlideStorage):
    """In-memory stand-in for the Supabase slides bucket."""

    def __init__(self):
        super().__init__(client=None, bucket="slides")
        self.objects: Dict[str, bytes] = {}
        self.fail_remove = False

    def upload(self, dest_path, data, content_type):
        self.objects[dest_path] = data
        return dest_path

    def public_url(self, path):
        return f"https://example.supabase.co/storage/v1/object/public/{self.bucket}/{path}"

    def list(self, prefix):
        return [p for p in self.objects if p.startswith(f"{prefix}/")]

    def remove(self, paths):
        if self.fail_remove:
            raise RuntimeError("storage unavailable")
        for p in paths:
            self.objects.pop(p, None)


class FakeRenderer(PdfRenderer):
    """Pretends to be poppler: `pages` PNGs per PDF."""

    def __init__(self, pages: int = 2):
        super().__init__(dpi=72)
        self.pages = pages

    def page_count(self, pdf_path):
        return self.pages

    def render(self, pdf_path, output_dir) -> List[RenderedPage]:
        rendered = []
        for n in range(1, self.pages + 1):
            path = os.path.join(output_dir, f"page-{n}.png")
            with open(path, "wb") as f:
                f.write(b"\x89PNG fake page %d" % n)
            rendered.append(RenderedPage(n, path))
        return rendered


@pytest.fixture
def engine():
    eng = enable_sqlite_savepoints(create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ))
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def SessionTesting(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def renderer():
    return FakeRenderer(pages=2)


@pytest.fixture
def client(SessionTesting, storage, renderer):
    def override_get_db():
        db = SessionTesting()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_renderer] = lambda: renderer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_token(user_id: str, email: str | None = None, full_name: str | None = None) -> str:
    claims = {
        "sub": user_id,
        "aud": settings.supabase_jwt_audience,
        "email": email,
        "user_metadata": {"full_name": full_name} if full_name else {},
    }
    return jwt.encode(claims, settings.supabase_jwt_secret, algorithm="HS256")


def auth_headers(user_id: str, **kwargs) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, **kwargs)}"}


def _onboard(client, role: str, name: str) -> Dict[str, str]:
    user_id = str(uuid.uuid4())
    headers = auth_headers(user_id, email=f"{name.lower()}@school.test", full_name=name)
    res = client.patch("/api/me/profile", json={"role": role}, headers=headers)
    assert res.status_code == 200, res.text
    headers["X-User-Id"] = user_id
    return headers


@pytest.fixture
def teacher(client):
    return _onboard(client, "teacher", "Ms Teacher")


@pytest.fixture
def other_teacher(client):
    return _onboard(client, "teacher", "Mr Other")


@pytest.fixture
def make_student(client):
    counter = {"n": 0}

    def _make():
        counter["n"] += 1
        return _onboard(client, "student", f"Student{counter['n']}")
    return _make


@pytest.fixture
def student(make_student):
    return make_student()


# ---------- scenario helpers ----------

def create_session(client, headers, title="Quiz A"):
    res = client.post("/api/sessions", json={"title": title}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def create_prompt(client, headers, session_id, kind="mcq", **fields):
    body = {"sessionId": session_id, "kind": kind, **fields}
    res = client.post("/api/prompts", json=body, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def go_live(client, headers, session_id, prompt_id):
    res = client.patch(
        f"/api/sessions/{session_id}/status",
        json={"status": "live", "current_prompt": prompt_id},
        headers=headers,
    )
    assert res.status_code == 200, res.text
    return res.json()


def open_prompt(client, headers, prompt_id, is_open=True):
    res = client.patch(f"/api/prompts/{prompt_id}", json={"is_open": is_open}, headers=headers)
    assert res.status_code == 200, res.text
    return res.json()


def join(client, headers, join_code):
    return client.post(f"/api/join/{join_code}", headers=headers)


@pytest.fixture
def live_mcq(client, teacher):
    """A live session whose current prompt is an open MCQ ["X", "Y"] (correct 1)."""
    session = create_session(client, teacher)
    prompt = create_prompt(client, teacher, session["session_id"], question="Pick one",
                           options=["X", "Y"], correctOptionIndex=1)
    go_live(client, teacher, session["session_id"], prompt["prompt_id"])
    open_prompt(client, teacher, prompt["prompt_id"])
    return {"session": session, "prompt": prompt}

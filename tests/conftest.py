"""
Shared test fixtures for AssignHub.
Swaps the Supabase client for an in-memory fake seeded with two teachers,
two students and a handful of assignments.
Zero network calls.
"""
import time
from datetime import timedelta

import jwt
import pytest

from fake_supabase import FakeSupabase, FakeHTTPResponse
from assignhub import config as app_config
from assignhub import supabase_client
from assignhub.models import utc_now

JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"

TEACHER_ID = "11111111-aaaa-4000-8000-000000000001"
OTHER_TEACHER_ID = "22222222-bbbb-4000-8000-000000000002"
STUDENT_ID = "33333333-cccc-4000-8000-000000000003"
NAMELESS_STUDENT_ID = "44444444-dddd-4000-8000-000000000004"
NEW_STUDENT_ID = "55555555-eeee-4000-8000-000000000005"

OPEN_ASSIGNMENT_ID = "a0000000-0000-4000-8000-000000000001"
PAST_DUE_ASSIGNMENT_ID = "a0000000-0000-4000-8000-000000000002"
OTHER_YEAR_ASSIGNMENT_ID = "a0000000-0000-4000-8000-000000000003"

PDF_TYPE = "application/pdf"


def _iso(dt):
    return dt.isoformat()


@pytest.fixture
def fake_db(monkeypatch):
    """A seeded FakeSupabase installed as the shared client."""
    db = FakeSupabase(bucket_names=[app_config.SUBMISSIONS_BUCKET,
                                    app_config.ASSIGNMENT_FILES_BUCKET])
    now = utc_now()
    db.tables['users'] = [
        {"id": TEACHER_ID, "email": "ada.teacher@uni.ie", "role": "teacher",
         "name": "Dr. Ada", "year": None, "password_changed": True},
        {"id": OTHER_TEACHER_ID, "email": "bob.teacher@uni.ie", "role": "teacher",
         "name": "Dr. Bob", "year": None, "password_changed": True},
        {"id": STUDENT_ID, "email": "carol@uni.ie", "role": "student",
         "name": "Carol Student", "year": 2, "password_changed": True},
        {"id": NAMELESS_STUDENT_ID, "email": "dan.k@uni.ie", "role": "student",
         "name": None, "year": 2, "password_changed": True},
        {"id": NEW_STUDENT_ID, "email": "eve@uni.ie", "role": "student",
         "name": "Eve", "year": 2, "password_changed": False},
    ]
    db.tables['assignments'] = [
        {"id": OPEN_ASSIGNMENT_ID, "title": "Lab 1", "description": "Build a circuit",
         "due_date": _iso(now + timedelta(days=7)), "category": "Lab Report",
         "teacher_id": TEACHER_ID, "year": 2, "created_at": _iso(now - timedelta(days=2)),
         "file_name": "brief.pdf", "file_path": f"{TEACHER_ID}/brief.pdf",
         "file_type": PDF_TYPE, "file_size": 11},
        {"id": PAST_DUE_ASSIGNMENT_ID, "title": "Essay", "description": "Write 500 words",
         "due_date": _iso(now - timedelta(days=1)), "category": "Assignment",
         "teacher_id": TEACHER_ID, "year": 2, "created_at": _iso(now - timedelta(days=10))},
        {"id": OTHER_YEAR_ASSIGNMENT_ID, "title": "Tutorial 4", "description": "Integrals",
         "due_date": _iso(now + timedelta(days=3)), "category": "Tutorial",
         "teacher_id": OTHER_TEACHER_ID, "year": 3, "created_at": _iso(now - timedelta(days=1))},
    ]
    db.tables['submissions'] = []
    db.storage.buckets[app_config.ASSIGNMENT_FILES_BUCKET][f"{TEACHER_ID}/brief.pdf"] = b"%PDF-brief"

    db.auth.add_account("carol@uni.ie", "correct-horse", STUDENT_ID)
    db.auth.add_account("ada.teacher@uni.ie", "teacher-pass", TEACHER_ID)
    db.auth.add_account("eve@uni.ie", "initial-pass", NEW_STUDENT_ID)

    monkeypatch.setattr(supabase_client, "_supabase", db)
    monkeypatch.setattr(supabase_client, "create_auth_client", lambda: db)
    monkeypatch.setattr("assignhub.services.identity.create_auth_client", lambda: db)
    return db


@pytest.fixture
def http_get(monkeypatch, fake_db):
    """Route requests.get for signed URLs to the fake storage."""
    responses = []

    def fake_get(url, *args, **kwargs):
        bucket, path = fake_db.storage.signed_urls[url]
        content = fake_db.storage.buckets[bucket].get(path)
        response = FakeHTTPResponse(content or b"", 200 if content is not None else 404)
        responses.append(response)
        return response

    monkeypatch.setattr("assignhub.services.file_transfer.requests.get", fake_get)
    return responses


@pytest.fixture
def app(monkeypatch, fake_db):
    monkeypatch.setattr(app_config, "SUPABASE_JWT_SECRET", JWT_SECRET)
    from assignhub.app import create_app
    return create_app({"TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()


def make_token(user_id, email="", expires_in=3600):
    payload = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "exp": int(time.time()) + expires_in,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


@pytest.fixture
def auth_headers():
    """auth_headers(user_id) -> Authorization header dict."""
    def _headers(user_id):
        return {"Authorization": f"Bearer {make_token(user_id)}"}
    return _headers


def seed_submission(db, assignment_id=OPEN_ASSIGNMENT_ID, student_id=STUDENT_ID,
                    grade=None, feedback=None, content=b"my work"):
    """Put a submission row and its blob straight into the fake."""
    path = f"{student_id}/work-1700000000000.pdf"
    row = {
        "id": f"s-{assignment_id[-4:]}-{student_id[:4]}",
        "assignment_id": assignment_id,
        "student_id": student_id,
        "student_name": "Carol Student",
        "file_path": path,
        "file_name": "work.pdf",
        "file_size": len(content),
        "file_type": PDF_TYPE,
        "submitted_at": _iso(utc_now()),
        "grade": grade,
        "feedback": feedback,
    }
    db.tables['submissions'].append(row)
    db.storage.buckets[app_config.SUBMISSIONS_BUCKET][path] = content
    return row

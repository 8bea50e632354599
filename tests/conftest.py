"""
Test configuration and fixtures.

Every test gets a fresh SQLite file under ``tmp_path`` (a file, not
``:memory:``, so the concurrency tests can open several connections).
"""
from datetime import datetime

import pytest

from app import create_app
from config import Config
from extensions import db
from models.project import Project
from models.user import User

LETTER = "I have spent two semesters working on related lab projects and want more."
MOTIVATION = "This project matches the research direction I want to pursue in grad school."


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'test.sqlite3'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}}
        JWT_SECRET_KEY = "test-jwt-secret-key-for-testing-only-0123456789"
        LOG_LEVEL = "WARNING"

    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


# ---------- ORM helpers (service-level tests) ----------

def make_user(role="student", email=None, name="Test User", department="Biology", **extra):
    user = User(
        name=name,
        email=email or f"{role}-{User.query.count() + 1}@uni.edu",
        role=role,
        department=department,
        **extra,
    )
    user.set_password("secret123")
    db.session.add(user)
    db.session.commit()
    return user


def make_project(professor, **overrides):
    fields = {
        "title": "Protein folding simulations",
        "description": "Run and analyse molecular dynamics simulations of small proteins. " * 2,
        "department": professor.department,
        "duration": "1 semester",
        "time_commitment": "10 hours/week",
        "status": "active",
        "max_students": 1,
        "current_students": 0,
    }
    fields.update(overrides)
    project = Project(professor_id=professor.id, **fields)
    db.session.add(project)
    db.session.commit()
    return project


def accepted_count(project_id):
    from models.application import Application
    return Application.query.filter_by(project_id=project_id, status="accepted").count()


@pytest.fixture
def professor(app):
    return make_user("professor", email="prof@uni.edu", name="Prof. Ada")


@pytest.fixture
def student(app):
    return make_user("student", email="stu@uni.edu", name="Sam Student", year="Junior", gpa=3.6)


@pytest.fixture
def project(professor):
    return make_project(professor)


# ---------- HTTP helpers ----------

def register(client, role="student", email=None, **overrides):
    payload = {
        "name": f"{role.title()} Person",
        "email": email or f"{role}@uni.edu",
        "password": "secret123",
        "role": role,
        "department": "Computer Science",
    }
    payload.update(overrides)
    resp = client.post("/api/auth/register", json=payload)
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    return body["user"]["id"], {"Authorization": f"Bearer {body['accessToken']}"}


@pytest.fixture
def prof_auth(client):
    return register(client, "professor", email="prof@cs.uni.edu")


@pytest.fixture
def student_auth(client):
    return register(client, "student", email="stu@cs.uni.edu", year="Senior", gpa=3.4)


def project_payload(**overrides):
    payload = {
        "title": "Graph neural networks for chemistry",
        "description": "We train graph neural networks to predict molecular properties from structure.",
        "department": "Computer Science",
        "duration": "6 months",
        "timeCommitment": "15 hours/week",
        "skills": ["Python", "PyTorch"],
        "tags": ["ml", "chemistry"],
        "maxStudents": 2,
        "compensation": "stipend",
        "requirements": {"gpa": 3.0, "year": ["Junior", "Senior"], "prerequisites": ["CS101"]},
        "materials": [{"name": "Syllabus", "type": "document", "url": "https://example.org/s.pdf"}],
    }
    payload.update(overrides)
    return payload


def create_project_via_api(client, headers, **overrides):
    resp = client.post("/api/projects", json=project_payload(**overrides), headers=headers)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def apply_via_api(client, headers, project_id):
    return client.post(
        "/api/applications",
        json={"projectId": project_id, "coverLetter": LETTER, "motivation": MOTIVATION},
        headers=headers,
    )


def utcnow():
    return datetime.utcnow()

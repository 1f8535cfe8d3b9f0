"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- A company with users, a job on the default pipeline and applications
- Auth headers for each user
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.models.company import Company
from app.models.job_candidate import StageHistory
from app.models.user import User, UserRole
from app.services import candidates, jobs
from app.utils.time import utc_now
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# -- Tenants and users -------------------------------------------------------

def make_company(db, name="Acme Corp"):
    company = Company(name=name)
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def make_user(db, company, name, role=UserRole.RECRUITER, is_active=True):
    user = User(
        company_id=company.id,
        email=f"{name.lower().replace(' ', '.')}@{company.name.lower().replace(' ', '')}.example.com",
        name=name,
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def company(db_session):
    return make_company(db_session)


@pytest.fixture
def recruiter(db_session, company):
    return make_user(db_session, company, "Rita Recruiter", UserRole.RECRUITER)


@pytest.fixture
def admin(db_session, company):
    return make_user(db_session, company, "Ada Admin", UserRole.ADMIN)


@pytest.fixture
def hiring_manager(db_session, company):
    return make_user(db_session, company, "Hank Manager", UserRole.HIRING_MANAGER)


@pytest.fixture
def recruiter_headers(recruiter):
    return auth_headers(recruiter)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def other_company(db_session):
    return make_company(db_session, "Globex")


@pytest.fixture
def outsider(db_session, other_company):
    return make_user(db_session, other_company, "Olga Outsider", UserRole.ADMIN)


@pytest.fixture
def outsider_headers(outsider):
    return auth_headers(outsider)


# -- Jobs and applications ---------------------------------------------------

@pytest.fixture
def job(db_session, company, recruiter):
    """Active job on the default pipeline, assigned to the recruiter."""
    return jobs.create_job(
        db_session,
        company.id,
        "Senior Python Developer",
        assigned_recruiter_id=recruiter.id,
        department="Engineering",
        location="Remote",
    )


def stage_by_name(job, name):
    return next(stage for stage in job.stages if stage.name == name)


def make_application(db, company, job, user, name, email=None):
    candidate = candidates.create_candidate(
        db,
        company.id,
        name,
        email=email or f"{name.lower().replace(' ', '.')}@mail.example.com",
        skills=["python"],
    )
    return jobs.apply_candidate(db, job.id, candidate.id, company.id, user.id)


@pytest.fixture
def applications(db_session, company, job, recruiter):
    """Three applications sitting in Applied."""
    return [
        make_application(db_session, company, job, recruiter, name)
        for name in ("Alice Smith", "Bob Jones", "Carol White")
    ]


def backdate_current_stage(db, job_candidate, days, hours=0):
    """Pretend the application entered its current stage `days` days ago."""
    entry = db.query(StageHistory).filter(
        StageHistory.job_candidate_id == job_candidate.id,
        StageHistory.exited_at.is_(None)
    ).one()
    entry.entered_at = utc_now() - timedelta(days=days, hours=hours)
    db.commit()
    return entry


@pytest.fixture
def new_application(db_session, company, job, recruiter):
    """Factory: apply a freshly created candidate to the job."""
    def _new_application(name, target_job=None):
        return make_application(db_session, company, target_job or job, recruiter, name)
    return _new_application


@pytest.fixture
def backdate(db_session):
    """Factory: move the open stage entry of an application into the past."""
    def _backdate(job_candidate, days, hours=0):
        return backdate_current_stage(db_session, job_candidate, days, hours)
    return _backdate


@pytest.fixture
def new_user(db_session, company):
    """Factory: add a user to the company."""
    def _new_user(name, role=UserRole.RECRUITER, is_active=True):
        return make_user(db_session, company, name, role, is_active)
    return _new_user


@pytest.fixture
def stage(job):
    """Lookup: stage of the default job by name."""
    def _stage(name):
        return stage_by_name(job, name)
    return _stage


@pytest.fixture
def headers_for():
    """Factory: bearer headers for any user."""
    return auth_headers

"""
Pytest configuration and shared fixtures.
"""

import pytest
from decimal import Decimal
from typing import Any, Dict, List

from jobboard.database import Database, init_database
from jobboard.logger import StructuredLogger, reset_logger
from jobboard.repositories import CompanyStore, JobStore, UserStore

# Lowest cost bcrypt accepts
TEST_WORK_FACTOR = 4


@pytest.fixture(autouse=True)
def fresh_global_logger():
    """Keep the global logger from leaking between tests."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def test_logger() -> StructuredLogger:
    return StructuredLogger(
        name="jobboard-test",
        level="DEBUG",
        enable_file=False,
        enable_console=False,
    )


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'jobboard_test.db'}"


@pytest.fixture
def db(db_url, test_logger):
    """Empty database with all tables created."""
    database = Database(init_database(db_url), logger=test_logger)
    yield database
    database.dispose()


@pytest.fixture
def company_store(db) -> CompanyStore:
    return CompanyStore(db)


@pytest.fixture
def job_store(db) -> JobStore:
    return JobStore(db)


@pytest.fixture
def user_store(db) -> UserStore:
    return UserStore(db, work_factor=TEST_WORK_FACTOR)


@pytest.fixture
def sample_companies() -> List[Dict[str, Any]]:
    return [
        {
            "handle": f"c{n}",
            "name": f"C{n}",
            "description": f"Desc{n}",
            "numEmployees": n,
            "logoUrl": f"http://c{n}.img",
        }
        for n in (1, 2, 3)
    ]


@pytest.fixture
def sample_jobs() -> List[Dict[str, Any]]:
    return [
        {"title": "title1", "salary": 100000, "equity": "0.01", "company_handle": "c1"},
        {"title": "title2", "salary": 200000, "equity": "0.02", "company_handle": "c2"},
        {"title": "title2", "salary": 300000, "equity": "0.03", "company_handle": "c3"},
    ]


@pytest.fixture
def seeded_db(db, company_store, job_store, user_store, sample_companies, sample_jobs):
    """Database with companies c1-c3, three jobs and users u1 / u2."""
    for company in sample_companies:
        company_store.create(company)
    for job in sample_jobs:
        job_store.create(job)
    user_store.register("u1", "password1", "U1F", "U1L", "user1@user.com", is_admin=False)
    user_store.register("u2", "password2", "U2F", "U2L", "user2@user.com", is_admin=True)
    return db


@pytest.fixture
def job_ids(seeded_db, job_store) -> List[int]:
    """Ids of the seeded jobs, in title order."""
    return [job["id"] for job in job_store.find_all()]


@pytest.fixture
def job_records() -> List[Dict[str, Any]]:
    """Plain job rows as a listing query returns them."""
    return [
        {"id": 1, "title": "title1", "salary": 100000, "equity": Decimal("0.01"), "company_handle": "c1"},
        {"id": 2, "title": "Title2", "salary": 200000, "equity": Decimal("0.02"), "company_handle": "c2"},
        {"id": 3, "title": "title2", "salary": 300000, "equity": "0.00", "company_handle": "c3"},
        {"id": 4, "title": "Senior TITLE3", "salary": None, "equity": None, "company_handle": "c3"},
    ]

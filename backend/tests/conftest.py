import os
import uuid
from pathlib import Path
import pytest

# Point the app at a throwaway SQLite file before anything imports it.
TEST_DB = Path(__file__).resolve().parents[1] / "test.db"
if TEST_DB.exists():
    TEST_DB.unlink()
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB}"


@pytest.fixture(scope="session", autouse=True)
def reset_db():
    """Create tables for the test database and remove the file afterwards."""
    from schoolsurvey.database import create_db_and_tables, engine
    create_db_and_tables()
    yield
    engine.dispose()
    if TEST_DB.exists():
        try:
            TEST_DB.unlink()
        except OSError:
            pass


@pytest.fixture
def service():
    """A `DatabaseService` bound to its own session."""
    from sqlmodel import Session
    from schoolsurvey.database import engine
    from schoolsurvey.services import DatabaseService
    with Session(engine) as session:
        yield DatabaseService(session)


@pytest.fixture
def school(service):
    """A freshly created school document with a unique slug."""
    slug = f"school-{uuid.uuid4().hex[:8]}"
    return service.create_school({"name": "Test School", "slug": slug})

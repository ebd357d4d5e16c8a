"""
Pytest configuration and fixtures

Tests run against a throwaway SQLite database migrated to Alembic head.
Rows are deleted after every test, so nothing created during a test is
visible to the next one. Celery runs eagerly: an enqueued analysis task
executes inside the request that enqueued it.
"""
import pytest
import sys
import os
import tempfile

from pathlib import Path
from unittest.mock import MagicMock, patch
from uuid import uuid4

# Environment must be in place before core.config is imported.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="journal_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'journal_test.db')}"
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["LOG_FORMAT"] = "text"
os.environ["GEMINI_API_KEY"] = ""
os.environ["REFLECTION_TIMEZONE"] = "UTC"

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture(scope="session", autouse=True)
def _ensure_db_schema_is_at_head():
    """
    Ensure the test database schema includes the latest Alembic migrations.
    """
    try:
        from alembic import command
        from alembic.config import Config

        api_root = Path(__file__).resolve().parents[1]
        alembic_ini = api_root / "alembic.ini"

        cfg = Config(str(alembic_ini))
        # Alembic's script_location in alembic.ini is relative ("alembic")
        # so we set the working directory explicitly.
        cfg.set_main_option("script_location", str(api_root / "alembic"))
        command.upgrade(cfg, "head")
    except Exception as e:
        # Tests should fail loudly if migrations cannot be applied.
        raise RuntimeError(f"Failed to upgrade DB to Alembic head: {e}") from e


from core.database import SessionLocal  # noqa: E402
from core.security import create_access_token, get_password_hash  # noqa: E402
from models import AIAnalysis, DailyReflection, User, UserProfile  # noqa: E402
from services.model_gateway import ModelGateway  # noqa: E402
from services.reflection_service import reflection_today  # noqa: E402
from tests.gemini_helpers import mock_gemini_response  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_tables():
    yield
    db = SessionLocal()
    try:
        for model in (AIAnalysis, DailyReflection, UserProfile, User):
            db.query(model).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture(scope="function")
def db_session():
    """A plain session; committed rows are removed by _clean_tables."""
    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


def _make_user(db_session, email=None, full_name="Test User"):
    user = User(
        email=email or f"test_{uuid4().hex[:12]}@example.com",
        password_hash=get_password_hash("password123"),
        full_name=full_name,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session):
    return _make_user(db_session)


@pytest.fixture
def other_user(db_session):
    return _make_user(db_session, full_name="Other User")


@pytest.fixture
def auth_headers(test_user):
    token = create_access_token({"sub": str(test_user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(other_user):
    token = create_access_token({"sub": str(other_user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def reflection_answers():
    """The seven answers, keyed by column name."""
    return {
        "day_summary": "Shipped the release and went for a long walk.",
        "social_media_time": "About 40 minutes, mostly in the evening.",
        "truthfulness_kindness": "Told a colleague honestly that their plan had a gap.",
        "conscious_actions": "Paused before replying to an angry email.",
        "overthinking_stress": "Worried about tomorrow's review for an hour.",
        "gratitude_expression": "Thanked my sister for helping with the move.",
        "proud_moment": "Finished the run without stopping.",
    }


@pytest.fixture
def reflection_payload(reflection_answers):
    """The same answers as the API receives them."""
    from pydantic.alias_generators import to_camel

    return {to_camel(k): v for k, v in reflection_answers.items()}


@pytest.fixture
def make_reflection(db_session, reflection_answers):
    """Insert a committed reflection for a user on a given date."""
    def _make(user, reflection_date=None, **overrides):
        answers = {**reflection_answers, **overrides}
        reflection = DailyReflection(
            user_id=user.id,
            reflection_date=reflection_date or reflection_today(),
            **answers,
        )
        db_session.add(reflection)
        db_session.commit()
        db_session.refresh(reflection)
        return reflection
    return _make


@pytest.fixture
def test_profile(db_session, test_user):
    profile = UserProfile(
        user_id=test_user.id,
        self_introduction="Software engineer, 34, lives by the sea.",
        good_qualities="Patient, curious",
        bad_qualities="Procrastinates on hard conversations",
        life_goals="Run a marathon; write a book",
        challenges="Evening phone use",
    )
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def gemini_client():
    client = MagicMock()
    client.models.generate_content.return_value = mock_gemini_response()
    return client


@pytest.fixture
def fake_gateway(gemini_client):
    """Patch the gateway used by the analysis task with a mock-backed one."""
    gateway = ModelGateway(client=gemini_client, model="gemini-test")
    with patch("tasks.analysis_tasks.get_model_gateway", return_value=gateway):
        yield gateway


@pytest.fixture
def failing_gateway():
    client = MagicMock()
    client.models.generate_content.side_effect = RuntimeError("503 UNAVAILABLE")
    gateway = ModelGateway(client=client, model="gemini-test")
    with patch("tasks.analysis_tasks.get_model_gateway", return_value=gateway):
        yield gateway

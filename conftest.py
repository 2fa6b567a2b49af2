"""
Shared pytest fixtures: an in-memory configuration store wired into the app,
token helpers for the admin routes, and small row factories.
"""

import os
import sys
from typing import Any, Dict, Generator, Optional

import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")

# Load environment variables from .env file (already-set values win)
load_dotenv()

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Cause, Organization, Widget  # noqa: E402
from app.security.auth.jwt_handler import Role, get_jwt_handler  # noqa: E402


@pytest.fixture(scope="function")
def db_engine() -> Generator[Engine, None, None]:
    """Yield an engine for a fresh in-memory SQLite database with all tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine: Engine) -> Generator[Session, None, None]:
    """Yield a database session for a single test function."""
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = session_local()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def override_get_db(db_session: Session) -> Generator[None, None, None]:
    """Route every request the app handles to the test session."""

    def _get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    return TestClient(app)


def make_token(
    role: Role = Role.OWNER,
    organization_id: Optional[str] = None,
    subject: str = "user_test",
) -> str:
    return get_jwt_handler().create_access_token(subject, role, organization_id)


def auth_headers(
    role: Role = Role.OWNER,
    organization_id: Optional[str] = None,
    subject: str = "user_test",
) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(role, organization_id, subject)}"}


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def auth_headers_for():
    return auth_headers


class Factory:
    """Creates committed rows with sensible defaults."""

    def __init__(self, db: Session):
        self.db = db

    def _save(self, obj: Any) -> Any:
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def organization(self, name: str = "Helping Hands", **kwargs: Any) -> Organization:
        kwargs.setdefault("email", "hello@helpinghands.org")
        return self._save(Organization(name=name, **kwargs))

    def widget(
        self,
        organization: Organization,
        slug: str = "helping-hands",
        config: Optional[Dict[str, Any]] = None,
        is_active: bool = True,
        name: str = "Main Widget",
    ) -> Widget:
        return self._save(
            Widget(
                organization_id=organization.id,
                name=name,
                slug=slug,
                config=config if config is not None else {},
                is_active=is_active,
            )
        )

    def cause(
        self,
        widget: Widget,
        name: str = "Clean Water",
        is_active: bool = True,
        position: int = 0,
        **kwargs: Any,
    ) -> Cause:
        return self._save(
            Cause(
                widget_id=widget.id,
                name=name,
                is_active=is_active,
                position=position,
                **kwargs,
            )
        )


@pytest.fixture
def factory(db_session: Session) -> Factory:
    return Factory(db_session)

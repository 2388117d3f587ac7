# backend/tests/conftest.py
"""
Pytest configuration.

Every test gets its own SQLite file under ``tmp_path`` so sessions on
different threads can share it, which the concurrency tests need. Nothing
touches the database configured through DATABASE_URL.
"""

from datetime import date, timedelta
import os
import sys
from typing import Callable, Iterator

# Make 'menu_booking' importable when pytest is run from the backend directory
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

os.environ.setdefault("CI", "true")
os.environ.setdefault("BOOKING_LOCK_BACKEND", "local")

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from menu_booking.api.dependencies import get_lock_registry
from menu_booking.core.booking_lock import BookingLockRegistry
from menu_booking.core.enums import DayOfWeek
from menu_booking.database import Base, build_engine, get_db
from menu_booking.main import app
from menu_booking.models import AvailabilityRule, Item


def next_weekday(day: DayOfWeek, weeks_ahead: int = 0) -> date:
    """First date strictly after today falling on ``day``."""
    today = date.today()
    offset = (day.sort_index - today.weekday()) % 7 or 7
    return today + timedelta(days=offset + 7 * weeks_ahead)


@pytest.fixture
def engine(tmp_path) -> Iterator[Engine]:
    test_engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def lock_registry() -> BookingLockRegistry:
    return BookingLockRegistry(backend="local", timeout_seconds=5.0)


@pytest.fixture
def bookable_item(db: Session) -> Item:
    item = Item(name="Chef's Table", is_bookable=True, is_active=True)
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def non_bookable_item(db: Session) -> Item:
    item = Item(name="House Salad", is_bookable=False, is_active=True)
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def add_rule(db: Session) -> Callable[..., AvailabilityRule]:
    """Insert an availability rule directly, bypassing service validation."""

    def _add(
        item: Item,
        day: DayOfWeek,
        start_time: str,
        end_time: str,
        is_active: bool = True,
    ) -> AvailabilityRule:
        rule = AvailabilityRule(
            item_id=item.id,
            day_of_week=day.value,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
        )
        db.add(rule)
        db.commit()
        return rule

    return _add


@pytest.fixture
def monday() -> date:
    return next_weekday(DayOfWeek.MON)


@pytest.fixture
def upcoming() -> Callable[..., date]:
    return next_weekday


@pytest.fixture
def client(session_factory: sessionmaker, lock_registry: BookingLockRegistry) -> Iterator[TestClient]:
    """Test client whose requests each get a fresh session on the test database."""

    def override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_registry] = lambda: lock_registry

    # No context manager: lifespan would create tables on the configured database
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()

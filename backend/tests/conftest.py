"""
Fixtures partagées : base SQLite en mémoire, utilisateur et catalogue de badges.
"""
import os

# Variables obligatoires avant l'import des modules de l'application
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("USE_REDIS_LOCKS", "false")
os.environ.setdefault("APP_TIMEZONE", "UTC")
os.environ.setdefault("PERSISTENCE_RETRY_ATTEMPTS", "3")

from datetime import datetime

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import app.domain.entities  # noqa: F401  (enregistre les tables)
from app.domain.entities import User, Workout, WorkoutActivity
from app.domain.services.badge_service import badge_service


NOW = datetime(2026, 3, 10, 15, 0, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def user(session):
    # Cycle démarré à l'horloge de test, indépendamment de la date réelle
    user = User(username="testuser", email="test@healthify.com", commitment_start_date=NOW)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def user_id(user):
    return str(user.id)


@pytest.fixture
def catalog(session):
    return badge_service.seed_default_catalog(session)


def make_set(value=15.0, status="none", parameter="Weight", unit="kg", **extra):
    return {"parameter": parameter, "value": value, "unit": unit, "status": status, **extra}


def make_activity(name="Curls", sets=None):
    return WorkoutActivity(name=name, sets=sets if sets is not None else [make_set()])


def add_workout(session, user, activities=None, last_completed_date=None, title="Arms Day"):
    """Insère un workout directement en base (sans passer par le service)."""
    workout = Workout(
        user_id=user.id,
        day="Wednesday",
        title=title,
        activities=[a.model_dump(mode="json") for a in (activities or [])],
        last_completed_date=last_completed_date,
    )
    session.add(workout)
    session.commit()
    session.refresh(workout)
    return workout

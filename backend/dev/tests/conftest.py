"""
Fixtures partagées: base SQLite en mémoire, application, utilisateurs et jetons
Run: pytest (depuis la racine du dépôt)
"""
import os

# Avant tout import de database.py: aucune connexion PostgreSQL pendant les tests
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "leximmo-test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app_config import AppConfigurator
from auth import create_access_token, get_password_hash
from database import Base, get_db
from enums import AppRole
from models import User, UserRole

PASSWORD = "LexImmo2024!"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def app(session_factory):
    app = AppConfigurator.create_app(session_factory=session_factory)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _create_user(db, email, *roles):
    user = User(email=email, hashed_password=get_password_hash(PASSWORD), nom=email.split("@")[0], actif=True)
    db.add(user)
    db.flush()
    for role in roles:
        db.add(UserRole(user_id=user.id, role=role))
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def users(db):
    return {
        "admin": _create_user(db, "admin@leximmo.sn", AppRole.admin),
        "collaborateur": _create_user(db, "collab@leximmo.sn", AppRole.collaborateur),
        "compta": _create_user(db, "compta@leximmo.sn", AppRole.compta),
    }


def _headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture
def admin_headers(users):
    return _headers(users["admin"])


@pytest.fixture
def collab_headers(users):
    return _headers(users["collaborateur"])


@pytest.fixture
def compta_headers(users):
    return _headers(users["compta"])

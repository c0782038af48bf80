"""Test fixtures for the API and its services."""
import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

_test_root = Path(tempfile.mkdtemp(prefix="todo-api-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_test_root / 'test.db'}")
os.environ.setdefault("UPLOAD_DIR", str(_test_root / "uploads"))
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("MAX_FILE_SIZE", "1024")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")

from app.main import app  # noqa: E402
from app.auth.utils import create_access_token, hash_password  # noqa: E402
from app.config.storage import LocalFileStorage, get_file_storage, get_profile_storage  # noqa: E402
from app.database.connection import Base, SessionLocal, engine  # noqa: E402
from app.models.todo import Todo  # noqa: E402
from app.models.user import User, UserRole, UserStatus  # noqa: E402

PASSWORD = "Secret123!"


@pytest.fixture(autouse=True)
def reset_database():
    """Give every test an empty schema."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "todos")


@pytest.fixture
def profile_storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "profiles")


@pytest.fixture
def client(storage, profile_storage):
    app.dependency_overrides[get_file_storage] = lambda: storage
    app.dependency_overrides[get_profile_storage] = lambda: profile_storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a committed user; returns the ORM object."""
    counter = {"n": 0}

    def _make_user(name=None, email=None, status=UserStatus.ACTIVE, role=UserRole.USER):
        counter["n"] += 1
        user = User(
            full_name=name or f"User {counter['n']}",
            email=email or f"user{counter['n']}@example.com",
            hashed_password=hash_password(PASSWORD),
            role=role,
            status=status,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_todo(db):
    def _make_todo(creator, assignee=None, title="Task", description=None, order=0):
        todo = Todo(
            title=title,
            description=description,
            order=order,
            created_by_id=creator.id,
            assigned_to_id=(assignee or creator).id,
        )
        db.add(todo)
        db.commit()
        db.refresh(todo)
        return todo

    return _make_todo


@pytest.fixture
def auth_headers():
    def _auth_headers(user) -> dict:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers

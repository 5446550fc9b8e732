import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import campus_eats.models  # noqa: F401
from campus_eats.config import settings
from campus_eats.constants.roles import ActingRole
from campus_eats.database import get_session
from campus_eats.dependencies.context import CallerContext
from campus_eats.main import app
from campus_eats.models.user import User
from campus_eats.services.session_service import open_session
from campus_eats.utils.hash import hash_password
from campus_eats.utils.token import create_access_token

PASSWORD = "secret123"


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


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Keep verification uploads inside the test's tmp dir."""
    target = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(target))
    return target


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    # no context manager: the lifespan hook would create tables on the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    """Create users straight in the database, e.g. make_user("ali", verified=True)."""
    counter = {"n": 0}

    def _make(name="user", *, phone="09120000000", verified=False, role="user"):
        counter["n"] += 1
        user = User(
            name=name,
            email=f"{name.lower()}{counter['n']}@sharif.edu",
            phone=phone,
            password=hash_password(PASSWORD),
            role=role,
            email_verified=verified,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def caller():
    """Build the per-request caller context the services expect."""

    def _caller(user, role=ActingRole.customer):
        return CallerContext(user=user, role=role)

    return _caller


@pytest.fixture
def auth_headers(session):
    """Log the user in (one session row per call) and build request headers."""

    def _headers(user, role=None):
        token = create_access_token(open_session(session, user))
        headers = {"Authorization": f"Bearer {token}"}
        if role:
            headers["X-Acting-Role"] = role
        return headers

    return _headers


@pytest.fixture
def order_payload():
    return {
        "restaurantLocation": "Sharif Plus",
        "restaurantType": "fast_food",
        "deliveryLocation": "Dorm 3, Room 214",
        "fullName": "Sara Ahmadi",
        "phone": "09121112233",
        "price": 25000,
        "orderCode": "A-117",
    }


@pytest.fixture
def listing_payload():
    return {
        "userCardNumber": "6037-9911-2233-4455",
        "itemName": "Self lunch code",
        "description": "Valid for today's lunch",
        "price": 50000,
        "codeValue": "LUNCH-8842",
    }

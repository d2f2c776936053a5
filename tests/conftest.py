import pytest
from fastapi.testclient import TestClient

from auth import issue_token
from database import MemoryStore, get_db
from main import app
from seed import seed_demo_data


@pytest.fixture
def db():
    return MemoryStore()


@pytest.fixture
def user_ids(db):
    return seed_demo_data(db)


@pytest.fixture
def admin(db, user_ids):
    return db.users.get(user_ids["Administrator"])


@pytest.fixture
def manager(db, user_ids):
    return db.users.get(user_ids["jsmith"])


@pytest.fixture
def employee(db, user_ids):
    return db.users.get(user_ids["jdoe"])


@pytest.fixture
def temp_employee(db, user_ids):
    return db.users.get(user_ids["guest12345"])


@pytest.fixture
def downtown(db, user_ids):
    return db.locations.find_one({"name": "Main Store - Downtown"})


@pytest.fixture
def shift_on(db, user_ids):
    """Look up a seeded shift by owner username and ISO date."""
    def lookup(username, day):
        return db.shifts.find_one({"user_id": user_ids[username], "date": day})
    return lookup


@pytest.fixture
def client(db, user_ids):
    async def override_get_db():
        return db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def bearer():
    def headers(user, **kwargs):
        return {"Authorization": f"Bearer {issue_token(user, **kwargs)}"}
    return headers

"""
Shared pytest fixtures for all tests.
This file is automatically loaded by pytest.
"""
import os
from contextlib import asynccontextmanager
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

pytest_plugins = ('pytest_asyncio',)

# Force test settings BEFORE importing any settings
os.environ["DB_NAME"] = "clubstats_test"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-do-not-use-in-production"

from main import app
from tests.test_safety import verify_test_environment


class FakeCollection:
    """In-memory stand-in for the two motor collection calls the document store makes"""

    def __init__(self, name: str):
        self.name = name
        self.documents: dict = {}
        self.fail_reads: set = set()
        self.fail_writes: set = set()

    async def find_one(self, filter_dict: dict):
        key = filter_dict["_id"]
        if key in self.fail_reads:
            raise ConnectionError(f"read of {key} failed")
        document = self.documents.get(key)
        return dict(document) if document is not None else None

    async def replace_one(self, filter_dict: dict, replacement: dict, upsert: bool = False):
        key = filter_dict["_id"]
        if key in self.fail_writes:
            raise ConnectionError(f"write of {key} failed")
        if key in self.documents or upsert:
            self.documents[key] = dict(replacement)
        return SimpleNamespace(acknowledged=True, matched_count=1, modified_count=1)


class FakeMongoDB:
    """Dict of FakeCollections, created on first access"""

    name = "clubstats_test"

    def __init__(self):
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def seed(self, documents: dict) -> None:
        """Insert {collection: {key: value}} the way DocumentStore stores values"""
        for collection, values in documents.items():
            for key, value in values.items():
                self[collection].documents[key] = {"_id": key, "value": value}

    def value(self, collection: str, key: str):
        document = self[collection].documents.get(key)
        return document["value"] if document else None


@asynccontextmanager
async def test_lifespan(app):
    """Test lifespan that doesn't connect to a real database"""
    yield

# Replace the app's lifespan with test version
app.router.lifespan_context = test_lifespan


@pytest.fixture
def mongodb():
    """Fresh in-memory database per test"""
    return FakeMongoDB()


@pytest_asyncio.fixture
async def client(mongodb):
    """HTTP client for API testing"""
    app.state.mongodb = mongodb
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.state.mongodb = None


@pytest.fixture
def admin_token():
    """Generate admin token for testing"""
    from authentication import AuthHandler

    return AuthHandler().encode_token(
        {"_id": "admin-user-id", "roles": ["ADMIN"], "email": "admin@test.com", "username": "admin"}
    )


@pytest.fixture
def member_token():
    """Generate a token without admin rights"""
    from authentication import AuthHandler

    return AuthHandler().encode_token(
        {"_id": "member-user-id", "roles": ["MEMBER"], "email": "member@test.com"}
    )


@pytest.fixture(scope="session", autouse=True)
def safe_environment():
    """Refuse to run against the production database"""
    verify_test_environment()

import os
from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("MONGODB_URI", "mongomock://localhost")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("CORS_ORIGINS", "http://localhost")

from db_mongo import ensure_indexes, get_db
from main import app
from server.src.modules.auth_config import get_auth_settings


@pytest.fixture(autouse=True)
def clean_state():
    db = get_db()
    for name in db.list_collection_names():
        db.drop_collection(name)
    ensure_indexes()
    yield


@asynccontextmanager
async def api_client(token: str | None = None):
    cookies: dict[str, str] = {}
    if token:
        cookies[get_auth_settings().cookie_name] = token
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", cookies=cookies) as client:
        yield client

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from billsplit.api.v1.deps import get_bill_repository
from billsplit.core.auth import create_access_token
from billsplit.main import app
from tests.helpers import InMemoryBillRepository


@pytest.fixture
def repo():
    return InMemoryBillRepository()


@pytest.fixture
def mock_db():
    """MagicMock database whose collections expose AsyncMock motor methods."""
    collections = {}
    for name in ("bills", "bill_shares"):
        collection = MagicMock()
        collection.insert_one = AsyncMock()
        collection.insert_many = AsyncMock()
        collection.find_one = AsyncMock()
        collection.find_one_and_update = AsyncMock()
        collection.delete_one = AsyncMock()
        collection.delete_many = AsyncMock()
        collection.distinct = AsyncMock(return_value=[])
        collections[name] = collection

    db = MagicMock()
    db.__getitem__.side_effect = lambda name: collections[name]
    return db


@pytest.fixture
def auth_headers():
    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _headers


@pytest_asyncio.fixture
async def client(repo):
    app.dependency_overrides[get_bill_repository] = lambda: repo
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()

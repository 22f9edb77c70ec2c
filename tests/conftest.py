"""
Pytest configuration and fixtures.

Every test gets its own SQLite file loaded with the demo data from
ledger_api.seed.
"""
from typing import Any, AsyncGenerator

import httpx
import pytest_asyncio

from ledger_api.main import create_app
from ledger_api.seed import seed
from ledger_api.store import LedgerStore


@pytest_asyncio.fixture
async def store(tmp_path) -> AsyncGenerator[LedgerStore, Any]:
    ledger = LedgerStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'ledger.sqlite3'}")
    await ledger.create_schema()
    await seed(ledger)
    yield ledger
    await ledger.dispose()


@pytest_asyncio.fixture
async def client(store: LedgerStore) -> AsyncGenerator[httpx.AsyncClient, Any]:
    app = create_app(store=store)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


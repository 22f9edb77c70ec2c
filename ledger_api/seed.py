# ledger_api/seed.py
"""
Demo data: four clients, four contractors, nine contracts and fourteen jobs.

    python -m ledger_api.seed          # (re)creates the schema and loads it
"""
from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone

from sqlalchemy import func, select

from .store import LedgerStore
from .tables import (
    Base,
    Contract,
    ContractStatus,
    Job,
    PaymentState,
    Profile,
    ProfileRole,
)

log = logging.getLogger("uvicorn.error")

CLIENT, CONTRACTOR = ProfileRole.CLIENT, ProfileRole.CONTRACTOR
NEW, IN_PROGRESS, TERMINATED = (
    ContractStatus.NEW,
    ContractStatus.IN_PROGRESS,
    ContractStatus.TERMINATED,
)

# id, first name, last name, profession, role, balance (cents)
PROFILES = [
    (1, "Harry", "Potter", "Wizard", CLIENT, 115000),
    (2, "Mr", "Robot", "Hacker", CLIENT, 23111),
    (3, "John", "Snow", "Knows nothing", CLIENT, 45130),
    (4, "Ash", "Kethcum", "Pokemon master", CLIENT, 130),
    (5, "John", "Lenon", "Musician", CONTRACTOR, 6400),
    (6, "Linus", "Torvalds", "Programmer", CONTRACTOR, 121400),
    (7, "Alan", "Turing", "Programmer", CONTRACTOR, 2200),
    (8, "Aragorn", "II Elessar Telcontarion", "Fighter", CONTRACTOR, 31400),
]

# id, status, client, contractor
CONTRACTS = [
    (1, TERMINATED, 1, 5),
    (2, IN_PROGRESS, 1, 6),
    (3, IN_PROGRESS, 2, 6),
    (4, IN_PROGRESS, 2, 7),
    (5, NEW, 3, 8),
    (6, IN_PROGRESS, 3, 7),
    (7, IN_PROGRESS, 4, 7),
    (8, IN_PROGRESS, 4, 6),
    (9, IN_PROGRESS, 4, 8),
]


def _at(day: str) -> datetime:
    return datetime.fromisoformat(f"{day}T19:11:26.737000").replace(tzinfo=timezone.utc)


# id, price (cents), payment date or None, contract
JOBS = [
    (1, 20000, None, 1),
    (2, 20100, None, 2),
    (3, 20200, None, 3),
    (4, 20000, None, 4),
    (5, 20000, None, 7),
    (6, 202000, _at("2020-08-15"), 7),
    (7, 20000, _at("2020-08-15"), 2),
    (8, 20000, _at("2020-08-16"), 3),
    (9, 20000, _at("2020-08-17"), 1),
    (10, 20000, _at("2020-08-17"), 5),
    (11, 2100, _at("2020-08-10"), 1),
    (12, 2100, _at("2020-08-15"), 2),
    (13, 12100, _at("2020-08-15"), 3),
    (14, 12100, _at("2014-08-15"), 3),
]


def demo_rows() -> list:
    rows = [
        Profile(
            id=pid, first_name=first, last_name=last, profession=profession,
            role=role, balance_cents=balance,
        )
        for pid, first, last, profession, role, balance in PROFILES
    ]
    rows += [
        Contract(id=cid, terms="bla bla bla", status=status, client_id=client, contractor_id=contractor)
        for cid, status, client, contractor in CONTRACTS
    ]
    rows += [
        Job(
            id=jid,
            description="work",
            price_cents=price,
            payment_state=PaymentState.PAID if paid_at else PaymentState.UNPAID,
            payment_date=paid_at,
            contract_id=contract,
        )
        for jid, price, paid_at, contract in JOBS
    ]
    return rows


async def seed(store: LedgerStore) -> None:
    async with store.reader() as session:
        async with session.begin():
            session.add_all(demo_rows())


async def seed_if_empty(store: LedgerStore) -> bool:
    async with store.reader() as session:
        count = (await session.execute(select(func.count(Profile.id)))).scalar_one()
    if count:
        return False
    await seed(store)
    log.info("loaded demo data")
    return True


async def _reset(db_url: str) -> None:
    store = LedgerStore.from_url(db_url)
    try:
        async with store.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await store.create_schema()
        await seed(store)
    finally:
        await store.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    from .main import DEFAULT_DB_URL

    asyncio.run(_reset(os.getenv("DATABASE_URL", DEFAULT_DB_URL)))

"""Shared helpers for reading and writing ledger rows in tests."""
from ledger_api.store import LedgerStore
from ledger_api.tables import Job, Profile


async def load_profile(store: LedgerStore, profile_id: int) -> Profile:
    async with store.reader() as session:
        return await session.get(Profile, profile_id)


async def load_job(store: LedgerStore, job_id: int) -> Job:
    async with store.reader() as session:
        return await session.get(Job, job_id)


async def balances(store: LedgerStore, *profile_ids: int) -> list:
    return [(await load_profile(store, pid)).balance_cents for pid in profile_ids]


async def add_rows(store: LedgerStore, *rows) -> None:
    async with store.reader() as session:
        async with session.begin():
            session.add_all(rows)

# ledger_api/queries.py
"""Read-only queries: contracts, unpaid jobs and the admin reports."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.orm import aliased, contains_eager

from .store import LedgerStore
from .tables import Contract, ContractStatus, Job, PaymentState, Profile, ProfileRole, in_id_range


def _party_column(profile: Profile):
    return Contract.client_id if profile.role == ProfileRole.CLIENT else Contract.contractor_id


async def get_contract(store: LedgerStore, contract_id: int, profile: Profile) -> Optional[Contract]:
    """The contract, if `profile` is a party to it."""
    if not in_id_range(contract_id):
        return None
    async with store.reader() as session:
        result = await session.execute(
            select(Contract).where(
                Contract.id == contract_id,
                _party_column(profile) == profile.id,
            )
        )
        return result.scalars().first()


async def list_contracts(store: LedgerStore, profile: Profile) -> List[Contract]:
    async with store.reader() as session:
        result = await session.execute(
            select(Contract)
            .where(
                _party_column(profile) == profile.id,
                Contract.status != ContractStatus.TERMINATED,
            )
            .order_by(Contract.id)
        )
        return list(result.scalars().all())


async def list_unpaid_jobs(store: LedgerStore, profile: Profile) -> List[Job]:
    """Payable jobs on the profile's in-progress contracts, each with its contract loaded."""
    async with store.reader() as session:
        result = await session.execute(
            select(Job)
            .join(Job.contract)
            .options(contains_eager(Job.contract))
            .where(
                _party_column(profile) == profile.id,
                Contract.status == ContractStatus.IN_PROGRESS,
                Job.payment_state == PaymentState.UNPAID,
            )
            .order_by(Job.id)
        )
        return list(result.scalars().all())


# ──────────────────────────────────────────────────────────────────────────────
# Admin reports
# ──────────────────────────────────────────────────────────────────────────────
def payment_window(start: date, end: date) -> Tuple[datetime, datetime]:
    """[start 00:00, day after end 00:00) in UTC, so `end` covers its whole day."""
    if start > end:
        raise ValueError(f"start {start} is after end {end}")
    lo = datetime.combine(start, time.min, tzinfo=timezone.utc)
    hi = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return lo, hi


def _paid_between(lo: datetime, hi: datetime):
    return (
        Job.payment_state == PaymentState.PAID,
        Job.payment_date >= lo,
        Job.payment_date < hi,
    )


@dataclass(frozen=True)
class ClientTotal:
    id: int
    full_name: str
    paid_cents: int


async def best_profession(store: LedgerStore, start: date, end: date) -> Optional[str]:
    """The contractor profession that earned the most in the date range, or None."""
    lo, hi = payment_window(start, end)
    contractor = aliased(Profile)
    earned = func.sum(Job.price_cents).label("earned")
    stmt = (
        select(contractor.profession, earned)
        .select_from(Job)
        .join(Contract, Job.contract_id == Contract.id)
        .join(contractor, Contract.contractor_id == contractor.id)
        .where(*_paid_between(lo, hi))
        .group_by(contractor.profession)
        .order_by(desc(earned), contractor.profession)
        .limit(1)
    )
    async with store.reader() as session:
        row = (await session.execute(stmt)).first()
    return row.profession if row else None


async def best_clients(store: LedgerStore, start: date, end: date, limit: int = 2) -> List[ClientTotal]:
    """Clients who paid the most in the date range, highest first."""
    if limit < 1:
        raise ValueError("limit must be at least 1")
    lo, hi = payment_window(start, end)
    client = aliased(Profile)
    paid = func.sum(Job.price_cents).label("paid")
    stmt = (
        select(client.id, client.first_name, client.last_name, paid)
        .select_from(Job)
        .join(Contract, Job.contract_id == Contract.id)
        .join(client, Contract.client_id == client.id)
        .where(*_paid_between(lo, hi))
        .group_by(client.id, client.first_name, client.last_name)
        .order_by(desc(paid), client.id)
        .limit(limit)
    )
    async with store.reader() as session:
        rows = (await session.execute(stmt)).all()
    return [
        ClientTotal(id=r.id, full_name=f"{r.first_name} {r.last_name}", paid_cents=int(r.paid))
        for r in rows
    ]

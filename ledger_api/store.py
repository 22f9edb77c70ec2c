"""
Ledger store: engine, session factory and the transactional primitives
that are the only way balances and job payment state get changed.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional

from sqlalchemy import event, func, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import contains_eager

from .errors import TransactionFailure
from .tables import Base, Contract, ContractStatus, Job, PaymentState, Profile

# a deposit may be at most 1/OWED_DIVISOR of what the client currently owes
OWED_DIVISOR = 4


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class LedgerStore:
    """Owns the engine; hand one instance to every operation that needs the data."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessions = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_url(cls, db_url: str, echo: bool = False) -> "LedgerStore":
        options = {"echo": echo}
        if not db_url.startswith("sqlite"):
            options.update(pool_size=5, max_overflow=10, pool_pre_ping=True)
        engine = create_async_engine(db_url, **options)
        if engine.dialect.name == "sqlite":
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return cls(engine)

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> int:
        async with self.engine.connect() as conn:
            result = await conn.execute(text("select 1"))
            return result.scalar_one()

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[AsyncSession]:
        async with self._sessions() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["LedgerTransaction"]:
        """
        One atomic unit. Commits when the block exits cleanly, rolls back on
        any exception. Database errors come out as TransactionFailure.
        """
        try:
            async with self._sessions() as session:
                async with session.begin():
                    yield LedgerTransaction(session)
        except SQLAlchemyError as e:
            raise TransactionFailure(f"Database error: {e.__class__.__name__}") from e


def payable_jobs_filter(client_id: int):
    """WHERE clauses selecting a client's payable jobs (requires a join to Contract)."""
    return (
        Contract.client_id == client_id,
        Contract.status == ContractStatus.IN_PROGRESS,
        Job.payment_state == PaymentState.UNPAID,
    )


def owed_by_client(client_id: int):
    """Scalar subquery: total price of a client's payable jobs, 0 when there are none."""
    return (
        select(func.coalesce(func.sum(Job.price_cents), 0))
        .join(Contract, Job.contract_id == Contract.id)
        .where(*payable_jobs_filter(client_id))
        .scalar_subquery()
    )


class LedgerTransaction:
    """Primitives bound to one open transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_profile(self, profile_id: int, for_update: bool = False) -> Optional[Profile]:
        return await self.session.get(Profile, profile_id, with_for_update=for_update)

    async def lock_profiles(self, *profile_ids: int) -> List[Profile]:
        """Lock profile rows in ascending id order so concurrent payers can't deadlock."""
        stmt = (
            select(Profile)
            .where(Profile.id.in_(profile_ids))
            .order_by(Profile.id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_payable_job(self, job_id: int, client_id: int) -> Optional[Job]:
        stmt = (
            select(Job)
            .join(Job.contract)
            .options(contains_eager(Job.contract))
            .where(Job.id == job_id, *payable_jobs_filter(client_id))
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def owed_total(self, client_id: int) -> int:
        result = await self.session.execute(select(owed_by_client(client_id)))
        return int(result.scalar_one())

    async def mark_paid(self, job_id: int, client_id: int, paid_at: datetime) -> bool:
        """Flip a payable job to PAID. False if it is no longer payable."""
        still_payable = select(Contract.id).where(
            Contract.client_id == client_id,
            Contract.status == ContractStatus.IN_PROGRESS,
        )
        stmt = (
            update(Job)
            .where(
                Job.id == job_id,
                Job.payment_state == PaymentState.UNPAID,
                Job.contract_id.in_(still_payable),
            )
            .values(payment_state=PaymentState.PAID, payment_date=paid_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def debit(self, profile_id: int, amount_cents: int) -> bool:
        """Take money out of a balance. False if the balance can't cover it."""
        stmt = (
            update(Profile)
            .where(Profile.id == profile_id, Profile.balance_cents >= amount_cents)
            .values(balance_cents=Profile.balance_cents - amount_cents)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def credit(self, profile_id: int, amount_cents: int) -> bool:
        stmt = (
            update(Profile)
            .where(Profile.id == profile_id)
            .values(balance_cents=Profile.balance_cents + amount_cents)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def credit_within_owed_limit(self, client_id: int, amount_cents: int) -> bool:
        """
        Deposit into a client balance only while amount <= owed / 4.

        The ceiling check and the write are the same statement, so a payment
        committing in between cannot leave the deposit checked against a
        stale total.
        """
        stmt = (
            update(Profile)
            .where(
                Profile.id == client_id,
                owed_by_client(client_id) >= amount_cents * OWED_DIVISOR,
            )
            .values(balance_cents=Profile.balance_cents + amount_cents)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def balance_of(self, profile_id: int) -> Optional[int]:
        result = await self.session.execute(
            select(Profile.balance_cents).where(Profile.id == profile_id)
        )
        return result.scalar_one_or_none()

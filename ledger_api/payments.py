# ledger_api/payments.py
"""
Paying for a job: moves job.price from the client's balance to the
contractor's and marks the job paid, all in one transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Union

from .errors import (
    DataIntegrityError,
    Failure,
    InsufficientBalance,
    JobNotFound,
    LedgerError,
    NotAuthorized,
    to_failure,
)
from .store import LedgerStore
from .tables import Profile, ProfileRole, in_id_range

logger = logging.getLogger("uvicorn.error")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PaymentReceipt:
    job_id: int
    amount_cents: int
    client_id: int
    contractor_id: int
    client_balance_cents: int
    contractor_balance_cents: int
    payment_date: datetime

    ok = True


PaymentResult = Union[PaymentReceipt, Failure]


async def pay_job(
    store: LedgerStore,
    job_id: int,
    caller: Profile,
    clock: Callable[[], datetime] = utcnow,
) -> PaymentResult:
    """
    Pay job `job_id` on behalf of `caller`.

    Checks, in order: caller is a client; the job is payable and belongs to
    one of the caller's in-progress contracts; the contractor exists; the
    client balance covers the price. Every write is guarded again in its
    WHERE clause, so a job paid by a concurrent request since the lookup
    comes back as JobNotFound and nothing moves.
    """
    try:
        if caller.role != ProfileRole.CLIENT:
            raise NotAuthorized("Only clients can pay for jobs")
        if not in_id_range(job_id):
            raise JobNotFound(f"No unpaid job {job_id} on an active contract of profile {caller.id}")

        async with store.transaction() as tx:
            job = await tx.find_payable_job(job_id, caller.id)
            if job is None:
                raise JobNotFound(f"No unpaid job {job_id} on an active contract of profile {caller.id}")

            contract = job.contract
            price = job.price_cents
            locked = {p.id: p for p in await tx.lock_profiles(caller.id, contract.contractor_id)}

            contractor = locked.get(contract.contractor_id)
            if contractor is None or contractor.role != ProfileRole.CONTRACTOR:
                raise DataIntegrityError(
                    f"Contract {contract.id} references contractor {contract.contractor_id}, "
                    "which is not a contractor profile"
                )
            client = locked.get(caller.id)
            if client is None:
                raise DataIntegrityError(f"Client profile {caller.id} vanished during payment")
            if client.balance_cents < price:
                raise InsufficientBalance(
                    f"Balance {client.balance_cents} is less than job price {price}"
                )

            paid_at = clock()
            if not await tx.mark_paid(job.id, caller.id, paid_at):
                raise JobNotFound(f"Job {job_id} is no longer payable")
            if not await tx.debit(client.id, price):
                raise InsufficientBalance(f"Balance no longer covers job price {price}")
            if not await tx.credit(contractor.id, price):
                raise DataIntegrityError(f"Contractor {contractor.id} could not be credited")

            receipt = PaymentReceipt(
                job_id=job.id,
                amount_cents=price,
                client_id=client.id,
                contractor_id=contractor.id,
                client_balance_cents=await tx.balance_of(client.id),
                contractor_balance_cents=await tx.balance_of(contractor.id),
                payment_date=paid_at,
            )
    except LedgerError as e:
        return to_failure(e, f"pay_job({job_id})")

    logger.info(
        f"Job {receipt.job_id} paid: {price} cents from client {receipt.client_id} "
        f"to contractor {receipt.contractor_id}"
    )
    return receipt


# ledger_api/deposits.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from .errors import (
    DepositExceedsLimit,
    Failure,
    InvalidClient,
    LedgerError,
    to_failure,
)
from .money import AmountLike, format_cents, parse_amount
from .store import OWED_DIVISOR, LedgerStore
from .tables import ProfileRole, in_id_range

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class DepositReceipt:
    client_id: int
    amount_cents: int
    balance_cents: int

    ok = True


DepositResult = Union[DepositReceipt, Failure]


async def deposit(store: LedgerStore, client_id: int, amount: AmountLike | None) -> DepositResult:
    """
    Add `amount` (major units) to a client's balance.

    The deposit may not exceed a quarter of the total price of the client's
    payable jobs. The ceiling is re-checked by the balance UPDATE itself.
    """
    try:
        amount_cents = parse_amount(amount)
        if not in_id_range(client_id):
            raise InvalidClient(f"Profile {client_id} is not a client")

        async with store.transaction() as tx:
            client = await tx.get_profile(client_id, for_update=True)
            if client is None or client.role != ProfileRole.CLIENT:
                raise InvalidClient(f"Profile {client_id} is not a client")

            owed = await tx.owed_total(client_id)
            if amount_cents * OWED_DIVISOR > owed:
                raise DepositExceedsLimit(_limit_reason(amount_cents, owed))
            if not await tx.credit_within_owed_limit(client_id, amount_cents):
                raise DepositExceedsLimit(_limit_reason(amount_cents, await tx.owed_total(client_id)))

            receipt = DepositReceipt(
                client_id=client_id,
                amount_cents=amount_cents,
                balance_cents=await tx.balance_of(client_id),
            )
    except LedgerError as e:
        return to_failure(e, f"deposit({client_id})")

    logger.info(f"Deposited {amount_cents} cents into client {client_id}")
    return receipt


def _limit_reason(amount_cents: int, owed_cents: int) -> str:
    return (
        f"Deposit of {format_cents(amount_cents)} is larger than 25% of unpaid jobs "
        f"({format_cents(owed_cents)} owed)"
    )

"""
Failure kinds for ledger operations.

Inside a transaction failures are raised as LedgerError subclasses so the
session rolls back; at the operation boundary they are turned into a
Failure value that callers inspect instead of catching.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

logger = logging.getLogger("uvicorn.error")


class FailureKind(str, enum.Enum):
    NOT_AUTHORIZED = "not_authorized"
    JOB_NOT_FOUND = "job_not_found"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_CLIENT = "invalid_client"
    DEPOSIT_EXCEEDS_LIMIT = "deposit_exceeds_limit"
    DATA_INTEGRITY = "data_integrity"
    TRANSACTION_FAILURE = "transaction_failure"

    @property
    def unexpected(self) -> bool:
        return self in (FailureKind.DATA_INTEGRITY, FailureKind.TRANSACTION_FAILURE)


STATUS_CODES = {
    FailureKind.NOT_AUTHORIZED: 403,
    FailureKind.JOB_NOT_FOUND: 404,
    FailureKind.INSUFFICIENT_BALANCE: 409,
    FailureKind.INVALID_AMOUNT: 400,
    FailureKind.INVALID_CLIENT: 404,
    FailureKind.DEPOSIT_EXCEEDS_LIMIT: 409,
    FailureKind.DATA_INTEGRITY: 500,
    FailureKind.TRANSACTION_FAILURE: 503,
}

# what the HTTP caller sees for the kinds that should never happen
GENERIC_REASONS = {
    FailureKind.DATA_INTEGRITY: "Internal ledger error",
    FailureKind.TRANSACTION_FAILURE: "Could not complete the transaction, nothing was changed",
}


class LedgerError(Exception):
    kind: FailureKind

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NotAuthorized(LedgerError):
    kind = FailureKind.NOT_AUTHORIZED


class JobNotFound(LedgerError):
    kind = FailureKind.JOB_NOT_FOUND


class InsufficientBalance(LedgerError):
    kind = FailureKind.INSUFFICIENT_BALANCE


class InvalidAmount(LedgerError):
    kind = FailureKind.INVALID_AMOUNT


class InvalidClient(LedgerError):
    kind = FailureKind.INVALID_CLIENT


class DepositExceedsLimit(LedgerError):
    kind = FailureKind.DEPOSIT_EXCEEDS_LIMIT


class DataIntegrityError(LedgerError):
    kind = FailureKind.DATA_INTEGRITY


class TransactionFailure(LedgerError):
    kind = FailureKind.TRANSACTION_FAILURE


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    reason: str

    ok = False

    @classmethod
    def from_error(cls, exc: LedgerError) -> "Failure":
        return cls(kind=exc.kind, reason=exc.reason)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    @property
    def public_reason(self) -> str:
        return GENERIC_REASONS.get(self.kind, self.reason)


def to_failure(exc: LedgerError, context: str) -> Failure:
    """Log a rejected operation and turn it into a Failure result."""
    if exc.kind.unexpected:
        logger.error(f"{context} failed unexpectedly: {exc.reason}", exc_info=exc)
    else:
        logger.info(f"{context} rejected ({exc.kind.value}): {exc.reason}")
    return Failure.from_error(exc)

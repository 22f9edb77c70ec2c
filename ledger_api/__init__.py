"""Contracts, jobs and client/contractor balances behind a small FastAPI service."""
from .deposits import DepositReceipt, deposit
from .errors import Failure, FailureKind
from .payments import PaymentReceipt, pay_job
from .store import LedgerStore

__all__ = [
    "DepositReceipt",
    "Failure",
    "FailureKind",
    "LedgerStore",
    "PaymentReceipt",
    "deposit",
    "pay_job",
]

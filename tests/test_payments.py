"""
Tests for paying a job.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from ledger_api.errors import Failure, FailureKind
from ledger_api.payments import PaymentReceipt, pay_job
from ledger_api.store import LedgerTransaction
from ledger_api.tables import Contract, ContractStatus, Job, PaymentState, Profile, ProfileRole

from .helpers import add_rows, balances, load_job, load_profile


async def _new_engagement(store, client_balance: int, price: int, contractor_balance: int = 0) -> None:
    """Client 20 with contractor 21 on in-progress contract 30, one unpaid job 40."""
    await add_rows(
        store,
        Profile(id=20, first_name="Ada", last_name="Client", profession="Founder",
                role=ProfileRole.CLIENT, balance_cents=client_balance),
        Profile(id=21, first_name="Grace", last_name="Builder", profession="Programmer",
                role=ProfileRole.CONTRACTOR, balance_cents=contractor_balance),
        Contract(id=30, terms="fixed price", status=ContractStatus.IN_PROGRESS,
                 client_id=20, contractor_id=21),
        Job(id=40, description="build it", price_cents=price, contract_id=30),
    )


class TestPayJob:
    """Test suite for pay_job."""

    @pytest.mark.asyncio
    async def test_moves_price_from_client_to_contractor(self, store) -> None:
        await _new_engagement(store, client_balance=50000, price=20000)
        caller = await load_profile(store, 20)

        result = await pay_job(store, 40, caller)

        assert isinstance(result, PaymentReceipt)
        assert result.ok
        assert result.amount_cents == 20000
        assert result.client_balance_cents == 30000
        assert result.contractor_balance_cents == 20000
        assert await balances(store, 20, 21) == [30000, 20000]

        job = await load_job(store, 40)
        assert job.payment_state == PaymentState.PAID
        assert job.paid
        assert job.payment_date is not None

    @pytest.mark.asyncio
    async def test_seeded_job_is_paid_with_the_given_clock(self, store) -> None:
        paid_at = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)
        caller = await load_profile(store, 1)

        result = await pay_job(store, 2, caller, clock=lambda: paid_at)

        assert isinstance(result, PaymentReceipt)
        assert result.payment_date == paid_at
        assert await balances(store, 1, 6) == [115000 - 20100, 121400 + 20100]
        job = await load_job(store, 2)
        assert job.payment_date.replace(tzinfo=None) == paid_at.replace(tzinfo=None)

    @pytest.mark.asyncio
    async def test_balance_can_be_spent_to_exactly_zero(self, store) -> None:
        await _new_engagement(store, client_balance=20000, price=20000)

        result = await pay_job(store, 40, await load_profile(store, 20))

        assert isinstance(result, PaymentReceipt)
        assert await balances(store, 20, 21) == [0, 20000]

    @pytest.mark.asyncio
    async def test_zero_price_job_is_payable(self, store) -> None:
        await _new_engagement(store, client_balance=0, price=0)

        result = await pay_job(store, 40, await load_profile(store, 20))

        assert isinstance(result, PaymentReceipt)
        assert await balances(store, 20, 21) == [0, 0]
        assert (await load_job(store, 40)).paid

    @pytest.mark.asyncio
    async def test_contractor_cannot_pay(self, store) -> None:
        result = await pay_job(store, 2, await load_profile(store, 6))

        assert isinstance(result, Failure)
        assert result.kind == FailureKind.NOT_AUTHORIZED
        assert result.status_code == 403
        assert await balances(store, 1, 6) == [115000, 121400]
        assert not (await load_job(store, 2)).paid

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "job_id",
        [
            7,    # already paid
            1,    # contract terminated
            3,    # someone else's contract
            999,  # does not exist
            0,
            -1,
            10**25,  # wider than the INTEGER column
        ],
    )
    async def test_unpayable_jobs_are_not_found(self, store, job_id: int) -> None:
        before = await balances(store, 1, 2, 5, 6)

        result = await pay_job(store, job_id, await load_profile(store, 1))

        assert isinstance(result, Failure)
        assert result.kind == FailureKind.JOB_NOT_FOUND
        assert result.status_code == 404
        assert await balances(store, 1, 2, 5, 6) == before

    @pytest.mark.asyncio
    async def test_job_on_new_contract_is_not_payable(self, store) -> None:
        await add_rows(store, Job(id=50, description="draft", price_cents=100, contract_id=5))

        result = await pay_job(store, 50, await load_profile(store, 3))

        assert result.kind == FailureKind.JOB_NOT_FOUND

    @pytest.mark.asyncio
    async def test_paying_twice_fails_the_second_time(self, store) -> None:
        caller = await load_profile(store, 1)

        first = await pay_job(store, 2, caller)
        second = await pay_job(store, 2, await load_profile(store, 1))

        assert isinstance(first, PaymentReceipt)
        assert isinstance(second, Failure)
        assert second.kind == FailureKind.JOB_NOT_FOUND
        assert await balances(store, 1, 6) == [115000 - 20100, 121400 + 20100]

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, store) -> None:
        # Ash has 1.30 and job 5 costs 200.00
        result = await pay_job(store, 5, await load_profile(store, 4))

        assert isinstance(result, Failure)
        assert result.kind == FailureKind.INSUFFICIENT_BALANCE
        assert result.status_code == 409
        assert await balances(store, 4, 7) == [130, 2200]
        assert not (await load_job(store, 5)).paid

    @pytest.mark.asyncio
    async def test_insufficient_balance_scenario(self, store) -> None:
        await _new_engagement(store, client_balance=10000, price=20000)

        result = await pay_job(store, 40, await load_profile(store, 20))

        assert result.kind == FailureKind.INSUFFICIENT_BALANCE
        assert await balances(store, 20, 21) == [10000, 0]

    @pytest.mark.asyncio
    async def test_balance_is_read_inside_the_transaction(self, store) -> None:
        """A stale caller object showing a large balance does not let the payment through."""
        await _new_engagement(store, client_balance=10000, price=20000)
        caller = await load_profile(store, 20)
        caller.balance_cents = 1_000_000

        result = await pay_job(store, 40, caller)

        assert result.kind == FailureKind.INSUFFICIENT_BALANCE
        assert await balances(store, 20) == [10000]

    @pytest.mark.asyncio
    async def test_contract_pointing_at_a_non_contractor_is_an_integrity_failure(self, store) -> None:
        await add_rows(
            store,
            Contract(id=40, terms="broken", status=ContractStatus.IN_PROGRESS,
                     client_id=3, contractor_id=2),
            Job(id=60, description="work", price_cents=1000, contract_id=40),
        )

        result = await pay_job(store, 60, await load_profile(store, 3))

        assert isinstance(result, Failure)
        assert result.kind == FailureKind.DATA_INTEGRITY
        assert result.status_code == 500
        assert result.public_reason == "Internal ledger error"
        assert await balances(store, 3, 2) == [45130, 23111]
        assert not (await load_job(store, 60)).paid

    @pytest.mark.asyncio
    async def test_failing_write_rolls_everything_back(self, store, monkeypatch) -> None:
        async def broken_credit(self, profile_id, amount_cents):
            raise OperationalError("UPDATE profiles", {}, Exception("disk I/O error"))

        monkeypatch.setattr(LedgerTransaction, "credit", broken_credit)

        result = await pay_job(store, 2, await load_profile(store, 1))

        assert isinstance(result, Failure)
        assert result.kind == FailureKind.TRANSACTION_FAILURE
        assert result.status_code == 503
        # the job flag and the client debit were written before the failure
        assert await balances(store, 1, 6) == [115000, 121400]
        job = await load_job(store, 2)
        assert job.payment_state == PaymentState.UNPAID
        assert job.payment_date is None

    @pytest.mark.asyncio
    async def test_money_is_conserved(self, store) -> None:
        async def total():
            return sum(await balances(store, *range(1, 9)))

        before = await total()
        for profile_id, job_id in [(1, 2), (2, 3), (2, 4), (4, 5)]:
            await pay_job(store, job_id, await load_profile(store, profile_id))

        assert await total() == before

"""SQLAlchemy tables for profiles, contracts and jobs."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ids are 32-bit INTEGER primary keys on every backend
MAX_ID = 2**31 - 1


def in_id_range(value: int) -> bool:
    return 1 <= value <= MAX_ID


class ProfileRole(str, enum.Enum):
    CLIENT = "client"
    CONTRACTOR = "contractor"


class ContractStatus(str, enum.Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    TERMINATED = "terminated"


class PaymentState(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Base(DeclarativeBase):
    pass


class Profile(Base):
    """A balance holder: either a client paying for jobs or a contractor doing them."""

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    profession: Mapped[str] = mapped_column(String(120), nullable=False)
    role: Mapped[ProfileRole] = mapped_column(
        Enum(ProfileRole, native_enum=False, length=20, values_callable=_values),
        nullable=False,
    )
    balance_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("balance_cents >= 0", name="non_negative_balance"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_client(self) -> bool:
        return self.role == ProfileRole.CLIENT

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, role={self.role.value}, balance={self.balance_cents})>"


class Contract(Base):
    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    terms: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[ContractStatus] = mapped_column(
        Enum(ContractStatus, native_enum=False, length=20, values_callable=_values),
        nullable=False,
        default=ContractStatus.NEW,
    )
    client_id: Mapped[int] = mapped_column(ForeignKey("profiles.id"), nullable=False)
    contractor_id: Mapped[int] = mapped_column(ForeignKey("profiles.id"), nullable=False)

    client: Mapped[Profile] = relationship(foreign_keys=[client_id])
    contractor: Mapped[Profile] = relationship(foreign_keys=[contractor_id])
    jobs: Mapped[List["Job"]] = relationship(back_populates="contract")

    __table_args__ = (
        Index("idx_contracts_client_status", "client_id", "status"),
        Index("idx_contracts_contractor_status", "contractor_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Contract(id={self.id}, status={self.status.value})>"


class Job(Base):
    """
    A payable unit of work under a contract.

    payment_state only ever moves from UNPAID to PAID, and payment_date is
    set exactly when the job is paid (also enforced by a CHECK constraint).
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_state: Mapped[PaymentState] = mapped_column(
        Enum(PaymentState, native_enum=False, length=20, values_callable=_values),
        nullable=False,
        default=PaymentState.UNPAID,
    )
    payment_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id"), nullable=False)

    contract: Mapped[Contract] = relationship(back_populates="jobs")

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="non_negative_price"),
        CheckConstraint(
            "(payment_state = 'paid' AND payment_date IS NOT NULL)"
            " OR (payment_state = 'unpaid' AND payment_date IS NULL)",
            name="payment_date_iff_paid",
        ),
        Index("idx_jobs_contract_state", "contract_id", "payment_state"),
        Index("idx_jobs_payment_date", "payment_date"),
    )

    @property
    def paid(self) -> bool:
        return self.payment_state == PaymentState.PAID

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, price={self.price_cents}, state={self.payment_state.value})>"

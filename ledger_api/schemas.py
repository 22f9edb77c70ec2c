# ledger_api/schemas.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .tables import ContractStatus, PaymentState, ProfileRole


class ApiProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    profession: str
    role: ProfileRole
    balance_cents: int


class ApiContract(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    terms: str
    status: ContractStatus
    client_id: int
    contractor_id: int


class ApiJob(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    price_cents: int
    payment_state: PaymentState
    paid: bool
    payment_date: Optional[datetime] = None
    contract_id: int
    contract: Optional[ApiContract] = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    job_id: int
    amount_cents: int
    client_id: int
    contractor_id: int
    client_balance_cents: int
    contractor_balance_cents: int
    payment_date: datetime


class DepositOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    client_id: int
    amount_cents: int
    balance_cents: int


class BestClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    paid_cents: int

# ledger_api/routers/balances.py
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from ..deposits import deposit
from ..deps import get_store, raise_for_failure
from ..schemas import DepositOut
from ..store import LedgerStore
from ..tables import MAX_ID

router = APIRouter(prefix="/balances", tags=["balances"])


@router.post("/deposit/{user_id}", response_model=DepositOut)
async def deposit_into(
    user_id: int = Path(ge=1, le=MAX_ID),
    amount: Optional[str] = Query(default=None, description="Amount in major units, e.g. 12.50"),
    store: LedgerStore = Depends(get_store),
):
    # amount stays a raw string so bad input comes back as invalid_amount, not a 422
    result = await deposit(store, user_id, amount)
    raise_for_failure(result)
    return result

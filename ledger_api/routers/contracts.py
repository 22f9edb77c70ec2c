# ledger_api/routers/contracts.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path

from ..deps import get_profile, get_store
from ..queries import get_contract, list_contracts
from ..schemas import ApiContract
from ..store import LedgerStore
from ..tables import MAX_ID, Profile

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get("", response_model=List[ApiContract])
async def my_contracts(
    store: LedgerStore = Depends(get_store),
    profile: Profile = Depends(get_profile),
):
    """Non-terminated contracts the caller is a party to."""
    return await list_contracts(store, profile)


@router.get("/{contract_id}", response_model=ApiContract)
async def contract_by_id(
    contract_id: int = Path(ge=1, le=MAX_ID),
    store: LedgerStore = Depends(get_store),
    profile: Profile = Depends(get_profile),
):
    contract = await get_contract(store, contract_id, profile)
    if contract is None:
        raise HTTPException(status_code=404, detail="No contract found")
    return contract

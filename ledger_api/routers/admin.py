# ledger_api/routers/admin.py
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_store
from ..queries import best_clients, best_profession
from ..schemas import BestClientOut
from ..store import LedgerStore

router = APIRouter(prefix="/admin", tags=["admin"])


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")


@router.get("/best-profession", response_model=str)
async def top_profession(
    start: date,
    end: date,
    store: LedgerStore = Depends(get_store),
):
    _check_range(start, end)
    profession = await best_profession(store, start, end)
    if profession is None:
        raise HTTPException(status_code=404, detail="No jobs found for those dates")
    return profession


@router.get("/best-clients", response_model=List[BestClientOut])
async def top_clients(
    start: date,
    end: date,
    limit: int = Query(default=2, ge=1),
    store: LedgerStore = Depends(get_store),
):
    _check_range(start, end)
    return await best_clients(store, start, end, limit=limit)

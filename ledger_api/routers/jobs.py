# ledger_api/routers/jobs.py
from typing import List

from fastapi import APIRouter, Depends, Path

from ..deps import get_profile, get_store, raise_for_failure
from ..payments import pay_job
from ..queries import list_unpaid_jobs
from ..schemas import ApiJob, PaymentOut
from ..store import LedgerStore
from ..tables import MAX_ID, Profile

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/unpaid", response_model=List[ApiJob])
async def unpaid_jobs(
    store: LedgerStore = Depends(get_store),
    profile: Profile = Depends(get_profile),
):
    """Unpaid jobs on the caller's active contracts, as client or as contractor."""
    return await list_unpaid_jobs(store, profile)


@router.post("/{job_id}/pay", response_model=PaymentOut)
async def pay(
    job_id: int = Path(ge=1, le=MAX_ID),
    store: LedgerStore = Depends(get_store),
    profile: Profile = Depends(get_profile),
):
    result = await pay_job(store, job_id, profile)
    raise_for_failure(result)
    return result

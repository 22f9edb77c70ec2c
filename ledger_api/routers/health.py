from fastapi import APIRouter, Depends

from ..deps import get_store
from ..store import LedgerStore

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health():
    return {"ok": True}


@router.get("/db")
async def health_db(store: LedgerStore = Depends(get_store)):
    try:
        return {"db": await store.ping()}
    except Exception as e:
        # surface the error so we know exactly what's wrong
        return {"error": str(e)}

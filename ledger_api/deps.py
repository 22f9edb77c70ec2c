# ledger_api/deps.py
from typing import Optional

from fastapi import Header, HTTPException, Request

from .errors import Failure
from .store import LedgerStore
from .tables import Profile, in_id_range


def get_store(request: Request) -> LedgerStore:
    return request.app.state.store


async def get_profile(
    request: Request,
    profile_id: Optional[str] = Header(default=None, convert_underscores=False),
) -> Profile:
    """
    Resolve the caller from the `profile_id` header. Real authentication lives
    in front of this service; here we only check that the profile exists.
    """
    profile_id = (profile_id or "").strip()
    if not (profile_id.isascii() and profile_id.isdigit()) or not in_id_range(int(profile_id)):
        raise HTTPException(status_code=401, detail="Missing or malformed profile_id header")
    store = get_store(request)
    async with store.reader() as session:
        profile = await session.get(Profile, int(profile_id))
    if profile is None:
        raise HTTPException(status_code=401, detail="Unknown profile")
    return profile


def raise_for_failure(result) -> None:
    """Turn a Failure result into the HTTP error FastAPI sends back."""
    if isinstance(result, Failure):
        raise HTTPException(status_code=result.status_code, detail=result.public_reason)

# ledger_api/main.py
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .routers import admin, balances, contracts, health, jobs
from .seed import seed_if_empty
from .store import LedgerStore

log = logging.getLogger("uvicorn.error")

DEFAULT_DB_URL = "sqlite+aiosqlite:///./ledger.sqlite3"


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def store_from_env() -> LedgerStore:
    db_url = os.getenv("DATABASE_URL", DEFAULT_DB_URL)
    return LedgerStore.from_url(db_url, echo=_flag("DATABASE_ECHO"))


def create_app(store: Optional[LedgerStore] = None) -> FastAPI:
    """Build the API. Pass `store` to run against an existing one (tests do)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.store is None
        if owned:
            app.state.store = store_from_env()
            if _flag("LEDGER_CREATE_SCHEMA", "1"):
                await app.state.store.create_schema()
            if _flag("LEDGER_SEED"):
                await seed_if_empty(app.state.store)
        log.info(f"ledger store ready ({app.state.store.engine.url.drivername})")
        yield
        if owned:
            await app.state.store.dispose()
            app.state.store = None

    app = FastAPI(title="Ledger API", version="0.1.0", lifespan=lifespan)
    app.state.store = store

    @app.get("/", tags=["default"])
    def root():
        return {"ok": True, "service": "ledger-api"}

    app.include_router(health.router)
    app.include_router(contracts.router)
    app.include_router(jobs.router)
    app.include_router(balances.router)
    app.include_router(admin.router)
    return app


app = create_app()


# ──────────────────────────────────────────────────────────────────────────────
# Local dev entrypoint
# ──────────────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    uvicorn.run(
        "ledger_api.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "8000")),
        reload=True,
    )

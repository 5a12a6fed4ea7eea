"""
app/main.py -- FastAPI application entry point.

START_TIME and PROCESS are set at module level (singleton pattern).
create_app() wires settings -> store -> feature gate -> service. When a
service is passed in (tests), startup builds nothing and shuts nothing down.
A store that fails to load aborts startup.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import psutil
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import AppSettings, settings as default_settings
from app.errors import StoreError, TransactionNotFoundError
from app.features import build_feature_gate
from app.logger import configure_logging, get_logger
from app.service import TransactionService
from app.store import TransactionStore
from routes import health as _health_route
from routes import transactions as _transactions_route

# Singleton process tracking -- captured once at boot
START_TIME: datetime = datetime.now(timezone.utc)
PROCESS: psutil.Process = psutil.Process()

log = get_logger("main")


def build_service(cfg: AppSettings) -> TransactionService:
    """Load the store and start the feature gate. Raises StoreLoadError."""
    store = TransactionStore.from_json_file(cfg.transactions_path)
    gate = build_feature_gate(cfg)
    gate.start()
    log.bind(advancedFilters=gate.is_advanced_filtering_enabled()).info("Feature flags initialized")
    return TransactionService(store=store, gate=gate)


@asynccontextmanager
async def lifespan(app: FastAPI):
    owned = app.state.transaction_service is None
    if owned:
        app.state.transaction_service = build_service(app.state.settings)
    log.bind(prefix=app.state.settings.api_prefix or "/").info("Transactions API ready")
    try:
        yield
    finally:
        if owned:
            app.state.transaction_service.gate.shutdown()


def create_app(
    settings: Optional[AppSettings] = None,
    service: Optional[TransactionService] = None,
) -> FastAPI:
    cfg = settings or default_settings
    configure_logging(cfg)

    app = FastAPI(
        title="Transactions API",
        version="1.0.0",
        description="Read access to transaction records with flag-gated filtering.",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.transaction_service = service

    # -----------------------------------------------------------------------
    # Error handlers -- every error body is {"error": "<message>"}
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if errors:
            msg = errors[0].get("msg", "Validation error")
            # Strip "Value error, " prefix added by Pydantic v2 for ValueError
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
        else:
            msg = "Validation error"
        log.bind(path=request.url.path).warning("Rejected request: {}", msg)
        return JSONResponse(status_code=400, content={"error": msg})

    @app.exception_handler(TransactionNotFoundError)
    async def not_found_handler(request: Request, exc: TransactionNotFoundError) -> JSONResponse:
        log.bind(txnId=exc.txn_id).warning("Transaction not found")
        return JSONResponse(status_code=404, content={"error": "Transaction not found"})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        log.bind(error=str(exc)).error("Failed to retrieve transactions")
        return JSONResponse(status_code=500, content={"error": "Failed to retrieve transactions"})

    # -----------------------------------------------------------------------
    # Register routes
    # -----------------------------------------------------------------------

    app.include_router(_transactions_route.router, prefix=cfg.api_prefix)
    app.include_router(_health_route.router, prefix=cfg.api_prefix)

    return app


app = create_app()


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run("app.main:app", host=default_settings.app_host, port=default_settings.app_port, reload=False)

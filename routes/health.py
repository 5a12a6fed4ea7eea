"""
routes/health.py -- GET /health

Reads START_TIME and PROCESS from app.main (set once at module load) and the
feature gate snapshot (flag value, whether a remote provider is attached).
Uptime format: "HH:mm:ss.SSS". Memory: RSS in MB as "XX.XX", no unit suffix.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends

from app.deps import get_service
from app.models import HealthResponse
from app.service import TransactionService

router = APIRouter()


def _format_uptime(uptime: timedelta) -> str:
    """Format a timedelta as 'HH:mm:ss.SSS'."""
    total_seconds = int(uptime.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    ms = uptime.microseconds // 1000
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{ms:03d}"


@router.get("/health", response_model=HealthResponse)
def health(service: TransactionService = Depends(get_service)) -> HealthResponse:
    # Lazy import to avoid circular dependency at module load time
    import app.main as _main

    uptime = datetime.now(timezone.utc) - _main.START_TIME
    mem_mb = _main.PROCESS.memory_info().rss / (1024 * 1024)
    flags = service.gate.snapshot()

    return HealthResponse(
        status="ok",
        uptime=_format_uptime(uptime),
        memory=f"{mem_mb:.2f}",
        threads=_main.PROCESS.num_threads(),
        transactions=len(service.store),
        advancedFilters=flags["advancedFilters"],
        remote=flags["remote"],
    )

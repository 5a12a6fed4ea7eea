"""
app/deps.py -- FastAPI dependencies resolved per request.

The caller's user id is read from the X-User-ID header and handed to route
functions as an ordinary argument; nothing is stashed in request state.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from app.service import TransactionService


def get_service(request: Request) -> TransactionService:
    return request.app.state.transaction_service


def get_user_id(request: Request, x_user_id: Optional[str] = Header(default=None)) -> str:
    """Demo identity: trust X-User-ID, fall back to the configured default user."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        user_id = request.app.state.settings.default_user_id
    return user_id

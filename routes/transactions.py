"""routes/transactions.py -- GET /transactions and GET /transactions/{txn_id}"""
from __future__ import annotations

from typing import Annotated, List

from fastapi import APIRouter, Depends, Query

from app.deps import get_service, get_user_id
from app.models import ErrorResponse, Transaction, TransactionFilters
from app.service import TransactionService

router = APIRouter()


@router.get(
    "/transactions",
    response_model=List[Transaction],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def list_transactions(
    filters: Annotated[TransactionFilters, Query()],
    service: TransactionService = Depends(get_service),
    user_id: str = Depends(get_user_id),
) -> List[Transaction]:
    """
    List transactions, most recent first.

    accountId is always applied. startDate, endDate, category, minAmount and
    maxAmount only take effect while the advancedFilters flag is on; otherwise
    they are ignored. A malformed date or amount is rejected with 400 before
    the store is touched.
    """
    return service.list_transactions(filters, user_id=user_id)


@router.get(
    "/transactions/{txn_id}",
    response_model=Transaction,
    responses={404: {"model": ErrorResponse}},
)
def get_transaction(
    txn_id: str,
    service: TransactionService = Depends(get_service),
    user_id: str = Depends(get_user_id),
) -> Transaction:
    """Single transaction by id; 404 when the id was never loaded."""
    return service.get_transaction(txn_id, user_id=user_id)

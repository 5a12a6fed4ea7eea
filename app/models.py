"""
Pydantic models for the Transactions API.
Dates are parsed to timezone-aware datetimes ONCE here -- never inside the scan.
Field names are camelCase so they match the JSON contract one-to-one.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.utils.params import ensure_utc, parse_amount_param, parse_date_param


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------

class Transaction(BaseModel):
    """One transaction record. Frozen: records never change after load."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    accountId: str
    date: datetime
    amount: float
    category: str = ""
    description: str = ""
    merchant: str = ""
    type: str = ""
    status: str = ""
    currency: str = "USD"

    @field_validator("date", mode="after")
    @classmethod
    def check_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)


# ---------------------------------------------------------------------------
# Filters (bound from the query string of GET /transactions)
# ---------------------------------------------------------------------------

class TransactionFilters(BaseModel):
    """
    Candidate filter set. Every field is optional; None means "no constraint".

    Empty query values (``?category=``) are normalised to None so they behave
    exactly like an absent parameter.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    accountId: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    category: Optional[str] = None
    minAmount: Optional[float] = None
    maxAmount: Optional[float] = None

    @field_validator("accountId", "category", mode="before")
    @classmethod
    def check_text(cls, v: object) -> object:
        if isinstance(v, str) and v == "":
            return None
        return v

    @field_validator("startDate", "endDate", mode="before")
    @classmethod
    def check_dates(cls, v: object, info: ValidationInfo) -> Optional[datetime]:
        return parse_date_param(v, info.field_name)

    @field_validator("minAmount", "maxAmount", mode="before")
    @classmethod
    def check_amounts(cls, v: object, info: ValidationInfo) -> Optional[float]:
        return parse_amount_param(v, info.field_name)

    @property
    def has_advanced(self) -> bool:
        """True when any gated (non-account) field is set."""
        return (
            self.startDate is not None
            or self.endDate is not None
            or bool(self.category)
            or self.minAmount is not None
            or self.maxAmount is not None
        )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    uptime: str
    memory: str
    threads: int
    transactions: int
    advancedFilters: bool
    remote: bool

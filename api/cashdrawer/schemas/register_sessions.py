from datetime import datetime
from pydantic import BaseModel, Field

from cashdrawer.reconciliation import BreakdownLine, SessionMode


class BreakdownLineIn(BaseModel):
    denomination_id: int = Field(ge=1)
    quantity: int = Field(ge=0)
    amount: str


class OpenSessionRequest(BaseModel):
    register_id: int = Field(ge=1)
    declared_balance: str
    denomination_breakdown: list[BreakdownLineIn] = Field(default_factory=list)
    notes: str | None = None


class CloseSessionRequest(BaseModel):
    declared_balance: str
    denomination_breakdown: list[BreakdownLineIn] = Field(default_factory=list)
    expected_balance: str | None = Field(None, description="System expected cash; defaults to the calculated total")
    notes: str | None = None


class ReconcileRequest(BaseModel):
    mode: SessionMode
    declared_balance: str = ""
    counts: dict[int, int | str] = Field(default_factory=dict)


class ReconcileResponse(BaseModel):
    mode: SessionMode
    declared_balance: str
    calculated_total: str
    difference: str
    is_balanced: bool
    accepted: bool
    error_code: str | None = None
    error_message: str | None = None
    denomination_breakdown: list[BreakdownLine] = Field(default_factory=list)


class SessionOut(BaseModel):
    id: int
    session_number: str
    register_id: int
    branch_id: int
    status: str  # 'open'|'closed'
    opened_by: str | None = None
    closed_by: str | None = None
    declared_opening_balance: str
    calculated_opening_balance: str
    declared_closing_balance: str | None = None
    calculated_closing_balance: str | None = None
    expected_closing_balance: str | None = None
    discrepancy_amount: str | None = None
    notes: str | None = None
    opened_at: datetime
    closed_at: datetime | None = None


class SessionDenominationOut(BaseModel):
    denomination_id: int
    denomination_name: str | None = None
    denomination_value: str | None = None
    denomination_kind: str | None = None
    quantity: int
    amount: str


class DiscrepancyOut(BaseModel):
    session_id: int
    session_number: str
    register_name: str | None = None
    discrepancy_amount: str
    opened_by: str | None = None
    opened_at: datetime
    closed_at: datetime | None = None

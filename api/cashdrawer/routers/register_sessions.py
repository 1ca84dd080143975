import logging
import time
from datetime import datetime
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sqlalchemy.orm import Session

from cashdrawer.config import Settings
from cashdrawer.db import get_db
from cashdrawer.models.audit import RegisterAuditLog
from cashdrawer.models.denomination import DenominationType
from cashdrawer.models.register import Register
from cashdrawer.models.register_session import RegisterSession, RegisterSessionDenomination
from cashdrawer.reconciliation import (
    BreakdownLine,
    ReconciliationAttempt,
    SessionMode,
    format_amount,
    from_cents,
    parse_amount,
    to_cents,
)
from cashdrawer.routers.denominations import load_definitions
from cashdrawer.schemas.register_sessions import (
    BreakdownLineIn,
    CloseSessionRequest,
    DiscrepancyOut,
    OpenSessionRequest,
    ReconcileRequest,
    ReconcileResponse,
    SessionDenominationOut,
    SessionOut,
)


settings = Settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/register-sessions", tags=["register-sessions"])

HISTORY_LIMIT = 50
DISCREPANCY_LIMIT = 20


def _money(cents: int | None) -> str | None:
    return None if cents is None else format_amount(from_cents(cents))


def _session_out(s: RegisterSession) -> SessionOut:
    return SessionOut(
        id=s.id,
        session_number=s.session_number,
        register_id=s.register_id,
        branch_id=s.branch_id,
        status=s.status,
        opened_by=s.opened_by,
        closed_by=s.closed_by,
        declared_opening_balance=_money(s.declared_opening_cents),
        calculated_opening_balance=_money(s.calculated_opening_cents),
        declared_closing_balance=_money(s.declared_closing_cents),
        calculated_closing_balance=_money(s.calculated_closing_cents),
        expected_closing_balance=_money(s.expected_closing_cents),
        discrepancy_amount=_money(s.discrepancy_cents),
        notes=s.notes,
        opened_at=s.opened_at,
        closed_at=s.closed_at,
    )


def _active_session(db: Session, register_id: int) -> RegisterSession | None:
    return (
        db.query(RegisterSession)
        .filter(RegisterSession.register_id == register_id, RegisterSession.status == "open")
        .first()
    )


def _next_session_number(db: Session, register_id: int) -> str:
    ms = int(time.time() * 1000)
    while db.query(RegisterSession.id).filter_by(session_number=f"REG-{register_id}-{ms}").first():
        ms += 1
    return f"REG-{register_id}-{ms}"


def _counted_attempt(
    db: Session,
    mode: SessionMode,
    declared_balance: str,
    lines: list[BreakdownLineIn],
) -> ReconciliationAttempt:
    """Rebuild the operator's count from submitted quantities.

    Client-side amounts are not trusted; the engine recomputes them from the
    active catalog.
    """
    definitions = load_definitions(db)
    known = {d.id for d in definitions}
    counts: dict[int, int] = {}
    for line in lines:
        if line.denomination_id not in known:
            raise HTTPException(400, f"Unknown denomination {line.denomination_id}")
        if line.denomination_id in counts:
            raise HTTPException(400, f"Duplicate denomination {line.denomination_id}")
        counts[line.denomination_id] = line.quantity

    return ReconciliationAttempt.build(
        mode, definitions, counts, declared_balance, tolerance=settings.balance_tolerance
    )


def _check_submitted_amounts(lines: list[BreakdownLineIn], accepted: list[BreakdownLine]) -> None:
    recomputed = {b.denomination_id: b.amount for b in accepted}
    for line in lines:
        expected = recomputed.get(line.denomination_id)
        submitted = parse_amount(line.amount)
        if expected is not None and (submitted is None or format_amount(submitted) != expected):
            logger.warning(
                "Submitted amount %r for denomination %s differs from recomputed %s",
                line.amount,
                line.denomination_id,
                expected,
            )


def _store_breakdown(db: Session, session_id: int, mode: SessionMode, accepted: list[BreakdownLine]) -> None:
    for b in accepted:
        db.add(
            RegisterSessionDenomination(
                session_id=session_id,
                denomination_id=b.denomination_id,
                type=mode.value,
                quantity=b.quantity,
                amount_cents=to_cents(parse_amount(b.amount)),
            )
        )


@router.post("/reconcile", response_model=ReconcileResponse)
def reconcile_preview(payload: ReconcileRequest, db: Session = Depends(get_db)):
    attempt = ReconciliationAttempt.build(
        payload.mode,
        load_definitions(db),
        payload.counts,
        payload.declared_balance,
        tolerance=settings.balance_tolerance,
    )
    result = attempt.submit()
    evaluation = attempt.evaluation
    return ReconcileResponse(
        mode=attempt.mode,
        declared_balance=format_amount(attempt.declared_amount),
        calculated_total=format_amount(attempt.calculated_total),
        difference=format_amount(evaluation.difference),
        is_balanced=evaluation.is_balanced,
        accepted=result.ok,
        error_code=None if result.ok else result.error.code,
        error_message=None if result.ok else result.error.message,
        denomination_breakdown=list(result.breakdown),
    )


@router.post("/open", response_model=SessionOut, status_code=201)
def open_session(
    payload: OpenSessionRequest,
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Header(default="system", alias="X-User-Id"),
):
    reg = db.get(Register, payload.register_id)
    if not reg or not reg.is_active:
        raise HTTPException(404, "Register not found")
    if _active_session(db, reg.id) is not None:
        raise HTTPException(409, "Register already has an active session. Please close the current session first.")

    attempt = _counted_attempt(db, SessionMode.opening, payload.declared_balance, payload.denomination_breakdown)
    result = attempt.submit()
    if not result.ok:
        logger.info("Open rejected for register %s: %s", reg.id, result.error.code)
    accepted = result.unwrap()
    _check_submitted_amounts(payload.denomination_breakdown, accepted)

    declared = parse_amount(payload.declared_balance)
    calculated = attempt.calculated_total
    s = RegisterSession(
        session_number=_next_session_number(db, reg.id),
        register_id=reg.id,
        branch_id=reg.branch_id,
        status="open",
        opened_by=user_id,
        declared_opening_cents=to_cents(declared),
        calculated_opening_cents=to_cents(calculated),
        notes=payload.notes,
        opened_at=datetime.utcnow(),
    )
    db.add(s)
    db.flush()
    _store_breakdown(db, s.id, SessionMode.opening, accepted)

    db.add(
        RegisterAuditLog(
            register_id=reg.id,
            session_id=s.id,
            user_id=user_id,
            action="session_opened",
            description=f"Register session opened with opening balance of {payload.declared_balance}",
            amount_cents=to_cents(declared),
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            diff_json={
                "session_id": s.id,
                "declared_balance": format_amount(declared),
                "calculated_balance": format_amount(calculated),
                "denomination_breakdown": [b.model_dump() for b in accepted],
                "denomination_count": len(accepted),
            },
        )
    )
    db.commit()
    db.refresh(s)
    logger.info("Opened register session %s (%s) on register %s", s.id, s.session_number, reg.id)
    return _session_out(s)


@router.post("/{session_id}/close", response_model=SessionOut)
def close_session(
    session_id: int,
    payload: CloseSessionRequest,
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Header(default="system", alias="X-User-Id"),
):
    s = db.get(RegisterSession, session_id)
    if not s:
        raise HTTPException(404, "Session not found")
    if s.status != "open":
        raise HTTPException(409, "Session is already closed")

    attempt = _counted_attempt(db, SessionMode.closing, payload.declared_balance, payload.denomination_breakdown)
    result = attempt.submit()
    if not result.ok:
        logger.info("Close rejected for session %s: %s", s.id, result.error.code)
    accepted = result.unwrap()
    _check_submitted_amounts(payload.denomination_breakdown, accepted)

    declared = parse_amount(payload.declared_balance)
    calculated = attempt.calculated_total
    if payload.expected_balance is None:
        # Sales and expense totals are not tracked here; expect what was counted
        expected = calculated
    else:
        expected = parse_amount(payload.expected_balance)
        if expected is None:
            raise HTTPException(400, "Invalid expected_balance")

    s.status = "closed"
    s.closed_by = user_id
    s.declared_closing_cents = to_cents(declared)
    s.calculated_closing_cents = to_cents(calculated)
    s.expected_closing_cents = to_cents(expected)
    s.discrepancy_cents = s.expected_closing_cents - s.calculated_closing_cents
    s.closed_at = datetime.utcnow()
    if payload.notes:
        s.notes = payload.notes
    _store_breakdown(db, s.id, SessionMode.closing, accepted)

    db.add(
        RegisterAuditLog(
            register_id=s.register_id,
            session_id=s.id,
            user_id=user_id,
            action="session_closed",
            description=f"Register session closed with closing balance of {payload.declared_balance}",
            amount_cents=to_cents(declared),
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            diff_json={
                "session_id": s.id,
                "declared_balance": format_amount(declared),
                "calculated_balance": format_amount(calculated),
                "discrepancy": _money(s.discrepancy_cents),
                "has_discrepancy": s.discrepancy_cents != 0,
                "denomination_breakdown": [b.model_dump() for b in accepted],
                "denomination_count": len(accepted),
            },
        )
    )
    db.commit()
    db.refresh(s)
    if s.discrepancy_cents:
        logger.warning("Session %s closed with discrepancy %s", s.id, _money(s.discrepancy_cents))
    else:
        logger.info("Closed register session %s", s.id)
    return _session_out(s)


@router.get("/active/{register_id}", response_model=SessionOut)
def get_active_session(register_id: int, db: Session = Depends(get_db)):
    s = _active_session(db, register_id)
    if s is None:
        raise HTTPException(404, "No active session")
    return _session_out(s)


@router.get("/history/{register_id}", response_model=list[SessionOut])
def get_session_history(register_id: int, db: Session = Depends(get_db)):
    rows = (
        db.query(RegisterSession)
        .filter(RegisterSession.register_id == register_id)
        .order_by(RegisterSession.opened_at.desc(), RegisterSession.id.desc())
        .limit(HISTORY_LIMIT)
        .all()
    )
    return [_session_out(s) for s in rows]


@router.get("/discrepancies/{branch_id}", response_model=list[DiscrepancyOut])
def get_discrepancy_reports(branch_id: int, db: Session = Depends(get_db)):
    rows = (
        db.query(RegisterSession, Register.name.label("register_name"))
        .outerjoin(Register, Register.id == RegisterSession.register_id)
        .filter(
            RegisterSession.branch_id == branch_id,
            RegisterSession.discrepancy_cents.is_not(None),
            RegisterSession.discrepancy_cents != 0,
        )
        .order_by(RegisterSession.opened_at.desc(), RegisterSession.id.desc())
        .limit(DISCREPANCY_LIMIT)
        .all()
    )
    return [
        DiscrepancyOut(
            session_id=s.id,
            session_number=s.session_number,
            register_name=register_name,
            discrepancy_amount=_money(s.discrepancy_cents),
            opened_by=s.opened_by,
            opened_at=s.opened_at,
            closed_at=s.closed_at,
        )
        for s, register_name in rows
    ]


@router.get("/{session_id}/denominations", response_model=list[SessionDenominationOut])
def get_denomination_breakdown(
    session_id: int,
    type: str = Query(..., description="'opening' or 'closing'"),
    db: Session = Depends(get_db),
):
    if type not in {m.value for m in SessionMode}:
        raise HTTPException(400, 'Invalid type. Must be "opening" or "closing"')
    if not db.get(RegisterSession, session_id):
        raise HTTPException(404, "Session not found")
    rows = (
        db.query(RegisterSessionDenomination, DenominationType)
        .outerjoin(DenominationType, DenominationType.id == RegisterSessionDenomination.denomination_id)
        .filter(
            RegisterSessionDenomination.session_id == session_id,
            RegisterSessionDenomination.type == type,
        )
        .order_by(DenominationType.sort_order, RegisterSessionDenomination.id)
        .all()
    )
    return [
        SessionDenominationOut(
            denomination_id=line.denomination_id,
            denomination_name=d.name if d else None,
            denomination_value=format_amount(d.value) if d else None,
            denomination_kind=d.kind if d else None,
            quantity=line.quantity,
            amount=_money(line.amount_cents),
        )
        for line, d in rows
    ]

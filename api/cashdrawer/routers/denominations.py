import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cashdrawer.db import get_db
from cashdrawer.models.denomination import DenominationType
from cashdrawer.reconciliation import DenominationDefinition, format_amount, to_cents
from cashdrawer.schemas.denominations import DenominationTypeCreate, DenominationTypePatch, DenominationTypeOut


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/denomination-types", tags=["denominations"])


def _out(d: DenominationType) -> DenominationTypeOut:
    return DenominationTypeOut(
        id=d.id,
        name=d.name,
        value=format_amount(d.value),
        kind=d.kind,
        sort_order=d.sort_order,
        is_active=d.is_active,
    )


def _active_rows(db: Session) -> list[DenominationType]:
    return (
        db.query(DenominationType)
        .filter(DenominationType.is_active.is_(True))
        .order_by(DenominationType.sort_order, DenominationType.id)
        .all()
    )


def load_definitions(db: Session) -> list[DenominationDefinition]:
    """Active catalog as engine definitions, in display order."""
    return [DenominationDefinition.model_validate(r) for r in _active_rows(db)]


@router.get("/", response_model=list[DenominationTypeOut])
def list_denomination_types(db: Session = Depends(get_db)):
    rows = _active_rows(db)
    logger.debug("Fetched %d denomination types", len(rows))
    return [_out(r) for r in rows]


@router.post("/", response_model=DenominationTypeOut, status_code=201)
def create_denomination_type(payload: DenominationTypeCreate, db: Session = Depends(get_db)):
    d = DenominationType(
        name=payload.name,
        value_cents=to_cents(payload.value),
        kind=payload.kind.value,
        sort_order=payload.sort_order,
        is_active=True,
    )
    db.add(d)
    db.commit()
    db.refresh(d)
    logger.info("Created denomination type %s (%s %s)", d.id, d.kind, format_amount(d.value))
    return _out(d)


@router.patch("/{denomination_id}", response_model=DenominationTypeOut)
def update_denomination_type(denomination_id: int, payload: DenominationTypePatch, db: Session = Depends(get_db)):
    d = db.get(DenominationType, denomination_id)
    if not d:
        raise HTTPException(404, "Denomination type not found")
    if payload.name is not None:
        d.name = payload.name
    if payload.sort_order is not None:
        d.sort_order = payload.sort_order
    if payload.is_active is not None:
        d.is_active = payload.is_active
    db.commit()
    db.refresh(d)
    return _out(d)

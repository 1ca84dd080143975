from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cashdrawer.db import get_db
from cashdrawer.models.register import Register
from cashdrawer.schemas.registers import RegisterCreate, RegisterOut


router = APIRouter(prefix="/api/v1/registers", tags=["registers"])


@router.get("/", response_model=list[RegisterOut])
def list_registers(branch_id: int | None = None, db: Session = Depends(get_db)):
    q = db.query(Register).filter(Register.is_active.is_(True))
    if branch_id is not None:
        q = q.filter(Register.branch_id == branch_id)
    return q.order_by(Register.name).all()


@router.post("/", response_model=RegisterOut, status_code=201)
def create_register(payload: RegisterCreate, db: Session = Depends(get_db)):
    r = Register(name=payload.name, branch_id=payload.branch_id, is_active=True)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r

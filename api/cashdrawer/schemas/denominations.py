from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, constr

from cashdrawer.reconciliation import DenominationKind
from cashdrawer.reconciliation.money import MAX_AMOUNT


class DenominationTypeCreate(BaseModel):
    name: constr(min_length=1, max_length=64)
    value: Decimal = Field(gt=0, lt=MAX_AMOUNT, decimal_places=2)
    kind: DenominationKind = DenominationKind.note
    sort_order: int = 0


class DenominationTypePatch(BaseModel):
    name: constr(min_length=1, max_length=64) | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class DenominationTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    value: str
    kind: DenominationKind
    sort_order: int
    is_active: bool

"""Denomination reconciliation for register opening and closing counts.

The operator declares the cash total they counted by hand and enters a
quantity for every denomination. Only notes contribute to the calculated
total; coin quantities are accepted but ignored. A register session may
open or close only when the declared and calculated totals agree within
the tolerance.

Everything here is a pure function of its arguments. Callers build a new
``ReconciliationAttempt`` for every submit, including retries.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from .errors import MissingDeclaredBalance, NoDenominationsEntered, ReconciliationError, Unbalanced
from .money import format_amount, normalize_quantity, parse_amount, quantize

DEFAULT_TOLERANCE = Decimal("0.01")


class DenominationKind(str, Enum):
    note = "note"
    coin = "coin"


class SessionMode(str, Enum):
    opening = "opening"
    closing = "closing"


class DenominationDefinition(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    value: Decimal
    kind: DenominationKind
    name: str = ""
    sort_order: int = 0

    @property
    def is_note(self) -> bool:
        return self.kind is DenominationKind.note


class DenominationCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    denomination_id: int
    quantity: int = 0


class BalanceEvaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    difference: Decimal
    is_balanced: bool


class BreakdownLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    denomination_id: int
    quantity: int
    amount: str


def normalize_counts(raw: Mapping[Any, Any] | Iterable[DenominationCount] | None) -> dict[int, int]:
    """Turn operator input into ``{denomination_id: quantity}`` with clamped quantities.

    Accepts a mapping (JSON object keys may be strings) or an iterable of
    ``DenominationCount``. Keys that are not integers are dropped.
    """
    if raw is None:
        return {}
    items = raw.items() if isinstance(raw, Mapping) else ((c.denomination_id, c.quantity) for c in raw)
    counts: dict[int, int] = {}
    for key, qty in items:
        try:
            denomination_id = int(key)
        except (TypeError, ValueError):
            continue
        counts[denomination_id] = normalize_quantity(qty)
    return counts


def _notes(definitions: Sequence[DenominationDefinition]) -> list[DenominationDefinition]:
    # Caller order is kept; the catalog query already returns display order
    return [d for d in definitions if d.is_note]


def compute_calculated_total(
    definitions: Sequence[DenominationDefinition], counts: Mapping[int, int]
) -> Decimal:
    total = Decimal("0.00")
    for d in _notes(definitions):
        total += quantize(d.value * counts.get(d.id, 0))
    return quantize(total)


def evaluate(
    declared_balance: Decimal, calculated_total: Decimal, tolerance: Decimal = DEFAULT_TOLERANCE
) -> BalanceEvaluation:
    difference = abs(declared_balance - calculated_total)
    return BalanceEvaluation(difference=difference, is_balanced=difference < tolerance)


@dataclass(frozen=True)
class SubmissionResult:
    breakdown: tuple[BreakdownLine, ...] = ()
    error: ReconciliationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> list[BreakdownLine]:
        if self.error is not None:
            raise self.error
        return list(self.breakdown)


def validate_submission(
    declared_balance: Any,
    counts: Mapping[int, int],
    is_balanced: bool,
    definitions: Sequence[DenominationDefinition],
    calculated_total: Decimal,
) -> SubmissionResult:
    declared = parse_amount(declared_balance)
    if declared is None or declared <= 0:
        return SubmissionResult(error=MissingDeclaredBalance())
    if not is_balanced:
        return SubmissionResult(error=Unbalanced(declared, calculated_total))
    # Independent of the balance check: a count with no notes is never a real submission.
    if not any(counts.get(d.id, 0) > 0 for d in _notes(definitions)):
        return SubmissionResult(error=NoDenominationsEntered())

    lines = tuple(
        BreakdownLine(
            denomination_id=d.id,
            quantity=counts[d.id],
            amount=format_amount(d.value * counts[d.id]),
        )
        for d in _notes(definitions)
        if counts.get(d.id, 0) > 0
    )
    return SubmissionResult(breakdown=lines)


@dataclass(frozen=True)
class ReconciliationAttempt:
    """One submit of a cash count. Never mutated; build a new one to retry."""

    mode: SessionMode
    declared_balance: Any
    definitions: tuple[DenominationDefinition, ...]
    counts: Mapping[int, int] = field(default_factory=dict)
    tolerance: Decimal = DEFAULT_TOLERANCE

    @classmethod
    def build(
        cls,
        mode: SessionMode | str,
        definitions: Iterable[Any],
        counts: Mapping[Any, Any] | Iterable[DenominationCount] | None,
        declared_balance: Any,
        tolerance: Decimal = DEFAULT_TOLERANCE,
    ) -> "ReconciliationAttempt":
        defs = tuple(
            d if isinstance(d, DenominationDefinition) else DenominationDefinition.model_validate(d)
            for d in definitions
        )
        return cls(
            mode=SessionMode(mode),
            declared_balance=declared_balance,
            definitions=defs,
            counts=MappingProxyType(normalize_counts(counts)),
            tolerance=Decimal(tolerance),
        )

    @property
    def declared_amount(self) -> Decimal:
        return parse_amount(self.declared_balance) or Decimal("0")

    @property
    def calculated_total(self) -> Decimal:
        return compute_calculated_total(self.definitions, self.counts)

    @property
    def evaluation(self) -> BalanceEvaluation:
        return evaluate(self.declared_amount, self.calculated_total, self.tolerance)

    @property
    def difference(self) -> Decimal:
        return self.evaluation.difference

    @property
    def is_balanced(self) -> bool:
        return self.evaluation.is_balanced

    def submit(self) -> SubmissionResult:
        declared = parse_amount(self.declared_balance)
        if declared is None or declared <= 0:
            return SubmissionResult(error=MissingDeclaredBalance())
        calculated = self.calculated_total
        evaluation = evaluate(declared, calculated, self.tolerance)
        return validate_submission(
            self.declared_balance, self.counts, evaluation.is_balanced, self.definitions, calculated
        )

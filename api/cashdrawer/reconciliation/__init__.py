from .engine import (
    DEFAULT_TOLERANCE,
    BalanceEvaluation,
    BreakdownLine,
    DenominationCount,
    DenominationDefinition,
    DenominationKind,
    ReconciliationAttempt,
    SessionMode,
    SubmissionResult,
    compute_calculated_total,
    evaluate,
    normalize_counts,
    validate_submission,
)
from .errors import MissingDeclaredBalance, NoDenominationsEntered, ReconciliationError, Unbalanced
from .money import format_amount, from_cents, normalize_quantity, parse_amount, to_cents

__all__ = [
    "DEFAULT_TOLERANCE",
    "BalanceEvaluation",
    "BreakdownLine",
    "DenominationCount",
    "DenominationDefinition",
    "DenominationKind",
    "ReconciliationAttempt",
    "SessionMode",
    "SubmissionResult",
    "compute_calculated_total",
    "evaluate",
    "normalize_counts",
    "validate_submission",
    "MissingDeclaredBalance",
    "NoDenominationsEntered",
    "ReconciliationError",
    "Unbalanced",
    "format_amount",
    "from_cents",
    "normalize_quantity",
    "parse_amount",
    "to_cents",
]

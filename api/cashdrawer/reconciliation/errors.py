from decimal import Decimal

from .money import format_amount


class ReconciliationError(Exception):
    """A cash count that may not open or close a register session."""

    code = "reconciliation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class MissingDeclaredBalance(ReconciliationError):
    code = "missing_declared_balance"

    def __init__(self):
        super().__init__("Please enter a valid declared balance")


class Unbalanced(ReconciliationError):
    code = "unbalanced"

    def __init__(self, declared: Decimal, calculated: Decimal):
        self.declared = declared
        self.calculated = calculated
        super().__init__(
            f"Declared balance ({format_amount(declared)}) does not match calculated total "
            f"({format_amount(calculated)}). Please verify denomination quantities."
        )


class NoDenominationsEntered(ReconciliationError):
    code = "no_denominations_entered"

    def __init__(self):
        super().__init__("Please enter at least one denomination quantity")

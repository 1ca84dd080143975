from .base import Base
from .denomination import DenominationType
from .register import Register
from .register_session import RegisterSession, RegisterSessionDenomination
from .audit import RegisterAuditLog

__all__ = [
    "Base",
    "DenominationType",
    "Register",
    "RegisterSession",
    "RegisterSessionDenomination",
    "RegisterAuditLog",
]

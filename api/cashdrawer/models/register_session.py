from datetime import datetime
from sqlalchemy import String, Integer, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class RegisterSession(Base):
    __tablename__ = "register_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    register_id: Mapped[int] = mapped_column(Integer, ForeignKey("registers.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="open")  # 'open'|'closed'
    opened_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    closed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    declared_opening_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    calculated_opening_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    declared_closing_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    calculated_closing_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    expected_closing_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    discrepancy_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    opened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    denominations: Mapped[list["RegisterSessionDenomination"]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )


class RegisterSessionDenomination(Base):
    __tablename__ = "register_session_denominations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(Integer, ForeignKey("register_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    denomination_id: Mapped[int] = mapped_column(Integer, ForeignKey("denomination_types.id"), nullable=False)
    type: Mapped[str] = mapped_column(String(8), nullable=False)  # 'opening'|'closing'
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    session: Mapped[RegisterSession] = relationship(back_populates="denominations")

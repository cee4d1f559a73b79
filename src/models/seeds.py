"""Seed catalog entries (committed seed records)."""

import uuid
from datetime import datetime

from sqlalchemy import (
    UUID,
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Seed(Base):
    """A seed pack in a user's catalog.

    Rows only come from an explicit commit or the manual create form; assistant
    drafts are never written here.
    """

    __tablename__ = "seeds"
    __table_args__ = (
        CheckConstraint("num_seeds >= 0", name="ck_seeds_num_seeds_non_negative"),
        CheckConstraint("quantity >= 1", name="ck_seeds_quantity_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True, comment="Identity provider uid"
    )
    breeder: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    strain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    lineage: Mapped[str] = mapped_column(Text, nullable=False, default="")
    generation: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    num_seeds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    feminized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_multiple: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # ISO-8601 string, as the client displays and sorts it verbatim
    date_acquired: Mapped[str] = mapped_column(String(40), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Seed(id={self.id}, strain={self.strain!r}, user_id={self.user_id})>"

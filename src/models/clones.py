"""Clone catalog entries."""

import uuid
from datetime import datetime

from sqlalchemy import UUID, Boolean, CheckConstraint, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Clone(Base):
    __tablename__ = "clones"
    __table_args__ = (
        CheckConstraint("sex IN ('Male', 'Female')", name="ck_clones_sex"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    breeder: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    strain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    cut_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    generation: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    sex: Mapped[str] = mapped_column(String(6), nullable=False, default="Female")
    breeder_cut: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    date_acquired: Mapped[str] = mapped_column(String(40), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Clone(id={self.id}, strain={self.strain!r}, user_id={self.user_id})>"

# barberpro/models.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

UTC = timezone.utc


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# KeyValueRecord – una fila por colección (services, clients, logo, ...)
# ---------------------------------------------------------------------------
class KeyValueRecord(Base):
    __tablename__ = "kv_records"

    key:        Mapped[str]      = mapped_column(String(120), primary_key=True)
    value:      Mapped[str]      = mapped_column(Text, nullable=False)  # JSON o data URI
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

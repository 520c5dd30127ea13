from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Named blobs: ba_blobs
# ---------------------------


class BaBlob(Base):
    """A single named, opaque text payload.

    ``bank_alerts`` keeps its whole persisted state in one row of this table
    (a JSON array of transaction records). Rows are rewritten in full; there
    are no partial updates.
    """

    __tablename__ = "ba_blobs"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("'[]'"))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

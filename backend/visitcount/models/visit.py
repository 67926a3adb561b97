"""
Visit Counter Backend: Visit SQLAlchemy Model
==============================================

What:  ORM model for the `visits` table.
Who:   SQLVisitStorage inserts rows and counts them; provisioning creates the
       table from Base.metadata.

Table:
    visits(id INTEGER auto-increment PRIMARY KEY,
           timestamp TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP)

    Rows are append-only: never updated, deleted, or read one by one.
    The visit count is COUNT(*) over this table at read time.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, text
from sqlalchemy.orm import Mapped, mapped_column

from visitcount.database import Base


class Visit(Base):
    """One counted visit."""

    __tablename__ = "visits"

    # SERIAL on PostgreSQL, INTEGER PRIMARY KEY (rowid alias) on SQLite
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Visit(id={self.id}, timestamp={self.timestamp})>"

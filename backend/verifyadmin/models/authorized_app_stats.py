"""
Per-day code issuance counters for authorized apps.

Each row is the number of verification codes one app issued on one UTC
calendar day. Composite PK: (date, authorized_app_id) — one row per bucket.
realm_id is denormalized so summaries can be scoped to the (app, realm)
pair without a join.

Atomic increments via INSERT … ON CONFLICT DO UPDATE keep the counter
correct under concurrent writers without external locks.
"""

import datetime

from sqlalchemy import BigInteger, Date, ForeignKey, Index, Integer
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from verifyadmin.core.database import Base


class AuthorizedAppStats(Base):
    """Codes issued by one app on one day."""

    __tablename__ = "authorized_app_stats"

    date: Mapped[datetime.date] = mapped_column(
        Date, primary_key=True,
    )
    authorized_app_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("authorized_apps.id", ondelete="CASCADE"),
        primary_key=True,
    )
    realm_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("realms.id", ondelete="CASCADE"),
        nullable=False,
    )
    codes_issued: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        Index("ix_authorized_app_stats_app_realm", "authorized_app_id", "realm_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuthorizedAppStats app={self.authorized_app_id} "
            f"date={self.date} codes={self.codes_issued}>"
        )

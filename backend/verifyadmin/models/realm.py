"""
Realm model — one tenant of the verification service.

A realm owns its authorized apps (API keys) and their usage stats.
Users may belong to several realms and pick one per session.
"""

import datetime

from sqlalchemy import Integer, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from verifyadmin.core.database import Base


class Realm(Base):
    """Tenant record — the isolation boundary for API keys."""

    __tablename__ = "realms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(
        Text, nullable=False, unique=True,
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Realm id={self.id} name={self.name!r}>"

"""
User model — an administrator of one or more realms.

Users are provisioned by the identity layer; this service only reads them.
Realm membership lives in the `user_realms` association table.
"""

import datetime

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from verifyadmin.core.database import Base

user_realms = Table(
    "user_realms",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("realm_id", Integer, ForeignKey("realms.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """Signed-in principal. Read-only here."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # Loaded explicitly (selectinload) — async sessions cannot lazy-load.
    realms: Mapped[list["Realm"]] = relationship(  # noqa: F821
        secondary=user_realms,
        lazy="raise",
        order_by="Realm.name",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"

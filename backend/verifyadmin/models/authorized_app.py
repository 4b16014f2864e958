"""
Authorized app model — an API key issued to a realm.

Security notes:
  • Raw API keys are NEVER stored. Only a SHA-256 hash is persisted.
  • `key_prefix` keeps the first characters for identification in the
    UI without exposing the full key.
  • `is_active` allows key revocation without deletion (audit trail).
"""

import datetime
import enum

from sqlalchemy import Boolean, ForeignKey, Integer, SmallInteger, String, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from verifyadmin.core.database import Base


class APIUserType(enum.IntEnum):
    """Who holds the key: a device app (verifies codes) or an admin system (issues codes)."""

    DEVICE = 0
    ADMIN = 1


class AuthorizedApp(Base):
    """Hashed API key belonging to a realm."""

    __tablename__ = "authorized_apps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    realm_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("realms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    api_key_type: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        default=APIUserType.DEVICE,
        server_default="0",
    )
    key_prefix: Mapped[str] = mapped_column(String(16), nullable=False)
    key_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    @property
    def is_admin_type(self) -> bool:
        return self.api_key_type == APIUserType.ADMIN

    @property
    def is_device_type(self) -> bool:
        return self.api_key_type == APIUserType.DEVICE

    def __repr__(self) -> str:
        return (
            f"<AuthorizedApp id={self.id} realm={self.realm_id} "
            f"prefix={self.key_prefix!r} active={self.is_active}>"
        )

"""
Pydantic v2 schemas for API key pages and the stats API.

AppStatsSummary doubles as the storage-layer return type: its zero value
(all counters 0) is what callers substitute when a lookup fails.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from verifyadmin.models.authorized_app import APIUserType


class AppStatsSummary(BaseModel):
    """Codes issued by one app over the trailing 1, 7 and 30 days."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    codes_issued_1d: int = Field(default=0, ge=0)
    codes_issued_7d: int = Field(default=0, ge=0)
    codes_issued_30d: int = Field(default=0, ge=0)


class AuthorizedAppCreate(BaseModel):
    """Form payload for POST /apikeys."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    api_key_type: Literal["admin", "device"]

    @property
    def user_type(self) -> APIUserType:
        return APIUserType.ADMIN if self.api_key_type == "admin" else APIUserType.DEVICE


class StatsSummaryOut(AppStatsSummary):
    """JSON response for GET /api/v1/stats/summary."""

    authorized_app_id: int
    realm_id: int

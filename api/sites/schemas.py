"""
Pydantic schemas for the site endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class CreateSiteRequest(BaseModel):
    # Unknown keys are dropped; validation of required fields happens in the service
    # so that missing values produce the documented 400 message.
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    url: str | None = None
    logo: str | None = None
    desc: str | None = None
    catelogId: int | str | None = None
    sort_order: Any = None

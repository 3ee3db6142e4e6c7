"""
Admin login endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import schemas, service

router = APIRouter()


@router.post("/api/login", response_model=schemas.TokenResponse)
async def login(payload: schemas.LoginRequest) -> schemas.TokenResponse:
    return service.login(payload)

"""
FastAPI router for the site listing/creation endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import ValidationError

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter()


@router.get("/api/config")
async def list_sites(
    catalog: str | None = Query(default=None),
    catalog_id: str | None = Query(default=None, alias="catalogId"),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    keyword: str | None = Query(default=None),
) -> dict:
    """
    Page through sites joined with their category name.

    `keyword` beats `catalogId`, which beats `catalog`.
    """
    try:
        return await service.list_sites(
            catalog=catalog,
            catalog_id=catalog_id,
            page=page,
            page_size=page_size,
            keyword=keyword,
        )
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch config data: {exc}",
        ) from exc


async def _read_create_body(request: Request) -> schemas.CreateSiteRequest:
    # Parsed by hand so that require_admin runs before the body is looked at.
    try:
        raw = await request.json()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request body: not valid JSON.",
        ) from exc
    try:
        return schemas.CreateSiteRequest.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid request: {location} {first.get('msg', '')}".strip(),
        ) from exc


@router.post("/api/config", status_code=status.HTTP_201_CREATED)
async def create_site(
    request: Request,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    payload = await _read_create_body(request)
    try:
        return await service.create_site(payload)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create config: {exc}",
        ) from exc

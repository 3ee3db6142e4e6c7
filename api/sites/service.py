"""
Site listing and creation logic.

Scope:
- query-parameter parsing and filter precedence for the list endpoint
- input normalization, default logo derivation and category check on create
"""

from __future__ import annotations

import logging
import math
import os
import re
from typing import Any

from fastapi import HTTPException, status

from . import indexes, repository, schemas

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
# At or above this page size the client is fetching "everything" and the count query is skipped.
UNBOUNDED_PAGE_SIZE = 1000
DEFAULT_SORT_ORDER = 0
DEFAULT_ICON_API = "https://favicon.im/"

# Column ranges: ids, LIMIT and OFFSET are bigint, sort_order is integer.
MAX_BIGINT = 2**63 - 1
MIN_SORT_ORDER = -(2**31)
MAX_SORT_ORDER = 2**31 - 1

_SCHEME_RE = re.compile(r"^https?://")

logger = logging.getLogger(__name__)


def parse_int(raw: Any, default: int) -> int:
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        return default


def parse_id(raw: Any) -> int | None:
    """
    Accept an int or a digit string; anything else is None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text.isdigit():
        return None
    return int(text)


def id_in_range(value: int) -> bool:
    return -MAX_BIGINT - 1 <= value <= MAX_BIGINT


def normalize_sort_order(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return DEFAULT_SORT_ORDER
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return DEFAULT_SORT_ORDER
        try:
            number = float(text)
        except ValueError:
            return DEFAULT_SORT_ORDER
    if not math.isfinite(number):
        return DEFAULT_SORT_ORDER
    return max(MIN_SORT_ORDER, min(int(number), MAX_SORT_ORDER))


def sanitize_optional(value: str | None) -> str | None:
    return (value or "").strip() or None


def icon_api_override() -> str | None:
    return os.environ.get("ICON_API", "").strip() or None


def default_logo(url: str) -> str | None:
    """
    Favicon URL for the host of an http(s) `url`, or None for other schemes.

    Without an ICON_API override the public service is asked for the larger image.
    """
    if not _SCHEME_RE.match(url):
        return None
    domain = _SCHEME_RE.sub("", url).split("/")[0]
    override = icon_api_override()
    if override:
        return override + domain
    return DEFAULT_ICON_API + domain + "?larger=true"


async def list_sites(
    *,
    catalog: str | None = None,
    catalog_id: str | None = None,
    page: str | None = None,
    page_size: str | None = None,
    keyword: str | None = None,
) -> dict:
    await indexes.ensure_indexes()

    page_num = parse_int(page, DEFAULT_PAGE)
    if page_num < 1:
        page_num = DEFAULT_PAGE
    size = parse_int(page_size, DEFAULT_PAGE_SIZE)
    if size < 1:
        size = DEFAULT_PAGE_SIZE
    # LIMIT and OFFSET must both fit in a bigint.
    size = min(size, MAX_BIGINT)
    page_num = min(page_num, MAX_BIGINT // size + 1)
    offset = (page_num - 1) * size

    category_id: int | None = None
    if catalog_id and not keyword:
        category_id = parse_id(catalog_id)
        if category_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="catalogId must be an integer.",
            )
        if not id_in_range(category_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="catalogId is out of range.",
            )
    elif catalog and not keyword:
        logger.debug("list_sites catalog=%s", catalog)

    query = repository.build_list_query(
        limit=size,
        offset=offset,
        keyword=keyword or None,
        catalog_id=category_id,
        catalog=catalog or None,
    )
    rows = await repository.list_sites(query)

    if size >= UNBOUNDED_PAGE_SIZE:
        # Approximation: the caller asked for everything, so skip COUNT(*).
        total = len(rows) + offset
    else:
        total = await repository.count_sites(query)

    return {
        "code": 200,
        "data": rows,
        "total": total,
        "page": page_num,
        "pageSize": size,
    }


async def create_site(payload: schemas.CreateSiteRequest) -> dict:
    name = (payload.name or "").strip()
    url = (payload.url or "").strip()
    logo = sanitize_optional(payload.logo)
    desc = sanitize_optional(payload.desc)
    sort_order = normalize_sort_order(payload.sort_order)
    category_id = parse_id(payload.catelogId)

    if not name or not url or category_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name, URL and Catelog are required",
        )

    if logo is None:
        logo = default_logo(url)

    if not id_in_range(category_id) or not await repository.category_exists(category_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category not found.",
        )

    row = await repository.insert_site(
        name=name,
        url=url,
        logo=logo,
        desc=desc,
        catelog_id=category_id,
        sort_order=sort_order,
    )
    logger.info("site_created id=%s catelog_id=%s", row["id"], category_id)
    return {
        "code": 201,
        "message": "Config created successfully",
        "insert": {
            "success": True,
            "meta": {
                "last_row_id": int(row["id"]),
                "changes": 1,
                "create_time": row["create_time"],
            },
        },
    }

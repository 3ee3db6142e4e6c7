"""
Sites/category persistence (raw SQL).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core import db

_SELECT_SITES = """
    SELECT s.*, c.catelog
    FROM sites s
    INNER JOIN category c ON s.catelog_id = c.id
"""

_ORDER_BY = """
    ORDER BY s.sort_order ASC, s.create_time DESC
"""


@dataclass(frozen=True)
class ListQuery:
    select_sql: str
    select_args: tuple[Any, ...]
    count_sql: str
    count_args: tuple[Any, ...]


def build_list_query(
    *,
    limit: int,
    offset: int,
    keyword: str | None = None,
    catalog_id: int | None = None,
    catalog: str | None = None,
) -> ListQuery:
    """
    Build the page query and its matching count query.

    Only one filter applies: keyword, else catalog_id, else catalog name.
    """
    if keyword:
        like = f"%{keyword}%"
        where = "WHERE s.name LIKE $1 OR s.url LIKE $2 OR c.catelog LIKE $3"
        filter_args: tuple[Any, ...] = (like, like, like)
        count_sql = f"""
            SELECT COUNT(*) AS total
            FROM sites s
            INNER JOIN category c ON s.catelog_id = c.id
            {where}
        """
    elif catalog_id is not None:
        where = "WHERE s.catelog_id = $1"
        filter_args = (catalog_id,)
        count_sql = "SELECT COUNT(*) AS total FROM sites WHERE catelog_id = $1"
    elif catalog:
        where = "WHERE c.catelog = $1"
        filter_args = (catalog,)
        count_sql = f"""
            SELECT COUNT(*) AS total
            FROM sites s
            INNER JOIN category c ON s.catelog_id = c.id
            {where}
        """
    else:
        where = ""
        filter_args = ()
        count_sql = "SELECT COUNT(*) AS total FROM sites"

    n = len(filter_args)
    select_sql = f"{_SELECT_SITES} {where} {_ORDER_BY} LIMIT ${n + 1} OFFSET ${n + 2}"
    return ListQuery(
        select_sql=select_sql,
        select_args=filter_args + (limit, offset),
        count_sql=count_sql,
        count_args=filter_args,
    )


async def list_sites(query: ListQuery) -> list[dict[str, Any]]:
    return await db.fetch_all(query.select_sql, *query.select_args)


async def count_sites(query: ListQuery) -> int:
    row = await db.fetch_one(query.count_sql, *query.count_args)
    return int((row or {}).get("total", 0))


async def category_exists(category_id: int) -> bool:
    row = await db.fetch_one(
        """
        SELECT catelog
        FROM category
        WHERE id = $1
        """,
        category_id,
    )
    return row is not None


async def insert_site(
    *,
    name: str,
    url: str,
    logo: str | None,
    desc: str | None,
    catelog_id: int,
    sort_order: int,
) -> dict[str, Any]:
    """
    Insert a site; the store assigns `id` and `create_time`.
    """
    row = await db.fetch_one(
        """
        INSERT INTO sites (name, url, logo, "desc", catelog_id, sort_order)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING id, create_time
        """,
        name,
        url,
        logo,
        desc,
        catelog_id,
        sort_order,
    )
    if row is None:
        raise RuntimeError("Failed to insert site.")
    return row

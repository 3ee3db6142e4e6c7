"""
Best-effort secondary indexes for the listing query.

Runs at most once successfully per process. Concurrent first requests may
both issue the batch; `CREATE INDEX IF NOT EXISTS` makes that harmless.
"""

from __future__ import annotations

import logging

from core import db

logger = logging.getLogger(__name__)

INDEX_STATEMENTS = [
    "CREATE INDEX IF NOT EXISTS idx_sites_catelog_id ON sites(catelog_id)",
    "CREATE INDEX IF NOT EXISTS idx_sites_sort_order ON sites(sort_order)",
]

_checked = False


def is_checked() -> bool:
    return _checked


def reset() -> None:
    global _checked
    _checked = False


async def ensure_indexes() -> None:
    """
    Create the listing indexes if missing. Never raises.
    """
    global _checked
    if _checked:
        return None
    try:
        await db.execute_batch(INDEX_STATEMENTS)
    except Exception:
        # Listing still works without the indexes, just slower.
        logger.exception("ensure_indexes_failed")
        return None
    _checked = True
    logger.info("ensure_indexes_complete count=%s", len(INDEX_STATEMENTS))

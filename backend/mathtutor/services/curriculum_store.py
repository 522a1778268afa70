"""Curriculum Store — read access to the curriculum document with an in-process cache.

Invariants:
    - Missing row or non-list data reads as an empty curriculum
    - Cached levels are reused for cache_seconds, then re-read

Design Decisions:
    - Module-level cache: single-process uvicorn; staleness bounded by cache_seconds
    - Read-only: curriculum editing lives outside this service
"""

import logging
import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mathtutor.infrastructure.database import translate_db_errors
from mathtutor.models.curriculum_document import CURRICULUM_ROW_ID, CurriculumDocument

logger = logging.getLogger(__name__)

# (levels, loaded_at monotonic seconds)
_cache: dict[str, tuple[list[dict], float]] = {}
_CACHE_KEY = "levels"


def invalidate_curriculum_cache() -> None:
    _cache.pop(_CACHE_KEY, None)
    logger.info("Curriculum cache invalidated")


class CurriculumStore:
    """CurriculumReader over an AsyncSession."""

    def __init__(self, db: AsyncSession, cache_seconds: int = 60):
        self.db = db
        self.cache_seconds = cache_seconds

    async def get_levels(self) -> list[dict]:
        cached = _cache.get(_CACHE_KEY)
        if cached and time.monotonic() - cached[1] < self.cache_seconds:
            return cached[0]

        async with translate_db_errors(self.db, "select"):
            result = await self.db.execute(
                select(CurriculumDocument.data).where(
                    CurriculumDocument.id == CURRICULUM_ROW_ID,
                ),
            )
        data = result.scalar_one_or_none()
        levels = data if isinstance(data, list) else []
        _cache[_CACHE_KEY] = (levels, time.monotonic())
        return levels

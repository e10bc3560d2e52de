from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from gallery_quest.core.logging import get_logger
from gallery_quest.core.metrics import GALLERY_INVALIDATIONS_TOTAL
from gallery_quest.db.versions import VersionStore

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CacheInvalidationPolicy:
    """Invalidates cached pages of a gallery by bumping its version counter.

    Old entries are never deleted; their keys stop being computed and they
    expire on their own. Callers that change an image list pass their session
    so the list and the counter commit together.
    """

    versions: VersionStore

    async def on_gallery_changed(self, gallery_id: int, *, session: AsyncSession | None = None) -> int:
        version = await self.versions.atomic_increment(int(gallery_id), session=session)
        GALLERY_INVALIDATIONS_TOTAL.inc()
        log.info("gallery_invalidated gallery_id=%s version=%s", int(gallery_id), version)
        return version

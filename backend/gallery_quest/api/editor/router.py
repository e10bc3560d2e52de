from __future__ import annotations

from fastapi import APIRouter

from gallery_quest.api.editor.auth import router as auth_router
from gallery_quest.api.editor.galleries import router as galleries_router
from gallery_quest.api.editor.images import router as images_router
from gallery_quest.api.editor.maintenance import router as maintenance_router
from gallery_quest.api.editor.tags import router as tags_router

router = APIRouter(prefix="/editor/api")
router.include_router(auth_router)
router.include_router(galleries_router)
router.include_router(images_router)
router.include_router(maintenance_router)
router.include_router(tags_router)

from __future__ import annotations

from fastapi import APIRouter

from themekit.api.routers import settings, theme

router = APIRouter(prefix="/api/v1")
router.include_router(theme.router)
router.include_router(settings.router)

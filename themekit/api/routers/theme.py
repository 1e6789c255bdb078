from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from themekit.api.deps import get_settings_store, get_theme_resolver
from themekit.api.responses import success_payload
from themekit.api.schemas import InstalledThemesEnvelope, ThemeEnvelope
from themekit.services.user_settings import SqlSettingsStore
from themekit.themes.context import StarletteRequestContext
from themekit.themes.resolver import ThemeResolver

router = APIRouter(tags=["api-theme"])

# Plain `def` handlers: the resolver and the settings store are synchronous,
# so FastAPI runs them in its threadpool.


@router.get("/theme", response_model=ThemeEnvelope)
def get_theme(
    request: Request,
    resolver: ThemeResolver = Depends(get_theme_resolver),
):
    theme_id = resolver.resolve(StarletteRequestContext(request))
    return success_payload(request, data={"theme_id": theme_id})


@router.put("/theme", status_code=204)
def set_theme(
    request: Request,
    response: Response,
    resolver: ThemeResolver = Depends(get_theme_resolver),
):
    # No body model: every request must reach the resolver and be refused there.
    resolver.set_theme_name(StarletteRequestContext(request), response, None)


@router.get("/themes", response_model=InstalledThemesEnvelope)
def list_themes(
    request: Request,
    store: SqlSettingsStore = Depends(get_settings_store),
):
    themes = [{"id": theme.id, "name": theme.name} for theme in store.available_themes()]
    return success_payload(request, data={"themes": themes})

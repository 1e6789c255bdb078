from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from themekit.api.deps import (
    get_api_admin_user,
    get_api_current_user,
    get_settings_store,
)
from themekit.api.errors import ApiException
from themekit.api.responses import success_payload
from themekit.api.schemas import ThemeSettingEnvelope, ThemeUpdateRequest
from themekit.auth.session import SessionUser
from themekit.services import user_settings as user_settings_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["api-settings"])


def _invalid_settings(exc: user_settings_service.UserSettingsServiceError) -> ApiException:
    return ApiException(
        status_code=400,
        code="invalid_settings",
        message=str(exc),
    )


@router.get("/theme", response_model=ThemeSettingEnvelope)
def get_theme_setting(
    request: Request,
    current_user: SessionUser = Depends(get_api_current_user),
    store: user_settings_service.SqlSettingsStore = Depends(get_settings_store),
):
    return success_payload(
        request,
        data={"theme_id": store.user_preference(current_user.id)},
    )


@router.put("/theme", response_model=ThemeSettingEnvelope)
def update_theme_setting(
    payload: ThemeUpdateRequest,
    request: Request,
    current_user: SessionUser = Depends(get_api_current_user),
    store: user_settings_service.SqlSettingsStore = Depends(get_settings_store),
):
    try:
        theme_id = store.update_user_theme(current_user.id, payload.theme_id)
    except user_settings_service.UserSettingsServiceError as exc:
        raise _invalid_settings(exc) from exc
    return success_payload(request, data={"theme_id": theme_id})


@router.put("/system-theme", response_model=ThemeSettingEnvelope)
def update_system_theme_setting(
    payload: ThemeUpdateRequest,
    request: Request,
    admin_user: SessionUser = Depends(get_api_admin_user),
    store: user_settings_service.SqlSettingsStore = Depends(get_settings_store),
):
    try:
        theme_id = store.update_system_theme(payload.theme_id)
    except user_settings_service.UserSettingsServiceError as exc:
        raise _invalid_settings(exc) from exc
    logger.info(
        "api.settings.system_theme_updated",
        extra={
            "event": "api.settings.system_theme_updated",
            "user_id": admin_user.id,
            "theme_id": theme_id,
        },
    )
    return success_payload(request, data={"theme_id": theme_id})

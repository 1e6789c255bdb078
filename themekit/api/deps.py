from __future__ import annotations

from fastapi import Depends, Request

from themekit.api.errors import ApiException
from themekit.auth.session import SessionUser, get_session_user
from themekit.services.user_settings import SqlSettingsStore
from themekit.themes.resolver import ThemeResolver


def get_theme_resolver(request: Request) -> ThemeResolver:
    return request.app.state.theme_resolver


def get_settings_store(request: Request) -> SqlSettingsStore:
    return request.app.state.settings_store


def get_api_current_user(request: Request) -> SessionUser:
    current_user = get_session_user(request)
    if current_user is None:
        raise ApiException(
            status_code=401,
            code="auth_required",
            message="Authentication required.",
        )
    return current_user


def get_api_admin_user(
    current_user: SessionUser = Depends(get_api_current_user),
) -> SessionUser:
    if not current_user.is_admin:
        raise ApiException(
            status_code=403,
            code="forbidden",
            message="Admin access required.",
        )
    return current_user

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from themekit.db.models import SYSTEM_THEME_KEY, InstalledTheme, SystemSetting, UserSetting
from themekit.theme import FALLBACK_THEME, MAX_THEME_ID_LENGTH, ThemeDefinition

logger = logging.getLogger(__name__)


class UserSettingsServiceError(ValueError):
    """Raised for expected settings-validation failures."""


def parse_theme_id(value: str | None) -> str | None:
    if value is None:
        return None
    parsed = value.strip()
    if not parsed:
        return None
    if len(parsed) > MAX_THEME_ID_LENGTH:
        raise UserSettingsServiceError(
            f"Theme id must be at most {MAX_THEME_ID_LENGTH} characters."
        )
    return parsed


class SqlSettingsStore:
    """Theme settings persisted in the application database.

    Each call opens its own short-lived session, so one store can be shared
    by every request thread.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        default_theme: str = FALLBACK_THEME,
    ) -> None:
        self._session_factory = session_factory
        self._default_theme = default_theme

    def user_preference(self, principal_id: int) -> str | None:
        with self._session_factory() as session:
            user_settings = session.get(UserSetting, principal_id)
            if user_settings is None:
                return None
            return user_settings.theme_id

    def system_default_theme(self) -> str:
        with self._session_factory() as session:
            system_setting = session.get(SystemSetting, SYSTEM_THEME_KEY)
            if system_setting is None:
                return self._default_theme
            return system_setting.value

    def available_themes(self) -> list[ThemeDefinition]:
        with self._session_factory() as session:
            result = session.scalars(select(InstalledTheme).order_by(InstalledTheme.id))
            return [ThemeDefinition(id=row.id, name=row.name) for row in result]

    def update_user_theme(self, principal_id: int, theme_id: str | None) -> str | None:
        parsed = parse_theme_id(theme_id)
        with self._session_factory() as session:
            if parsed is not None:
                self._require_installed(session, parsed)
            user_settings = session.get(UserSetting, principal_id)
            if user_settings is None:
                user_settings = UserSetting(user_id=principal_id)
                session.add(user_settings)
            user_settings.theme_id = parsed
            session.commit()
        logger.info(
            "settings.theme_updated",
            extra={
                "event": "settings.theme_updated",
                "user_id": principal_id,
                "theme_id": parsed,
            },
        )
        return parsed

    def update_system_theme(self, theme_id: str | None) -> str:
        parsed = parse_theme_id(theme_id)
        if parsed is None:
            raise UserSettingsServiceError("System theme is required.")
        with self._session_factory() as session:
            self._require_installed(session, parsed)
            system_setting = session.get(SystemSetting, SYSTEM_THEME_KEY)
            if system_setting is None:
                session.add(SystemSetting(key=SYSTEM_THEME_KEY, value=parsed))
            else:
                system_setting.value = parsed
            session.commit()
        logger.info(
            "settings.system_theme_updated",
            extra={"event": "settings.system_theme_updated", "theme_id": parsed},
        )
        return parsed

    @staticmethod
    def _require_installed(session: Session, theme_id: str) -> None:
        if session.get(InstalledTheme, theme_id) is None:
            raise UserSettingsServiceError(f"Theme '{theme_id}' is not installed.")

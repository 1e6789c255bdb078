"""Request-scoped theme resolution.

The active theme is chosen from the current user's saved preference, then
the system-wide default, then the bundled fallback. Each candidate must be
an installed theme. The set of installed ids is loaded once, on first use,
and reused for the lifetime of the resolver.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
import logging
import threading
from typing import Any, Protocol

from themekit.theme import FALLBACK_THEME

THEME_ATTRIBUTE = "themekit_theme"

logger = logging.getLogger(__name__)


class UnsupportedThemeOperationError(RuntimeError):
    """Raised when a caller tries to change the theme through the resolver."""


class RequestContext(Protocol):
    def get_attribute(self, key: str) -> Any: ...

    def set_attribute(self, key: str, value: Any) -> None: ...


class ThemeEntry(Protocol):
    @property
    def id(self) -> str: ...


class IdentityLookup(Protocol):
    def current_principal(self, context: RequestContext) -> Hashable | None: ...


class SettingsStore(Protocol):
    def user_preference(self, principal_id: Hashable) -> str | None: ...

    def system_default_theme(self) -> str | None: ...

    def available_themes(self) -> Iterable[ThemeEntry]: ...


class ThemeResolver:
    """Resolves the theme for a request from the user and system settings.

    Safe to share between threads. The memoized value on each request
    context is not guarded, as a context belongs to a single request flow.
    """

    def __init__(self, *, identity: IdentityLookup, settings: SettingsStore) -> None:
        self._identity = identity
        self._settings = settings
        self._theme_ids: frozenset[str] | None = None
        self._lock = threading.Lock()

    def resolve(self, context: RequestContext) -> str:
        theme_id = context.get_attribute(THEME_ATTRIBUTE)
        if theme_id is not None:
            return theme_id

        theme_id = self._resolve_uncached(context)
        context.set_attribute(THEME_ATTRIBUTE, theme_id)
        return theme_id

    def set_theme_name(
        self,
        context: RequestContext,
        response: Any,
        theme_id: str | None,
    ) -> None:
        raise UnsupportedThemeOperationError(
            "Cannot change theme - use a different theme resolution strategy"
        )

    def theme_exists(self, theme_id: str | None) -> bool:
        theme_ids = self._theme_ids
        if theme_ids is None:
            theme_ids = self._load_theme_ids()
        return theme_id in theme_ids

    def _resolve_uncached(self, context: RequestContext) -> str:
        preferred: str | None = None
        principal_id = self._identity.current_principal(context)
        if principal_id is not None:
            preferred = self._settings.user_preference(principal_id)

        if preferred is not None and self.theme_exists(preferred):
            return preferred

        system_theme = self._settings.system_default_theme()
        if self.theme_exists(system_theme):
            return system_theme

        logger.debug(
            "theme.fallback_applied",
            extra={
                "event": "theme.fallback_applied",
                "preferred_theme": preferred,
                "system_theme": system_theme,
            },
        )
        return FALLBACK_THEME

    def _load_theme_ids(self) -> frozenset[str]:
        with self._lock:
            if self._theme_ids is None:
                theme_ids = frozenset(
                    theme.id for theme in self._settings.available_themes()
                )
                logger.info(
                    "theme.catalog_loaded",
                    extra={
                        "event": "theme.catalog_loaded",
                        "theme_count": len(theme_ids),
                    },
                )
                self._theme_ids = theme_ids
            return self._theme_ids

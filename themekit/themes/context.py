from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from starlette.requests import Request

from themekit.auth.session import get_session_user


@dataclass(frozen=True)
class StarletteRequestContext:
    """Exposes a Starlette request to the theme resolver."""

    request: Request

    def get_attribute(self, key: str) -> Any:
        return getattr(self.request.state, key, None)

    def set_attribute(self, key: str, value: Any) -> None:
        setattr(self.request.state, key, value)


class SessionIdentityLookup:
    def current_principal(self, context: StarletteRequestContext) -> int | None:
        session_user = get_session_user(context.request)
        if session_user is None:
            return None
        return session_user.id

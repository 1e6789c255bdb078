"""Signed-session identity.

themekit does not authenticate anyone itself. The login layer in front of it
shares `SESSION_SECRET_KEY` and records the signed-in user with
`set_session_user`; logout goes through `clear_session_user`. Every request
after that is identified from the `session` cookie decoded by Starlette's
`SessionMiddleware`.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from starlette.requests import Request

SESSION_USER_KEY = "session_user"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    id: int
    email: str
    is_admin: bool = False


def get_session_user(request: Request) -> SessionUser | None:
    payload = request.session.get(SESSION_USER_KEY)
    if not isinstance(payload, dict):
        return None
    try:
        return SessionUser(
            id=int(payload["id"]),
            email=str(payload["email"]),
            is_admin=bool(payload.get("is_admin", False)),
        )
    except (KeyError, TypeError, ValueError):
        logger.info(
            "auth.session_payload_invalid",
            extra={"event": "auth.session_payload_invalid"},
        )
        return None


def set_session_user(
    request: Request,
    *,
    user_id: int,
    email: str,
    is_admin: bool,
) -> None:
    request.session[SESSION_USER_KEY] = {
        "id": user_id,
        "email": email,
        "is_admin": is_admin,
    }


def clear_session_user(request: Request) -> None:
    request.session.pop(SESSION_USER_KEY, None)

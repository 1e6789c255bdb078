from __future__ import annotations

from secrets import token_urlsafe
import logging
import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from themekit.logging_context import set_request_id
from themekit.themes.resolver import THEME_ATTRIBUTE

REQUEST_ID_HEADER = "X-Request-ID"
THEME_HEADER = "X-Theme-ID"

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs it with the theme it resolved.

    The theme is only known when a handler asked the resolver for it; it is
    then echoed back in `X-Theme-ID`.
    """

    def __init__(
        self,
        app,
        *,
        log_requests: bool = True,
        skip_paths: tuple[str, ...] = (),
    ) -> None:
        super().__init__(app)
        self._log_requests = log_requests
        self._skip_paths = tuple(path for path in skip_paths if path)

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or token_urlsafe(12)
        request.state.request_id = request_id
        set_request_id(request_id)
        started_at = time.perf_counter()
        should_log = self._should_log(request)

        if should_log:
            self._log(logging.INFO, "request.started", request)
        try:
            response = await call_next(request)
        except Exception:
            self._log(
                logging.ERROR,
                "request.failed",
                request,
                started_at=started_at,
                exc_info=True,
            )
            raise
        else:
            response.headers[REQUEST_ID_HEADER] = request_id
            theme_id = _resolved_theme(request)
            if theme_id is not None:
                response.headers[THEME_HEADER] = theme_id
            if should_log:
                self._log(
                    logging.INFO,
                    "request.completed",
                    request,
                    started_at=started_at,
                    status_code=response.status_code,
                )
            return response
        finally:
            set_request_id(None)

    def _should_log(self, request: Request) -> bool:
        if not self._log_requests:
            return False
        return not any(request.url.path.startswith(prefix) for prefix in self._skip_paths)

    @staticmethod
    def _log(
        level: int,
        event: str,
        request: Request,
        *,
        started_at: float | None = None,
        exc_info: bool = False,
        **fields: Any,
    ) -> None:
        extra: dict[str, Any] = {
            "event": event,
            "method": request.method,
            "path": request.url.path,
            **fields,
        }
        if started_at is not None:
            extra["duration_ms"] = int((time.perf_counter() - started_at) * 1000)
            extra["theme_id"] = _resolved_theme(request)
        logger.log(level, event, extra=extra, exc_info=exc_info)


def _resolved_theme(request: Request) -> str | None:
    return getattr(request.state, THEME_ATTRIBUTE, None)


def parse_skip_paths(raw_value: str) -> tuple[str, ...]:
    parts = [part.strip() for part in raw_value.split(",")]
    return tuple(part for part in parts if part)

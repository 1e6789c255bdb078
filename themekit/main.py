from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from starlette.middleware.sessions import SessionMiddleware

from themekit.api.errors import register_api_exception_handlers
from themekit.api.router import router as api_router
from themekit.db.session import check_database, close_engine, get_session_factory, init_schema
from themekit.http.middleware import RequestLoggingMiddleware, parse_skip_paths
from themekit.logging_config import configure_logging, parse_redact_fields
from themekit.services.user_settings import SqlSettingsStore
from themekit.settings import settings
from themekit.themes.context import SessionIdentityLookup
from themekit.themes.resolver import ThemeResolver

configure_logging(
    level=settings.log_level,
    log_format=settings.log_format,
    redact_fields=parse_redact_fields(settings.log_redact_fields),
    include_uvicorn_access=settings.log_uvicorn_access,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_schema(default_theme=settings.default_theme)
    settings_store = SqlSettingsStore(
        get_session_factory(),
        default_theme=settings.default_theme,
    )
    app.state.settings_store = settings_store
    app.state.theme_resolver = ThemeResolver(
        identity=SessionIdentityLookup(),
        settings=settings_store,
    )
    yield
    close_engine()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
register_api_exception_handlers(app)
# Sessions are written by the upstream login layer; see themekit.auth.session.
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    max_age=settings.session_max_age_seconds,
    same_site="lax",
    https_only=settings.session_cookie_secure,
)
app.add_middleware(
    RequestLoggingMiddleware,
    log_requests=settings.log_requests,
    skip_paths=parse_skip_paths(settings.log_request_skip_paths),
)
app.include_router(api_router)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    if check_database():
        return {"status": "ok"}
    raise HTTPException(status_code=500, detail="database unavailable")

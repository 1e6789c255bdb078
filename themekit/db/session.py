import logging

from sqlalchemy import Engine, create_engine, func, select, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from themekit.db.models import SYSTEM_THEME_KEY, Base, InstalledTheme, SystemSetting
from themekit.settings import settings
from themekit.theme import BUNDLED_THEMES

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _engine_options(database_url: str) -> dict[str, object]:
    if not database_url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options: dict[str, object] = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in database_url or database_url.endswith("://"):
        # In-memory databases vanish with their connection; share a single one.
        options["poolclass"] = StaticPool
    return options


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.database_url,
            echo=settings.database_echo,
            **_engine_options(settings.database_url),
        )
        logger.info("db.engine_initialized", extra={"event": "db.engine_initialized"})
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


def init_schema(*, default_theme: str) -> None:
    Base.metadata.create_all(get_engine())
    with get_session_factory()() as session:
        if session.scalar(select(func.count()).select_from(InstalledTheme)) == 0:
            session.add_all(
                [InstalledTheme(id=theme.id, name=theme.name) for theme in BUNDLED_THEMES]
            )
        if session.get(SystemSetting, SYSTEM_THEME_KEY) is None:
            session.add(SystemSetting(key=SYSTEM_THEME_KEY, value=default_theme))
        session.commit()
    logger.info(
        "db.schema_ready",
        extra={"event": "db.schema_ready", "default_theme": default_theme},
    )


def check_database() -> bool:
    engine = get_engine()
    try:
        with engine.connect() as conn:
            result = conn.execute(text("SELECT 1"))
            return result.scalar_one() == 1
    except Exception:
        logger.exception("db.healthcheck_failed", extra={"event": "db.healthcheck_failed"})
        return False


def close_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
        logger.info("db.engine_disposed", extra={"event": "db.engine_disposed"})
        _engine = None
        _session_factory = None

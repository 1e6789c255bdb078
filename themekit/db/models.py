from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from themekit.theme import MAX_THEME_ID_LENGTH

SYSTEM_THEME_KEY = "theme_id"


class Base(DeclarativeBase):
    pass


class UserSetting(Base):
    __tablename__ = "user_settings"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    theme_id: Mapped[str | None] = mapped_column(String(MAX_THEME_ID_LENGTH), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class SystemSetting(Base):
    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(String(255))


class InstalledTheme(Base):
    __tablename__ = "installed_themes"

    id: Mapped[str] = mapped_column(String(MAX_THEME_ID_LENGTH), primary_key=True)
    name: Mapped[str] = mapped_column(String(128))

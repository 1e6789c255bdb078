from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ResponseMeta(BaseModel):
    request_id: str | None = None


class ThemeData(BaseModel):
    theme_id: str


class ThemeEnvelope(BaseModel):
    data: ThemeData
    meta: ResponseMeta


class InstalledThemeItem(BaseModel):
    id: str
    name: str


class InstalledThemesData(BaseModel):
    themes: list[InstalledThemeItem]


class InstalledThemesEnvelope(BaseModel):
    data: InstalledThemesData
    meta: ResponseMeta


class ThemeSettingData(BaseModel):
    theme_id: str | None


class ThemeSettingEnvelope(BaseModel):
    data: ThemeSettingData
    meta: ResponseMeta


class ThemeUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    theme_id: str | None = None

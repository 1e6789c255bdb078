from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class ThemeDefinition:
    id: str
    name: str


BUNDLED_THEMES: Final[tuple[ThemeDefinition, ...]] = (
    ThemeDefinition(id="default", name="Default"),
    ThemeDefinition(id="dark", name="Dark"),
    ThemeDefinition(id="midnight", name="Midnight"),
)
FALLBACK_THEME: Final[str] = "default"
MAX_THEME_ID_LENGTH: Final[int] = 64

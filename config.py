import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DATA_DIR = Path(__file__).parent / "data"
OUTPUT_DIR = Path(__file__).parent / "output"

DEFAULT_GROUP_SIZE = 4
DRAW_TICKS = 20
DRAW_INTERVAL_MS = 100

SUPPORTED_LOCALES = ("en", "ko", "zh-TW")

# 샘플 명단
SAMPLE_NAMES = [
    "김민준", "이서연", "박지호", "최수아", "정예준", "강하은",
    "조도윤", "윤지우", "장시우", "임서윤", "한주원", "오채원",
]


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    model: str = "gpt-4o-mini"
    base_url: Optional[str] = None
    locale: str = "en"
    timeout: float = 20.0

    @property
    def naming_enabled(self) -> bool:
        return bool(self.api_key)


def load_settings() -> Settings:
    locale = os.getenv("HR_DRAW_LOCALE", "en").strip() or "en"
    if locale not in SUPPORTED_LOCALES:
        locale = "en"
    try:
        timeout = float(os.getenv("HR_DRAW_TIMEOUT", "20") or 20)
    except ValueError:
        timeout = 20.0
    return Settings(
        api_key=os.getenv("OPENAI_API_KEY", "").strip(),
        model=os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini",
        base_url=os.getenv("OPENAI_BASE_URL", "").strip() or None,
        locale=locale,
        timeout=timeout,
    )

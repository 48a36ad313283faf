"""Team-name and congratulation text from a chat-completion model.

Every public call degrades to a deterministic local value on a missing key,
a transport error or an unusable response. Nothing here raises to the caller.
"""

import json
import logging
from typing import Any, List, Optional

from openai import OpenAI

from config import Settings, load_settings
from messages import message

log = logging.getLogger("hr_draw.naming")

TEAM_NAMES_PROMPT = (
    "Generate {count} creative, professional, and fun corporate team names. "
    "Return only a JSON array of strings."
)
CONGRATS_PROMPT = (
    'Write a short, warm and humorous congratulation for the employee "{name}" '
    "who just won the grand prize. Keep it under 30 words. Reply in {language}."
)
LANGUAGES = {"en": "English", "ko": "Korean", "zh-TW": "Traditional Chinese"}


def fallback_team_names(count: int, locale: str = "en") -> List[str]:
    return [message("group_fallback", locale, index=i + 1) for i in range(max(0, count))]


def fallback_congratulation(name: str, locale: str = "en") -> str:
    return message("congrats_fallback", locale, name=name)


def parse_json_from_text(text: str) -> Optional[Any]:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = []
        for line in cleaned.splitlines():
            if line.strip().startswith("```"):
                continue
            lines.append(line)
        cleaned = "\n".join(lines).strip()
    starts = [cleaned.find("["), cleaned.find("{")]
    starts = [idx for idx in starts if idx != -1]
    if starts:
        cleaned = cleaned[min(starts):]
    end_idx = max(cleaned.rfind("]"), cleaned.rfind("}"))
    if end_idx != -1:
        cleaned = cleaned[: end_idx + 1]
    try:
        return json.loads(cleaned)
    except ValueError:
        return None


class NamingClient:
    def __init__(self, settings: Optional[Settings] = None, client: Any = None) -> None:
        self.settings = settings or load_settings()
        self._client = client

    @property
    def available(self) -> bool:
        return self._client is not None or self.settings.naming_enabled

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = OpenAI(
                api_key=self.settings.api_key,
                base_url=self.settings.base_url,
                timeout=self.settings.timeout,
            )
        return self._client

    def _complete(self, prompt: str, temperature: float) -> str:
        resp = self._get_client().chat.completions.create(
            model=self.settings.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
        )
        return (resp.choices[0].message.content or "").strip()

    def generate_team_names(self, count: int, locale: Optional[str] = None) -> List[str]:
        locale = locale or self.settings.locale
        if count <= 0:
            return []
        fallback = fallback_team_names(count, locale)
        if not self.available:
            return fallback
        try:
            content = self._complete(TEAM_NAMES_PROMPT.format(count=count), temperature=0.9)
        except Exception as exc:
            log.warning("team name request failed: %s", exc)
            return fallback
        parsed = parse_json_from_text(content)
        if not isinstance(parsed, list):
            log.warning("team name response is not a JSON array: %r", content[:200])
            return fallback
        # 자리를 유지해야 빈 항목이 같은 위치의 기본 이름으로 채워진다
        names = [item.strip() if isinstance(item, str) else "" for item in parsed][:count]
        if not any(names):
            return fallback
        return names

    def generate_congratulation(self, name: str, locale: Optional[str] = None) -> str:
        locale = locale or self.settings.locale
        fallback = fallback_congratulation(name, locale)
        if not self.available:
            return fallback
        prompt = CONGRATS_PROMPT.format(name=name, language=LANGUAGES.get(locale, "English"))
        try:
            content = self._complete(prompt, temperature=0.8)
        except Exception as exc:
            log.warning("congratulation request failed: %s", exc)
            return fallback
        return content or fallback

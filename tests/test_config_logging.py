import logging

from config import load_settings
from logging_config import setup_logging
from messages import message


def test_load_settings(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", " abc123 ")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-test")
    monkeypatch.setenv("HR_DRAW_LOCALE", "zh-TW")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    s = load_settings()
    assert s.api_key == "abc123"
    assert s.model == "gpt-test"
    assert s.base_url is None
    assert s.locale == "zh-TW"
    assert s.naming_enabled


def test_load_settings_defaults(monkeypatch):
    for key in ["OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_BASE_URL", "HR_DRAW_TIMEOUT"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HR_DRAW_LOCALE", "xx")
    s = load_settings()
    assert s.api_key == ""
    assert s.model == "gpt-4o-mini"
    assert s.locale == "en"
    assert s.timeout == 20.0
    assert not s.naming_enabled


def test_setup_logging_idempotent():
    logger1 = setup_logging(logging.DEBUG)
    logger2 = setup_logging(logging.DEBUG)
    assert logger1 is logger2
    assert logger1.handlers


def test_message_falls_back_to_english():
    assert message("group_fallback", "fr", index=2) == "Group 2"
    assert message("group_fallback", "ko", index=2) == "2조"

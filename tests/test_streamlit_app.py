from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP_PATH = str(Path(__file__).resolve().parent.parent / "streamlit_app.py")


@pytest.fixture
def app(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    at = AppTest.from_file(APP_PATH, default_timeout=30)
    at.run()
    assert not at.exception
    return at


def engine_allow_repeat(at):
    return at.session_state["draw_engine"].state.allow_repeat


def test_repeat_checkbox_survives_clearing_the_roster(app):
    app.button(key="sample_roster").click().run()
    app.checkbox(key="allow_repeat").check().run()
    assert engine_allow_repeat(app) is True

    app.button(key="clear_roster").click().run()
    app.button(key="sample_roster").click().run()
    assert app.checkbox(key="allow_repeat").value is True
    assert engine_allow_repeat(app) is True

    app.checkbox(key="allow_repeat").uncheck().run()
    assert engine_allow_repeat(app) is False


def test_repeat_checkbox_and_engine_agree_on_empty_roster(app):
    app.checkbox(key="allow_repeat").check().run()
    app.button(key="sample_roster").click().run()
    assert app.checkbox(key="allow_repeat").value is True
    assert engine_allow_repeat(app) is True


def test_ai_names_checkbox_survives_clearing_the_roster(app):
    app.button(key="sample_roster").click().run()
    app.checkbox(key="use_ai_names").check().run()
    app.button(key="clear_roster").click().run()
    app.button(key="sample_roster").click().run()
    assert app.checkbox(key="use_ai_names").value is True

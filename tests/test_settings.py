import os

import pytest

from eventbook.config.settings import load_settings
from eventbook.core import env
from eventbook.core.logging import build_logging_config


def test_packaged_defaults_load():
    settings = load_settings()
    assert settings.app.name == "EventBook"
    assert settings.scheduling.dedupe_dates is False
    assert settings.auth.jwt_algorithm == "HS256"


def test_env_overrides_are_applied(monkeypatch):
    monkeypatch.setenv("EVENTBOOK_JWT_SECRET", "from-env")
    monkeypatch.setenv("EVENTBOOK_LOG_LEVEL", "debug")
    monkeypatch.setenv("EVENTBOOK_DATA_DIR", "/tmp/eventbook-data")

    settings = load_settings()

    assert settings.auth.jwt_secret == "from-env"
    assert settings.app.log_level == "debug"
    assert settings.storage.dir == "/tmp/eventbook-data"


def test_external_config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("EVENTBOOK_JWT_SECRET", raising=False)
    path = tmp_path / "eventbook.yaml"
    path.write_text("scheduling:\n  dedupe_dates: true\napp:\n  timezone: Asia/Taipei\n", encoding="utf-8")

    settings = load_settings(path)

    assert settings.scheduling.dedupe_dates is True
    assert settings.app.timezone == "Asia/Taipei"
    # Sections missing from the file fall back to model defaults.
    assert settings.auth.token_ttl_seconds == 3600


@pytest.fixture
def project_root(tmp_path, monkeypatch):
    monkeypatch.setenv("EVENTBOOK_PROJECT_ROOT", str(tmp_path))
    env.get_project_root.cache_clear()
    env.load_dotenv_if_present.cache_clear()
    yield tmp_path
    env.get_project_root.cache_clear()
    env.load_dotenv_if_present.cache_clear()


def test_relative_paths_resolve_against_project_root(project_root):
    assert env.resolve_project_path(".data/eventbook") == project_root.resolve() / ".data" / "eventbook"
    assert env.resolve_project_path(project_root / "x") == project_root / "x"


def test_dotenv_does_not_override_existing_env(project_root, monkeypatch):
    (project_root / ".env").write_text("EVENTBOOK_DOTENV_MARKER=loaded\nEVENTBOOK_LOG_LEVEL=DEBUG\n", encoding="utf-8")
    monkeypatch.setenv("EVENTBOOK_LOG_LEVEL", "WARNING")

    try:
        assert env.load_dotenv_if_present() == project_root.resolve() / ".env"
        assert os.environ["EVENTBOOK_DOTENV_MARKER"] == "loaded"
        assert os.environ["EVENTBOOK_LOG_LEVEL"] == "WARNING"
    finally:
        os.environ.pop("EVENTBOOK_DOTENV_MARKER", None)


def test_logging_level_follows_settings_unless_overridden():
    settings = load_settings().model_copy(deep=True)
    settings.app.log_level = "warning"

    config = build_logging_config(settings)
    assert config["root"]["level"] == "WARNING"
    assert config["handlers"]["console"]["level"] == "WARNING"

    assert build_logging_config(settings, level="debug")["root"]["level"] == "DEBUG"

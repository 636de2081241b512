"""Layered settings tests."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from worklog.config import settings as settings_module
from worklog.config.settings import ConfigFileError, ConfigService


@pytest.fixture
def service(tmp_path, monkeypatch):
    """Config service isolated from the user's home and working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "USER_CONFIG_PATH", tmp_path / "absent.yaml")
    for name in ("WORKLOG_API__BASE_URL", "WORKLOG_TIMER__TICK_INTERVAL", "WORKLOG_GENERAL__VERBOSITY"):
        monkeypatch.delenv(name, raising=False)
    return ConfigService()


@pytest.fixture
def config_file(tmp_path) -> Path:
    path = tmp_path / "custom.yaml"
    path.write_text(
        "api:\n"
        "  base_url: http://file.test/api/v1/\n"
        "  user_id: 5\n"
        "timer:\n"
        "  reconcile_interval: 30\n"
        "  state_file: ~/timer.json\n"
    )
    return path


class TestSettingsLayers:
    """Overrides > environment > file > defaults."""

    def test_defaults(self, service):
        settings = service.load()

        assert settings.api.base_url == "http://localhost:5000/api/v1"
        assert settings.timer.tick_interval == 1.0
        assert settings.general.verbosity == "warning"
        assert service.source is None

    def test_file_layer(self, service, config_file):
        settings = service.load(config_file=config_file)

        assert settings.api.base_url == "http://file.test/api/v1"
        assert settings.api.user_id == 5
        assert settings.timer.reconcile_interval == 30
        assert settings.timer.state_file == Path("~/timer.json").expanduser()
        assert service.source == config_file

    def test_project_file_is_discovered(self, service, tmp_path):
        (tmp_path / "worklog.yaml").write_text("api:\n  timeout: 3\n")

        assert service.load().api.timeout == 3

    def test_env_beats_file(self, service, config_file, monkeypatch):
        monkeypatch.setenv("WORKLOG_API__BASE_URL", "http://env.test")

        settings = service.load(config_file=config_file)

        assert settings.api.base_url == "http://env.test"
        assert settings.api.user_id == 5

    def test_overrides_beat_env(self, service, monkeypatch):
        monkeypatch.setenv("WORKLOG_GENERAL__VERBOSITY", "info")

        settings = service.load(overrides={"general": {"verbosity": "DEBUG"}})

        assert settings.general.verbosity == "debug"

    def test_get_caches(self, service):
        assert service.get() is service.get()


class TestSettingsErrors:
    """Invalid configuration is reported, not ignored."""

    def test_invalid_yaml(self, service, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("api: [unclosed\n")

        with pytest.raises(ConfigFileError):
            service.load(config_file=path)

    def test_non_mapping(self, service, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigFileError):
            service.load(config_file=path)

    def test_missing_explicit_file(self, service, tmp_path):
        with pytest.raises(ConfigFileError):
            service.load(config_file=tmp_path / "nope.yaml")

    def test_non_positive_tick_interval(self, service, monkeypatch):
        monkeypatch.setenv("WORKLOG_TIMER__TICK_INTERVAL", "0")

        with pytest.raises(ValidationError):
            service.load()

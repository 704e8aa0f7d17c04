"""
Configuration tests.

Covers application.json lookup and parsing, colour resolution,
and settings layering (defaults, environment, overrides).
"""

import json

import pytest

from cronlog import config
from cronlog.config import AppConfig, Application, Settings, load_app_config, load_settings
from cronlog.errors import ConfigError


@pytest.fixture(autouse=True)
def no_system_config(monkeypatch):
    """Keep /etc, /var and ~ out of the search path."""
    monkeypatch.setattr(config, "CONFIG_SEARCH_PATHS", [])


def write_config(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


SAMPLE = {
    "applications": [
        {"name": "backup", "color": "#2e7d32"},
        {"name": "cleanup"},
    ],
    "defaultColor": "#607d8b",
}


class TestLoadAppConfig:

    def test_explicit_file(self, tmp_path):
        path = write_config(tmp_path / "custom.json", SAMPLE)

        app_config = load_app_config(path)

        assert [a.name for a in app_config.applications] == ["backup", "cleanup"]
        assert app_config.default_color == "#607d8b"

    def test_directory_containing_application_json(self, tmp_path):
        write_config(tmp_path / "application.json", SAMPLE)
        assert load_app_config(tmp_path).default_color == "#607d8b"

    def test_search_paths(self, tmp_path, monkeypatch):
        write_config(tmp_path / "application.json", SAMPLE)
        monkeypatch.setattr(config, "CONFIG_SEARCH_PATHS", [tmp_path / "missing", tmp_path])

        assert load_app_config().default_color == "#607d8b"

    def test_missing_file_gives_empty_config(self, tmp_path):
        app_config = load_app_config(tmp_path / "nothing-here")

        assert app_config.applications == []
        assert app_config.default_color == ""

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "application.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_app_config(path)
        assert exc_info.value.path == str(path.resolve())

    def test_unknown_field_rejected(self, tmp_path):
        path = write_config(tmp_path / "application.json", {"applications": [], "colour": "red"})
        with pytest.raises(ConfigError):
            load_app_config(path)

    def test_empty_application_name_rejected(self, tmp_path):
        path = write_config(tmp_path / "application.json", {"applications": [{"name": " "}]})
        with pytest.raises(ConfigError):
            load_app_config(path)


class TestColorFor:

    def test_configured_color(self):
        app_config = AppConfig.model_validate(SAMPLE)
        assert app_config.color_for("backup") == "#2e7d32"

    def test_application_without_color_uses_default(self):
        app_config = AppConfig.model_validate(SAMPLE)
        assert app_config.color_for("cleanup") == "#607d8b"

    def test_unknown_application_uses_default(self):
        app_config = AppConfig(applications=[Application(name="backup", color="red")], default_color="grey")
        assert app_config.color_for("other") == "grey"


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings(environ={})

        assert settings == Settings()
        assert settings.port == 9000
        assert settings.page_size == 20

    def test_environment(self):
        settings = load_settings(environ={
            "CRONLOG_DB": "/tmp/x.db",
            "CRONLOG_PORT": "8080",
            "CRONLOG_LOGLEVEL": "DEBUG",
            "CRONLOG_PAGE_SIZE": "50",
        })

        assert settings.db_path == "/tmp/x.db"
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"
        assert settings.page_size == 50

    def test_overrides_win_over_environment(self):
        settings = load_settings(environ={"CRONLOG_PORT": "8080"}, port=7000)
        assert settings.port == 7000

    def test_none_overrides_are_ignored(self):
        settings = load_settings(environ={"CRONLOG_HOST": "0.0.0.0"}, host=None, port=None)

        assert settings.host == "0.0.0.0"
        assert settings.port == 9000

    def test_invalid_environment_value(self):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(environ={"CRONLOG_PORT": "eighty"})
        assert exc_info.value.path == "CRONLOG_PORT"

    def test_unknown_override(self):
        with pytest.raises(TypeError):
            load_settings(environ={}, colour="red")


class TestSettingsRanges:

    @pytest.mark.parametrize("var, value", [
        ("CRONLOG_PAGE_SIZE", "-5"),
        ("CRONLOG_PAGE_SIZE", "0"),
        ("CRONLOG_PORT", "0"),
        ("CRONLOG_PORT", "70000"),
    ])
    def test_out_of_range_environment(self, var, value):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(environ={var: value})
        assert exc_info.value.path == var

    @pytest.mark.parametrize("override", [
        {"port": -1},
        {"page_size": 0},
        {"busy_timeout": -0.5},
        {"max_output_length": 0},
    ])
    def test_out_of_range_override(self, override):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(environ={}, **override)
        assert exc_info.value.path == next(iter(override))

    def test_override_replaces_bad_environment(self):
        settings = load_settings(environ={"CRONLOG_PORT": "0"}, port=8080)
        assert settings.port == 8080

    def test_boundaries_accepted(self):
        settings = load_settings(environ={"CRONLOG_PORT": "65535", "CRONLOG_PAGE_SIZE": "1"}, busy_timeout=0.0)

        assert settings.port == 65535
        assert settings.page_size == 1
        assert settings.busy_timeout == 0.0


class TestBaseSettings:

    def test_base_supplies_defaults(self):
        settings = load_settings(environ={}, base=Settings(log_level="WARN"))
        assert settings.log_level == "WARN"

    def test_environment_wins_over_base(self):
        settings = load_settings(environ={"CRONLOG_LOGLEVEL": "DEBUG"}, base=Settings(log_level="WARN"))
        assert settings.log_level == "DEBUG"

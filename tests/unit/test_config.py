"""
Tests for configuration system.
"""

import pytest

from pattern_locator.config import (
    ConfigLoader,
    LocatorSettings,
    LoggingSettings,
    Settings,
    get_settings,
    load_config,
    reset_settings,
)
from pattern_locator.exceptions import ConfigurationError


class TestSettings:
    """Test the Settings classes."""

    def test_default_settings(self):
        """Test default settings are created correctly."""
        settings = Settings()

        assert settings.locator.enable is True
        assert settings.locator.default_pattern_set is None
        assert settings.locator.retry_timeout_ms == 30000
        assert settings.locator.retry_interval_ms == 2000
        assert settings.locator.label_eligible == ["input", "select", "textarea"]
        assert settings.logging.level == "INFO"

    def test_override_settings(self):
        """Test overriding settings."""
        settings = Settings(
            locator=LocatorSettings(default_pattern_set="homePage", retry_timeout_ms=5000),
        )

        assert settings.locator.default_pattern_set == "homePage"
        assert settings.locator.retry_timeout_ms == 5000

    def test_merge_with_overrides(self):
        """Test merging settings with overrides."""
        settings = Settings(locator=LocatorSettings(page_mapping={"/home": "homePage"}))
        new_settings = settings.merge_with({
            "locator": {"default_pattern_set": "loginPage"},
            "logging": {"level": "DEBUG"},
        })

        assert new_settings.locator.default_pattern_set == "loginPage"
        assert new_settings.logging.level == "DEBUG"
        # Other settings should remain
        assert new_settings.locator.page_mapping == {"/home": "homePage"}

    def test_timeout_validation(self):
        """Test validation of retry settings."""
        assert LocatorSettings(retry_timeout_ms=0).retry_timeout_ms == 0

        with pytest.raises(ValueError):
            LocatorSettings(retry_timeout_ms=-1)
        with pytest.raises(ValueError):
            LocatorSettings(retry_interval_ms=120000)

    def test_label_eligible_is_trimmed(self):
        """Test that blank and padded entries are cleaned up."""
        settings = LocatorSettings(label_eligible=[" input ", "", "combobox"])
        assert settings.label_eligible == ["input", "combobox"]

    def test_logging_level_validation(self):
        """Test that unknown log levels are rejected."""
        with pytest.raises(ValueError):
            LoggingSettings(level="VERBOSE")

    def test_env_variables(self, monkeypatch):
        """Test loading nested settings from environment variables."""
        monkeypatch.setenv("PATTERN_LOCATOR__LOCATOR__DEFAULT_PATTERN_SET", "checkoutPage")
        monkeypatch.setenv("PATTERN_LOCATOR__LOCATOR__RETRY_TIMEOUT_MS", "1500")

        settings = Settings()

        assert settings.locator.default_pattern_set == "checkoutPage"
        assert settings.locator.retry_timeout_ms == 1500


class TestConfigLoader:
    """Test loading settings from files."""

    def test_load_yaml_file(self, tmp_path):
        """Test that a YAML config file is applied."""
        config = tmp_path / "pattern-locator.yaml"
        config.write_text(
            "locator:\n"
            "  default_pattern_set: loginPage\n"
            "  page_mapping:\n"
            "    /checkout: checkoutPage\n"
            "  static_locators:\n"
            "    loginPage.button.Login: '#login-btn'\n"
        )

        settings = load_config(config_path=config)

        assert settings.locator.default_pattern_set == "loginPage"
        assert settings.locator.page_mapping == {"/checkout": "checkoutPage"}
        assert settings.locator.static_locators["loginPage.button.Login"] == "#login-btn"

    def test_overrides_win_over_file(self, tmp_path):
        """Test that explicit overrides take priority."""
        config = tmp_path / "config.yaml"
        config.write_text("locator:\n  default_pattern_set: loginPage\n")

        settings = load_config(config_path=config, locator={"default_pattern_set": "homePage"})

        assert settings.locator.default_pattern_set == "homePage"

    def test_env_wins_over_file(self, tmp_path, monkeypatch):
        """Test that environment variables take priority over the config file."""
        config = tmp_path / "config.yaml"
        config.write_text(
            "locator:\n"
            "  default_pattern_set: loginPage\n"
            "  page_mapping:\n"
            "    /checkout: checkoutPage\n"
        )
        monkeypatch.setenv("PATTERN_LOCATOR__LOCATOR__DEFAULT_PATTERN_SET", "checkoutPage")

        settings = load_config(config_path=config)

        assert settings.locator.default_pattern_set == "checkoutPage"
        assert settings.locator.page_mapping == {"/checkout": "checkoutPage"}

    def test_overrides_win_over_env(self, tmp_path, monkeypatch):
        """Test that explicit overrides beat both the environment and the file."""
        config = tmp_path / "config.yaml"
        config.write_text("locator:\n  default_pattern_set: loginPage\n")
        monkeypatch.setenv("PATTERN_LOCATOR__LOCATOR__DEFAULT_PATTERN_SET", "checkoutPage")

        settings = load_config(config_path=config, locator={"default_pattern_set": "homePage"})

        assert settings.locator.default_pattern_set == "homePage"

    def test_missing_explicit_file(self, tmp_path):
        """Test that a missing explicit config file is an error."""
        with pytest.raises(ConfigurationError):
            ConfigLoader(tmp_path / "missing.yaml").load()

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML is a configuration error."""
        config = tmp_path / "broken.yaml"
        config.write_text("locator: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path=config)

    def test_invalid_values(self, tmp_path):
        """Test that invalid values are reported as configuration errors."""
        config = tmp_path / "bad.yaml"
        config.write_text("locator:\n  retry_timeout_ms: -5\n")

        with pytest.raises(ConfigurationError):
            load_config(config_path=config)

    def test_empty_file(self, tmp_path):
        """Test that an empty config file gives defaults."""
        config = tmp_path / "empty.yaml"
        config.write_text("")

        settings = load_config(config_path=config)

        assert settings.locator.retry_timeout_ms == 30000


class TestGlobalSettings:
    """Test the settings singleton."""

    def test_singleton_and_reset(self, tmp_path, monkeypatch):
        """Test that get_settings caches until reset."""
        monkeypatch.chdir(tmp_path)
        reset_settings()
        try:
            first = get_settings()
            assert get_settings() is first
            reset_settings()
            assert get_settings() is not first
        finally:
            reset_settings()

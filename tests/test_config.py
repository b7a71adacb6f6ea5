"""Tests for configuration management and validation.

Validates GlobalConfig behavior including:
- Environment variable loading precedence
- Pydantic validation rules
- Path and URL normalization
- Locator chain validation
- Singleton cache behavior

Testing Philosophy:
    Configuration errors should fail-fast at startup, not during runtime.
    These tests ensure invalid configurations are caught immediately.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.settings import GlobalConfig


class TestGlobalConfigDefaults:
    """Test suite for production defaults."""

    def test_default_timings(self) -> None:
        """Defaults reproduce the production timing profile."""
        from config.settings import get_config

        get_config.cache_clear()
        config = get_config()

        assert config.navigation_timeout_ms == 30000
        assert config.navigation_wait_until == "networkidle"
        assert config.settle_delay_ms == 3000
        assert config.activation_max_attempts == 2
        assert config.activation_retry_delay_ms == 1000
        assert config.post_activation_settle_ms == 5000
        assert config.pacing_delay_ms == 2000
        assert config.inspection_pause_ms == 5000

        get_config.cache_clear()

    def test_default_identity_and_record_shape(self, mock_config: GlobalConfig) -> None:
        assert mock_config.headless is True
        assert mock_config.viewport_width == 1280
        assert mock_config.viewport_height == 720
        assert mock_config.city_count == 5
        assert mock_config.default_city_label == "Unknown"
        assert mock_config.default_count == 0

    def test_every_chain_has_a_fallback(self, mock_config: GlobalConfig) -> None:
        chains = [
            mock_config.activation_locators,
            mock_config.artist_name_locators,
            mock_config.image_locators,
            mock_config.username_locators,
            mock_config.followers_locators,
            mock_config.monthly_listeners_locators,
            mock_config.city_label_locators,
            mock_config.city_count_locators,
            mock_config.social_link_locators,
        ]
        assert all(len(chain) >= 2 for chain in chains)

    def test_monthly_listeners_fallback_is_absolute(self, mock_config: GlobalConfig) -> None:
        fallback = mock_config.monthly_listeners_locators[1]
        assert fallback.startswith("/html/body/div[4]/div/div[2]/div[6]/")
        assert fallback.endswith("/dialog/div/div[1]/div/div/div[1]/div[2]/div[1]")

    def test_city_chains_are_indexed(self, mock_config: GlobalConfig) -> None:
        assert all("{index}" in entry for entry in mock_config.city_label_locators)
        assert all("{index}" in entry for entry in mock_config.city_count_locators)


class TestGlobalConfigValidation:
    """Test suite for GlobalConfig validation rules."""

    def test_activation_attempts_bounds(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """At least one attempt per locator is required."""
        from config.settings import get_config

        get_config.cache_clear()

        monkeypatch.setenv("ACTIVATION_MAX_ATTEMPTS", "0")
        with pytest.raises(ValidationError):
            get_config()

        get_config.cache_clear()

        monkeypatch.setenv("ACTIVATION_MAX_ATTEMPTS", "3")
        assert get_config().activation_max_attempts == 3

        get_config.cache_clear()

    def test_negative_delay_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from config.settings import get_config

        get_config.cache_clear()

        monkeypatch.setenv("PACING_DELAY_MS", "-1")
        with pytest.raises(ValidationError) as exc_info:
            get_config()

        assert "pacing_delay_ms" in str(exc_info.value)

        get_config.cache_clear()

    def test_unknown_wait_state_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from config.settings import get_config

        get_config.cache_clear()

        monkeypatch.setenv("NAVIGATION_WAIT_UNTIL", "whenever")
        with pytest.raises(ValidationError):
            get_config()

        get_config.cache_clear()

    def test_empty_locator_chain_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig(activation_locators=[])

    def test_blank_locator_entry_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig(followers_locators=["//div", "   "])

    def test_locator_chain_from_json_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Selector drift can be patched through the environment."""
        from config.settings import get_config

        get_config.cache_clear()

        monkeypatch.setenv("ACTIVATION_LOCATORS", '["//button[@id=\'new\']", "//button"]')
        config = get_config()
        assert config.activation_locators == ["//button[@id='new']", "//button"]

        get_config.cache_clear()

    def test_path_field_normalization(self, mock_config: GlobalConfig) -> None:
        """Verify string paths are converted to Path objects."""
        assert isinstance(mock_config.log_dir, Path)
        assert isinstance(mock_config.output_dir, Path)

    def test_base_url_trailing_slash_normalization(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Identifiers are appended directly, so the base URL always ends with '/'."""
        from config.settings import get_config

        get_config.cache_clear()

        monkeypatch.setenv("TARGET_BASE_URL", "https://example.com/artist")
        assert get_config().target_base_url == "https://example.com/artist/"

        get_config.cache_clear()

        monkeypatch.setenv("TARGET_BASE_URL", "https://example.com/artist/")
        assert get_config().target_base_url == "https://example.com/artist/"

        get_config.cache_clear()


class TestConfigSingletonBehavior:
    """Test suite for get_config() singleton caching."""

    def test_singleton_returns_same_instance(self, mock_config: GlobalConfig) -> None:
        """Verify get_config() returns cached instance within same scope."""
        from config.settings import get_config

        assert get_config() is get_config()

    def test_cache_clear_forces_new_instance(
        self, mock_config: GlobalConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Verify cache_clear() allows reconfiguration."""
        from config.settings import get_config

        config1 = get_config()

        get_config.cache_clear()
        monkeypatch.setenv("APP_NAME", "NewApp")

        config2 = get_config()

        assert config1 is not config2
        assert config2.app_name == "NewApp"

        get_config.cache_clear()


class TestEnvironmentVariableOverrides:
    """Test suite for environment variable precedence."""

    def test_env_var_overrides_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from config.settings import get_config

        get_config.cache_clear()

        monkeypatch.setenv("NAVIGATION_TIMEOUT_MS", "45000")
        assert get_config().navigation_timeout_ms == 45000

        get_config.cache_clear()

    def test_boolean_env_var_parsing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verify boolean environment variables are parsed correctly.

        Pydantic accepts: true/false, 1/0, yes/no, on/off (case-insensitive).
        """
        from config.settings import get_config

        test_cases = [
            ("true", True),
            ("True", True),
            ("1", True),
            ("yes", True),
            ("false", False),
            ("False", False),
            ("0", False),
            ("no", False),
        ]

        for env_value, expected in test_cases:
            get_config.cache_clear()
            monkeypatch.setenv("HEADLESS", env_value)
            config = get_config()
            assert config.headless is expected, f"Failed for {env_value}"

        get_config.cache_clear()

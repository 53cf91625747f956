"""
Tests for configuration module.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from gridref.core.config import Settings


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self) -> None:
        """Test that default values are set correctly."""
        settings = Settings()
        assert settings.environment == "development"
        assert settings.exact_transverse_mercator is False
        assert settings.mgrs_precision == 5
        assert settings.extra_digits == 0
        assert settings.json_logs is False
        assert settings.batch_log_threshold_ms is None

    def test_custom_values(self) -> None:
        """Test setting custom configuration values."""
        settings = Settings(
            environment="production",
            exact_transverse_mercator=True,
            mgrs_precision=3,
            extra_digits=2,
            batch_log_threshold_ms=50.0,
        )

        assert settings.environment == "production"
        assert settings.exact_transverse_mercator is True
        assert settings.mgrs_precision == 3
        assert settings.extra_digits == 2
        assert settings.batch_log_threshold_ms == 50.0

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that GRIDREF_ environment variables are read."""
        monkeypatch.setenv("GRIDREF_MGRS_PRECISION", "2")
        monkeypatch.setenv("GRIDREF_EXACT_TRANSVERSE_MERCATOR", "true")

        settings = Settings()
        assert settings.mgrs_precision == 2
        assert settings.exact_transverse_mercator is True

    @pytest.mark.parametrize("precision", [-2, 12])
    def test_mgrs_precision_range(self, precision: int) -> None:
        """Test that MGRS precision outside [-1, 11] is rejected."""
        with pytest.raises(PydanticValidationError):
            Settings(mgrs_precision=precision)

    def test_negative_extra_digits_rejected(self) -> None:
        """Test that extra_digits cannot be negative."""
        with pytest.raises(PydanticValidationError):
            Settings(extra_digits=-1)

    def test_log_level_normalized(self) -> None:
        """Test that log level names are upper-cased."""
        settings = Settings(log_level="warning")
        assert settings.log_level == "WARNING"
        assert settings.default_log_level == "WARNING"

    def test_unknown_log_level_rejected(self) -> None:
        """Test that an unknown log level is rejected."""
        with pytest.raises(PydanticValidationError, match="Unknown log level"):
            Settings(log_level="verbose")

    def test_default_log_level_by_environment(self) -> None:
        """Test the default log level for each environment."""
        assert Settings(environment="development").default_log_level == "DEBUG"
        assert Settings(environment="production").default_log_level == "INFO"
        assert Settings(environment="development").is_development is True
        assert Settings(environment="staging").is_development is False

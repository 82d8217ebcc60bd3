"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from flip7.config import Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.PORT == 8000
        assert settings.SHUFFLE_SEED is None
        assert settings.WS_MAX_MESSAGE_SIZE == 4096

    @pytest.mark.parametrize(
        "field", ["WS_CONNECTION_TIMEOUT", "WS_MAX_MESSAGES_PER_SECOND", "WS_RATE_LIMIT_WINDOW"]
    )
    def test_limits_must_be_positive(self, field: str):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SHUFFLE_SEED", "42")
        monkeypatch.setenv("DEBUG", "true")

        settings = Settings(_env_file=None)

        assert settings.SHUFFLE_SEED == 42
        assert settings.DEBUG is True

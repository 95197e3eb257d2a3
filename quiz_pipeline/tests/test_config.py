"""Tests for environment-driven settings."""
import pytest

from quiz_pipeline.config import _env_float


class TestEnvFloat:
    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv("QUIZ_CACHE_TTL", raising=False)
        assert _env_float("QUIZ_CACHE_TTL", 300.0) == 300.0

    def test_parses_value(self, monkeypatch):
        monkeypatch.setenv("QUIZ_CACHE_TTL", " 60 ")
        assert _env_float("QUIZ_CACHE_TTL", 300.0) == 60.0

    @pytest.mark.parametrize("raw", ["5m", "abc", "  "])
    def test_malformed_uses_default(self, monkeypatch, raw):
        monkeypatch.setenv("QUIZ_CACHE_TTL", raw)
        assert _env_float("QUIZ_CACHE_TTL", 300.0) == 300.0

    def test_timeout_defaults_to_none(self, monkeypatch):
        monkeypatch.setenv("QUIZ_FETCH_TIMEOUT", "soon")
        assert _env_float("QUIZ_FETCH_TIMEOUT") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

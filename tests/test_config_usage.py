"""Tests for configuration loading and usage tracking."""
from pathlib import Path
from types import SimpleNamespace

from texocr import config
from texocr.config import PipelineConfig, validate_config
from texocr.usage import PRICING, UsageTracker, extract_usage_from_response


class TestPipelineConfig:
    """Test suite for PipelineConfig and validate_config."""

    def test_from_env_reads_module_settings(self, monkeypatch):
        monkeypatch.setattr(config, "GEMINI_API_KEY", "env_key")
        monkeypatch.setattr(config, "GEMINI_MODEL", "gemini-2.5-pro")
        monkeypatch.setattr(config, "MAX_ATTEMPTS", 5)
        monkeypatch.setattr(config, "OUTPUT_DIR", Path("/tmp/texocr-out"))

        cfg = PipelineConfig.from_env()

        assert cfg.api_key == "env_key"
        assert cfg.model == "gemini-2.5-pro"
        assert cfg.max_attempts == 5
        assert cfg.image_dir == Path("/tmp/texocr-out/images")

    def test_valid_config(self):
        status = validate_config(PipelineConfig(api_key="k", pushover_user_key="u", pushover_api_token="t"))

        assert status["valid"] is True
        assert status["issues"] == []
        assert status["warnings"] == []
        assert status["config"]["max_attempts"] == 3

    def test_missing_api_key(self):
        status = validate_config(PipelineConfig(api_key=""))

        assert status["valid"] is False
        assert any("GEMINI_API_KEY" in issue for issue in status["issues"])

    def test_missing_pushover_is_only_a_warning(self):
        status = validate_config(PipelineConfig(api_key="k"))

        assert status["valid"] is True
        assert any("Pushover" in warning for warning in status["warnings"])

    def test_validate_defaults_to_environment(self, monkeypatch):
        monkeypatch.setattr(config, "GEMINI_API_KEY", "")

        status = validate_config()

        assert status["valid"] is False

    def test_invalid_attempts(self):
        status = validate_config(PipelineConfig(api_key="k", max_attempts=0))

        assert status["valid"] is False


class TestUsageTracker:
    """Test suite for UsageTracker."""

    def test_add_call_accumulates(self):
        tracker = UsageTracker()

        tracker.add_call(1, "gemini-2.5-flash", 1_000_000, 0, 1500.0)
        tracker.add_call(2, "gemini-2.5-flash", 0, 1_000_000, 500.0)

        pricing = PRICING["gemini-2.5-flash"]
        assert tracker.total_tokens == 2_000_000
        assert tracker.total_cost == pricing["input"] + pricing["output"]
        assert tracker.total_duration_ms == 2000.0

    def test_unknown_model_uses_default_pricing(self):
        tracker = UsageTracker()

        call = tracker.add_call(1, "some-future-model", 1_000_000, 0, 0.0)

        assert call.cost == PRICING["default"]["input"]

    def test_to_dict(self):
        tracker = UsageTracker()
        tracker.add_call(3, "gemini-2.5-flash", 100, 20, 12.5)

        data = tracker.to_dict()

        assert data["total_tokens"] == 120
        assert data["pages"][0]["page"] == 3
        assert data["pages"][0]["duration_ms"] == 12.5

    def test_format_summary(self):
        tracker = UsageTracker()
        tracker.add_call(1, "gemini-2.5-flash", 100, 20, 1000.0)

        summary = tracker.format_summary()

        assert "Pages: 1" in summary
        assert "120" in summary


def test_extract_usage_from_response():
    response = SimpleNamespace(usage_metadata=SimpleNamespace(prompt_token_count=10, candidates_token_count=None))
    assert extract_usage_from_response(response) == (10, 0)
    assert extract_usage_from_response(SimpleNamespace()) == (0, 0)

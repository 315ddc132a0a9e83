"""Unit tests for settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

from src.config.loader import DEFAULT_CONFIG, load_config
from src.config.settings import Settings


def _settings(**overrides: str) -> Settings:
    values = {
        "discord_token": "",
        "discord_client_id": "",
        "notion_api_key": "",
        "gemini_api_key": "",
        "anthropic_api_key": "",
        "openai_api_key": "",
        "google_client_id": "",
        "google_client_secret": "",
        "google_refresh_token": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    def test_missing_required(self) -> None:
        assert _settings().missing_required() == [
            "DISCORD_TOKEN",
            "DISCORD_CLIENT_ID",
            "NOTION_API_KEY",
            "GEMINI_API_KEY",
        ]

    def test_any_ai_key_satisfies_requirement(self) -> None:
        settings = _settings(discord_token="t", discord_client_id="c", notion_api_key="n", openai_api_key="o")
        assert settings.missing_required() == []

    def test_provider_priority(self) -> None:
        settings = _settings(openai_api_key="o", gemini_api_key="g")
        assert settings.get_available_llm_providers() == ["gemini", "openai"]

    def test_google_needs_all_three(self) -> None:
        assert _settings(google_client_id="a", google_client_secret="b").is_google_configured() is False
        assert _settings(
            google_client_id="a", google_client_secret="b", google_refresh_token="c"
        ).is_google_configured() is True

    def test_env_override(self, monkeypatch) -> None:  # noqa: ANN001
        monkeypatch.setenv("DISCORD_CALENDAR_CHANNEL_ID", "1002")
        assert Settings(_env_file=None).discord_calendar_channel_id == "1002"


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "missing.yaml"), settings=_settings())

        assert config["cache"] == DEFAULT_CONFIG["cache"]
        assert config["calendar"]["min_text_length"] == 10

    def test_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("cache:\n  analysis_ttl: 60\ntimeouts:\n  scrape: 5\n", encoding="utf-8")

        config = load_config(str(path), settings=_settings())

        assert config["cache"]["analysis_ttl"] == 60
        assert config["cache"]["record_ttl"] == 86400
        assert config["timeouts"]["scrape"] == 5

    def test_settings_merged(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "missing.yaml"), settings=_settings(anthropic_api_key="a"))

        assert config["llm"]["available_providers"] == ["anthropic"]
        assert config["google"]["configured"] is False
        assert config["google"]["timezone"] == "Asia/Taipei"

    def test_defaults_not_mutated(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("cache:\n  analysis_ttl: 1\n", encoding="utf-8")

        load_config(str(path), settings=_settings())

        assert DEFAULT_CONFIG["cache"]["analysis_ttl"] == 3600

    def test_repo_config_file(self) -> None:
        repo_config = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        config = load_config(str(repo_config), settings=_settings())

        assert config["apify"]["actors"]["threads"] == "apify/threads-scraper"

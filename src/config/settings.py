"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Secrets and Discord/Notion identifiers come from two sources, in
# priority order:
#
#   1. **Environment variables**: e.g., DISCORD_TOKEN=abc123
#   2. **.env file**: key=value lines in the project root .env file
#
# Field ``notion_api_key`` maps to env var ``NOTION_API_KEY``.  An empty
# string means "not configured": the composition root in main.py skips
# any integration whose credentials are blank, and the button resolver
# renders a "service unavailable" view instead of calling it.
#
# Non-secret tuning constants (TTLs, timeouts, property names) live in
# config/config.yaml and are read by load_config().
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Cyclone bot settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Discord ===
    discord_token: str = ""
    discord_client_id: str = ""
    discord_guild_id: str = ""  # Sync slash commands to one guild instantly when set
    discord_info_collect_channel_id: str = ""
    discord_calendar_channel_id: str = ""

    # === Notion ===
    notion_api_key: str = ""
    notion_database_id_info: str = ""
    notion_database_id_calendar: str = ""

    # === Google Calendar / Tasks ===
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    google_timezone: str = "Asia/Taipei"

    # === AI Providers ===
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # === Scraping ===
    apify_api_key: str = ""

    # === App ===
    app_host: str = "0.0.0.0"  # noqa: S104
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return AI provider names with credentials, in priority order."""
        providers: list[str] = []
        if self.gemini_api_key:
            providers.append("gemini")
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        return providers

    def is_google_configured(self) -> bool:
        return bool(
            self.google_client_id and self.google_client_secret and self.google_refresh_token
        )

    def is_apify_configured(self) -> bool:
        return bool(self.apify_api_key)

    def is_notion_configured(self) -> bool:
        return bool(self.notion_api_key)

    def missing_required(self) -> list[str]:
        """Names of required environment variables that are blank.

        Discord credentials and the Notion key are mandatory; any one AI
        provider key satisfies the AI requirement.
        """
        missing = [
            name.upper()
            for name in ("discord_token", "discord_client_id", "notion_api_key")
            if not getattr(self, name)
        ]
        if not self.get_available_llm_providers():
            missing.append("GEMINI_API_KEY")
        return missing

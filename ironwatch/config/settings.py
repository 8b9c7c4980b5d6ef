"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

  1. **Environment variables** -- e.g. ``LINE_CHANNEL_ACCESS_TOKEN=...``
  2. **.env file** -- key=value lines in the project root ``.env``

Field ``line_channel_secret`` maps to env var ``LINE_CHANNEL_SECRET`` and so
on.  Defaults apply when neither source sets a field.  Tuning knobs for the
scraper and the page walk live in ``config/config.yaml`` (see
:mod:`ironwatch.config.loader`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ironwatch application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === LINE Messaging API ===
    # Empty token = chat replies disabled (webhook still parses commands).
    # Empty secret = X-Line-Signature is not verified.
    line_channel_access_token: str = ""
    line_channel_secret: str = ""
    line_api_base_url: str = "https://api.line.me"

    # === Remote listing ===
    team_url_template: str = "https://ithelp.ithome.com.tw/2021ironman/signup/team/{team_id}"

    # === Article store ===
    store_backend: str = "sqlite"  # "sqlite" | "memory"
    article_db_path: str = "data/articles.db"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 5000
    app_env: str = "development"
    log_level: str = "INFO"

    def team_url(self, team_id: str | int) -> str:
        """Return the public listing URL for *team_id*."""
        return self.team_url_template.format(team_id=team_id)

    def chat_enabled(self) -> bool:
        return bool(self.line_channel_access_token)

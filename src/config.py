"""Pydantic Settings, loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    # Comma-separated; more than one key allows rotation without downtime.
    api_key: str

    redis_url: str = "redis://localhost:6379"
    result_ttl_seconds: int = 86400
    log_level: str = "INFO"

    # Headless rendering backend (Browserbase)
    browserbase_api_key: str = ""
    browserbase_project_id: str = ""
    browserbase_api_url: str = "https://api.browserbase.com"
    render_connect_timeout_seconds: float = 15.0
    render_navigation_timeout_seconds: float = 30.0
    render_rate_limit_retries: int = 2
    render_retry_delay_seconds: float = 5.0
    render_settle_ms: int = 3000
    render_block_editor_settle_ms: int = 5000
    render_block_editor_selector_timeout_ms: int = 15000
    render_block_editor_fallback_ms: int = 8000

    # Static fetch and the "needs a browser" heuristic
    user_agent: str = DEFAULT_USER_AGENT
    fetch_timeout_seconds: float = 20.0
    min_html_chars: int = 2000
    js_shell_max_chars: int = 5000
    js_required_markers: list[str] = ["JavaScript must be enabled", "enable JavaScript"]
    app_root_markers: list[str] = ['id="app"', 'id="root"']

    # Paragraph extraction
    min_paragraph_chars: int = 20
    rendered_text_min_chars: int = 200
    readability_min_chars: int = 500
    readability_min_paragraph_chars: int = 30
    legacy_target_chars: int = 500
    boilerplate_prefixes: list[str] = [
        "menu",
        "navigation",
        "footer",
        "header",
        "sidebar",
        "cookie",
        "subscribe",
        "sign up",
        "log in",
        "share",
        "search",
        "follow",
    ]
    boilerplate_window: int = 30
    words_per_minute: int = 200

    @property
    def api_keys(self) -> list[str]:
        return [k.strip() for k in self.api_key.split(",") if k.strip()]

    @property
    def render_backend_configured(self) -> bool:
        return bool(self.browserbase_api_key and self.browserbase_project_id)


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]

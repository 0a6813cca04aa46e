"""Configuration management for the web search pipeline."""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserSettings(BaseModel):
    """Browser automation settings (uses nested delimiter BROWSER__)."""

    engine: str = "chromium"  # chromium | firefox
    headless: bool = True
    page_timeout_ms: int = 10000
    search_timeout_ms: int = 30000
    blocked_resource_types: list[str] = Field(
        default_factory=lambda: ["image", "stylesheet", "font", "media"]
    )
    # Extra browser switches; Chromium-only ones are dropped for firefox
    launch_args: list[str] = Field(default_factory=list)


class SearchSettings(BaseModel):
    """Search engine and ranking settings (uses nested delimiter SEARCH__)."""

    landing_url: str = "https://www.bing.com"
    input_selector: str = 'input[name="q"]'
    result_selector: str = "#b_results .b_algo"
    title_selector: str = "h2"
    link_selector: str = "a"
    snippet_selector: str = ".b_caption p"

    # Query expansion
    recency_keywords: list[str] = Field(
        default_factory=lambda: ["latest", "recent", "new"]
    )
    recency_suffixes: list[str] = Field(
        default_factory=lambda: ["last 24 hours", "today"]
    )

    # Ranking
    score_step: float = 0.1
    top_n: int = 5


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",  # Use BROWSER__HEADLESS=false for nested settings
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

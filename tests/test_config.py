"""
Tests for settings loading.
"""

from libs.core.config import Settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("BROWSER__ENGINE", raising=False)
        settings = Settings()

        assert settings.browser.page_timeout_ms == 10000
        assert settings.browser.blocked_resource_types == ["image", "stylesheet", "font", "media"]
        assert settings.browser.launch_args == []
        assert settings.search.top_n == 5
        assert settings.search.recency_keywords == ["latest", "recent", "new"]

    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("BROWSER__ENGINE", "firefox")
        monkeypatch.setenv("BROWSER__PAGE_TIMEOUT_MS", "5000")
        monkeypatch.setenv("SEARCH__TOP_N", "3")

        settings = Settings()

        assert settings.browser.engine == "firefox"
        assert settings.browser.page_timeout_ms == 5000
        assert settings.search.top_n == 3

    def test_launch_args_from_env(self, monkeypatch):
        monkeypatch.setenv("BROWSER__LAUNCH_ARGS", '["--no-sandbox", "--disable-gpu"]')

        settings = Settings()

        assert settings.browser.launch_args == ["--no-sandbox", "--disable-gpu"]

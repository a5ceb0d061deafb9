"""Tests for settings loading and the startup check."""

import pytest

from expense_tracker.config import (
    AppSettings,
    get_settings,
    validate_all_settings,
)
from expense_tracker.orchestrator import create_app_components
from expense_tracker.services.local_cache import InMemoryLocalCache


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No Google settings in the environment and no .env file nearby."""
    monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
    monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
    monkeypatch.delenv("CURRENCY_SYMBOL", raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


class TestValidateAllSettings:
    """Tests for the per-block settings check."""

    def test_missing_google_settings_reported(self, clean_env):
        results = validate_all_settings()

        assert results["google_sheets"] is False
        assert "google_sheets_error" in results
        assert results["local_cache"] is True
        assert results["app"] is True

    def test_configured_google_settings(self, clean_env, monkeypatch):
        credentials = clean_env / "credentials.json"
        credentials.write_text("{}")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")

        results = validate_all_settings()

        assert results["google_sheets"] is True
        assert "google_sheets_error" not in results

    def test_components_build_without_google_settings(
        self, clean_env, session_a, storage_a
    ):
        """Only the blocks that are used need to load."""
        components = create_app_components(
            session_a,
            local_cache=InMemoryLocalCache(),
            storage=storage_a,
        )
        assert components["storage"] is storage_a


class TestAppSettings:

    def test_default_currency_symbol(self, clean_env):
        assert AppSettings().currency_symbol == "₹"

    def test_currency_symbol_from_env(self, clean_env, monkeypatch):
        monkeypatch.setenv("CURRENCY_SYMBOL", "$")
        assert AppSettings().currency_symbol == "$"

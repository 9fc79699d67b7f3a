"""Tests for DiscoveryConfig loading."""

from pathlib import Path

import pytest

from govcon_finder.config import API_KEY_ENV_VARS, DiscoveryConfig, api_key_from_env


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (*API_KEY_ENV_VARS, "GOVCON_FINDER_DB", "GOVCON_FINDER_API_TOKEN"):
        monkeypatch.delenv(name, raising=False)


class TestApiKeyFromEnv:
    """Tests for api_key_from_env."""

    def test_none_set(self) -> None:
        assert api_key_from_env() is None

    def test_first_name_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SAM_API_KEY", "third")
        monkeypatch.setenv("SAMGOVAPIKEY", "first")
        assert api_key_from_env() == "first"

    def test_blank_values_skipped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SAMGOVAPIKEY", "   ")
        monkeypatch.setenv("SAM_GOV_API_KEY", "second")
        assert api_key_from_env() == "second"


class TestDiscoveryConfig:
    """Tests for DiscoveryConfig constructors."""

    def test_defaults(self) -> None:
        config = DiscoveryConfig()
        assert config.freshness_hours == 6.0
        assert config.lookback_days == 120
        assert config.outer_batch_size == 20
        assert config.inner_batch_size == 5
        assert config.fetch_deadline_seconds == 20.0
        assert config.page_size == 50
        assert config.wildcard_page_size == 200

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("SAM_GOV_API_KEY", "env-key")
        monkeypatch.setenv("GOVCON_FINDER_DB", str(tmp_path / "env.db"))
        monkeypatch.setenv("GOVCON_FINDER_API_TOKEN", "tok")

        config = DiscoveryConfig.from_env()

        assert config.api_key == "env-key"
        assert config.db_path == tmp_path / "env.db"
        assert config.api_token == "tok"

    def test_from_yaml_nested(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "samgov:\n"
            "  api_key: yaml-key\n"
            "fetch:\n"
            "  inner_batch_size: 3\n"
            "  fetch_deadline_seconds: 5\n"
            "cache:\n"
            "  freshness_hours: 12\n"
            "db_path: custom.db\n"
        )
        config = DiscoveryConfig.from_yaml(path)

        assert config.api_key == "yaml-key"
        assert config.inner_batch_size == 3
        assert config.fetch_deadline_seconds == 5.0
        assert config.freshness_hours == 12.0
        assert config.db_path == Path("custom.db")

    def test_from_yaml_falls_back_to_env_key(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("SAMGOVAPIKEY", "env-key")
        path = tmp_path / "config.yaml"
        path.write_text("lookback_days: 30\n")

        config = DiscoveryConfig.from_yaml(path)

        assert config.api_key == "env-key"
        assert config.lookback_days == 30

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert DiscoveryConfig.from_yaml(path).api_key is None

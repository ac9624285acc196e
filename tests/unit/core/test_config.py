"""Unit tests for configuration loading.

Tests cover:
- List parsing helper
- YAML defaults and the test environment overlay
- Environment variable overrides
- Derived properties
"""

from __future__ import annotations

from pathlib import Path

import pytest

from promo_compare.core.config import Settings, get_settings
from promo_compare.core.config.settings import parse_list
from promo_compare.core.config.yaml_source import deep_merge
from promo_compare.schemas.enums import MatchingMode, StoreName


pytestmark = pytest.mark.unit


class TestParseList:
    """Tests for parse_list."""

    def test_splits_comma_separated(self) -> None:
        """Should split and strip a comma-separated string."""
        assert parse_list("a, b ,,c") == ["a", "b", "c"]

    def test_passes_lists_through(self) -> None:
        """Should return lists unchanged."""
        assert parse_list(["x"]) == ["x"]


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_merges_nested_dicts(self) -> None:
        """Should override leaves and keep untouched keys."""
        base = {"cache": {"enabled": True, "max_entries": 10}, "app": {"debug": False}}

        merged = deep_merge(base, {"cache": {"max_entries": 5}})

        assert merged == {
            "cache": {"enabled": True, "max_entries": 5},
            "app": {"debug": False},
        }
        assert base["cache"]["max_entries"] == 10


class TestSettings:
    """Tests for Settings."""

    def test_loads_yaml_defaults(self) -> None:
        """Should read matching and cache values from the base YAML."""
        settings = Settings()

        assert settings.APP_ENV == "test"
        assert settings.matching.default_mode is MatchingMode.FLEXIBLE
        assert settings.matching.qualifying_similarity == 0.4
        assert settings.matching.fuzzy_floors[MatchingMode.STRICT] == 0.7
        assert settings.matching.high_confidence_similarity == 0.7
        assert settings.matching.good_similarity == 0.5
        assert settings.cache.max_entries == 1000
        assert settings.cache.default_ttl_seconds == 1800
        assert settings.keywords.max_keywords == 20
        assert settings.comparison.stores == list(StoreName)

    def test_environment_overlay(self) -> None:
        """Should apply the test environment YAML on top of the base."""
        assert Settings().logging.level == "WARNING"

    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should let environment variables override YAML."""
        monkeypatch.setenv("CACHE__MAX_ENTRIES", "25")
        monkeypatch.setenv("MATCHING__DEFAULT_MODE", "strict")

        settings = Settings()

        assert settings.cache.max_entries == 25
        assert settings.matching.default_mode is MatchingMode.STRICT

    def test_missing_floors_filled(self) -> None:
        """Should keep built-in floors for modes left out of the config."""
        settings = Settings(matching={"fuzzy_floors": {"strict": 0.8}})

        assert settings.matching.fuzzy_floors[MatchingMode.STRICT] == 0.8
        assert settings.matching.fuzzy_floors[MatchingMode.BROAD] == 0.2

    def test_config_dir_override(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Should read YAML from CONFIG_DIR when set."""
        base = tmp_path / "base"
        base.mkdir()
        (base / "cache.yaml").write_text("cache:\n  max_entries: 7\n")
        monkeypatch.setenv("CONFIG_DIR", str(tmp_path))

        assert Settings().cache.max_entries == 7

    def test_database_dsn(self) -> None:
        """Should build a DSN without the password."""
        settings = Settings(
            database={"host": "db", "port": 5433, "name": "promos", "user": "app"},
            DATABASE_PASSWORD="secret",
        )

        assert settings.database_dsn == "postgresql://app@db:5433/promos"

    def test_environment_flags(self) -> None:
        """Should expose the environment as booleans."""
        settings = Settings(APP_ENV="production")

        assert settings.is_production
        assert not settings.is_development
        assert not settings.is_testing

    def test_get_settings_is_cached(self) -> None:
        """Should return the same instance until the cache is cleared."""
        assert get_settings() is get_settings()

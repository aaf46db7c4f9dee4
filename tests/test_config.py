"""Tests for configuration and service wiring."""

from decimal import Decimal

import pytest

from engagement_engine.config import Settings, create_service, create_store
from engagement_engine.errors import ValidationError
from engagement_engine.store import InMemoryEngagementStore, SqlEngagementStore


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("ENVIRONMENT", "ENGAGEMENT_STORE", "DATABASE_URL", "COMMISSION_TIER_TABLE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.environment == "dev"
        assert settings.store_backend == "memory"
        assert settings.commission_tier_table == "standard"

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENGAGEMENT_STORE", "SQL")
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'store.db'}")
        monkeypatch.setenv("COMMISSION_TIER_TABLE", "deadline_weighted")

        settings = Settings.from_env()

        assert settings.store_backend == "sql"
        assert settings.database_url.endswith("store.db")
        assert settings.commission_tier_table == "deadline_weighted"


class TestCompositionRoot:

    def test_memory_store(self):
        assert isinstance(create_store(Settings(store_backend="memory")), InMemoryEngagementStore)

    def test_sql_store(self, tmp_path):
        store = create_store(Settings(store_backend="sql", database_url=f"sqlite:///{tmp_path / 'e.db'}"))
        assert isinstance(store, SqlEngagementStore)

    def test_unknown_store_backend(self):
        with pytest.raises(ValidationError):
            create_store(Settings(store_backend="supabase"))

    def test_unknown_tier_table(self):
        with pytest.raises(ValidationError):
            create_service(Settings(commission_tier_table="unknown"))

    def test_tier_table_reaches_calculator(self):
        service = create_service(Settings(commission_tier_table="deadline_weighted"))
        result = service.preview_commission(Decimal("1000"), 1, True)

        assert result.percent == 8

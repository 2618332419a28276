"""Test Alembic migrations: upgrade, downgrade, and structural checks.

Runs against a throwaway SQLite file so no database server is needed.
"""

import os

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from skportal.core.config import get_settings
from skportal.db.base import Base


ALEMBIC_INI = os.path.join(os.path.dirname(__file__), "..", "..", "alembic.ini")

EXPECTED_TABLES = {
    "profiles",
    "sk_requests",
    "officers",
    "custom_role_titles",
    "request_history",
}


@pytest.fixture()
def database_url(tmp_path, monkeypatch):
    """Point settings at a fresh SQLite file for the duration of a test."""
    url = f"sqlite:///{tmp_path / 'migrations.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest.fixture()
def alembic_cfg(database_url):
    cfg = Config(ALEMBIC_INI)
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


@pytest.fixture()
def inspector(database_url, alembic_cfg):
    command.upgrade(alembic_cfg, "head")
    engine = create_engine(database_url)
    yield inspect(engine)
    engine.dispose()


class TestMigrations:
    """Run upgrade, verify, downgrade."""

    def test_upgrade_creates_all_tables(self, inspector):
        tables = set(inspector.get_table_names())
        assert EXPECTED_TABLES <= tables
        assert "alembic_version" in tables

    def test_upgrade_is_idempotent(self, alembic_cfg):
        command.upgrade(alembic_cfg, "head")
        command.upgrade(alembic_cfg, "head")

    def test_columns_match_models(self, inspector):
        for table in EXPECTED_TABLES:
            migrated = {c["name"] for c in inspector.get_columns(table)}
            modelled = {c.name for c in Base.metadata.tables[table].columns}
            assert migrated == modelled, f"{table} differs from its model"

    def test_unique_constraints(self, inspector):
        officer_uq = {uq["name"] for uq in inspector.get_unique_constraints("officers")}
        assert "uq_officers_request_position" in officer_uq

        title_uq = {uq["name"] for uq in inspector.get_unique_constraints("custom_role_titles")}
        assert "uq_custom_role_titles" in title_uq

    def test_indexes(self, inspector):
        request_idx = {ix["name"] for ix in inspector.get_indexes("sk_requests")}
        assert {
            "ix_sk_requests_chapter_id",
            "ix_sk_requests_status",
            "uq_sk_requests_active_chapter",
        } <= request_idx

        history_idx = {ix["name"] for ix in inspector.get_indexes("request_history")}
        assert "ix_request_history_request_id" in history_idx

    def test_downgrade_removes_all_tables(self, database_url, alembic_cfg, inspector):
        command.downgrade(alembic_cfg, "base")

        engine = create_engine(database_url)
        tables = set(inspect(engine).get_table_names())
        engine.dispose()
        assert not (EXPECTED_TABLES & tables)

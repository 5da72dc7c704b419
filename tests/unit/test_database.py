"""Unit tests for sqlcrud/infrastructure/database.py.

Settings parsing, engine/session factory construction and the declarative
base.  No database connection is required.
"""

from sqlalchemy import Column, Integer, String, Table, UniqueConstraint
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from sqlcrud.infrastructure import database
from sqlcrud.infrastructure.database import (
    Base,
    Settings,
    create_engine_from_settings,
    create_session_factory,
)


# --- Settings ---

def test_settings_default_url_uses_asyncpg(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert Settings(_env_file=None).database_url.startswith("postgresql+asyncpg://")


def test_settings_reads_database_url_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///repo.db")
    assert Settings(_env_file=None).database_url == "sqlite+aiosqlite:///repo.db"


def test_settings_echo_and_pre_ping_defaults(monkeypatch):
    monkeypatch.delenv("DATABASE_ECHO", raising=False)
    monkeypatch.delenv("DATABASE_POOL_PRE_PING", raising=False)
    settings = Settings(_env_file=None)
    assert settings.database_echo is False
    assert settings.database_pool_pre_ping is True


def test_settings_reads_echo_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_ECHO", "true")
    assert Settings(_env_file=None).database_echo is True


# --- engine / session factory ---

def test_engine_is_built_from_settings():
    engine = create_engine_from_settings(
        Settings(_env_file=None, database_url="sqlite+aiosqlite://", database_echo=True)
    )
    assert isinstance(engine, AsyncEngine)
    assert engine.url.drivername == "sqlite+aiosqlite"
    assert engine.echo is True


def test_session_factory_binds_engine_and_keeps_objects_after_commit():
    engine = create_engine_from_settings(
        Settings(_env_file=None, database_url="sqlite+aiosqlite://")
    )
    factory = create_session_factory(engine)
    assert isinstance(factory, async_sessionmaker)
    assert factory.class_ is AsyncSession
    assert factory.kw["bind"] is engine
    assert factory.kw["expire_on_commit"] is False


def test_module_session_factory_uses_module_engine():
    assert database.AsyncSessionLocal.kw["bind"] is database.engine


# --- declarative base ---

def test_base_is_declarative_base():
    assert issubclass(Base, DeclarativeBase)


def test_base_metadata_names_unique_constraints():
    table = Table(
        "naming_rows",
        Base.metadata,
        Column("id", Integer, primary_key=True),
        Column("code", String(8)),
        UniqueConstraint("code"),
    )
    try:
        unique = next(c for c in table.constraints if isinstance(c, UniqueConstraint))
        assert unique.name == "uq_naming_rows_code"
    finally:
        Base.metadata.remove(table)

from sqlalchemy import inspect, text

from eventlog.db import get_engine
from eventlog.models import Base


def test_migrations_reach_head():
    with get_engine().connect() as conn:
        version = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
    assert version == "0001_create_users_and_logs"


def test_migrated_schema_matches_models():
    inspector = inspect(get_engine())
    for table in Base.metadata.sorted_tables:
        migrated = {column["name"] for column in inspector.get_columns(table.name)}
        assert migrated == set(table.columns.keys()), table.name


def test_log_lookup_indexes_exist():
    indexes = {index["name"] for index in inspect(get_engine()).get_indexes("logs")}
    assert {"ix_logs_uuid", "ix_logs_object_uuid", "ix_logs_event_at"} <= indexes

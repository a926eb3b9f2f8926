"""
The Alembic revision must produce the same tables as the SQLAlchemy models.
"""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from ragdesk.web.database import Base
from ragdesk.web import models  # noqa: F401

REVISION = Path(__file__).resolve().parents[2] / "backend" / "alembic" / "versions" / "001_initial.py"


@pytest.fixture
def revision():
    spec = importlib.util.spec_from_file_location("revision_001_initial", REVISION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()


def _run(engine, fn):
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            fn()


class TestInitialRevision:

    def test_upgrade_matches_models(self, revision, engine):
        _run(engine, revision.upgrade)

        inspector = inspect(engine)
        assert set(inspector.get_table_names()) == {"projects", "issues", "inquiries"}
        for table in Base.metadata.sorted_tables:
            migrated = {c["name"] for c in inspector.get_columns(table.name)}
            assert migrated == set(table.columns.keys()), table.name

    def test_downgrade_drops_everything(self, revision, engine):
        _run(engine, revision.upgrade)
        _run(engine, revision.downgrade)

        assert inspect(engine).get_table_names() == []

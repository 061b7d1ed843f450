"""Shared pytest fixtures"""

import pytest
from pony.orm import db_session

from relay_engine import db


@pytest.fixture(scope="session", autouse=True)
def database(tmp_path_factory):
    """Bind Pony to a throwaway SQLite file for the whole session"""
    filename = str(tmp_path_factory.mktemp("db") / "relay_engine.sqlite")
    db.init_db(provider="sqlite", filename=filename, create_db=True)
    return db.db


@pytest.fixture(autouse=True)
def clean_tables(database):
    with db_session:
        db.Job.select().delete(bulk=True)
        db.Cursor.select().delete(bulk=True)
    yield


@pytest.fixture
def job_created_payload():
    return {
        "job_id": "7",
        "creator": "0xA",
        "pool_id": "3",
        "price": "1000000",
        "buyer_public_key": [1, 2, 3],
        "epochs": "10",
        "learning_rate": "100",
    }

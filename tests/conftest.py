from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from sqlchat.history import customer_queries, metadata


class FakeGenerator:
    """Returns a canned LLM answer and records every prompt."""

    def __init__(self, response="SELECT 1", error=None):
        self.response = response
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class FakeDatabase:
    """Returns canned rows and records every statement it is asked to run."""

    def __init__(self, rows=None, error=None):
        self.rows = rows if rows is not None else []
        self.error = error
        self.statements = []

    def execute(self, sql):
        self.statements.append(sql)
        if self.error is not None:
            raise self.error
        return self.rows


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded_history(sqlite_engine):
    """customer_queries rows inserted out of date order."""
    rows = [
        {"query_text": "middle", "response_text": "b", "query_date": datetime(2024, 5, 2, 9, 0)},
        {"query_text": "oldest", "response_text": "a", "query_date": datetime(2024, 1, 1, 8, 0)},
        {"query_text": "newest", "response_text": "c", "query_date": datetime(2024, 9, 30, 17, 45)},
    ]
    with sqlite_engine.begin() as conn:
        conn.execute(customer_queries.insert(), rows)
    return sqlite_engine

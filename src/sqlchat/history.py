import logging
from typing import Any, Dict, List

from sqlalchemy import Column, DateTime, Integer, MetaData, Table, Text, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .errors import ExecutionFailed

logger = logging.getLogger(__name__)

metadata = MetaData()

customer_queries = Table(
    "customer_queries",
    metadata,
    Column("query_id", Integer, primary_key=True, autoincrement=True),
    Column("query_date", DateTime, nullable=False),
    Column("query_text", Text, nullable=False),
    Column("response_text", Text),
)


class HistoryStore:
    """Chat history kept in the ``customer_queries`` table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def store(self, user_input: str, bot_response: str) -> None:
        stmt = insert(customer_queries).values(
            query_text=user_input,
            query_date=func.now(),
            response_text=bot_response,
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Error storing history in the database: %s", e)
            raise ExecutionFailed(details=str(e), message="Database error") from e

    def fetch(self) -> List[Dict[str, Any]]:
        stmt = select(
            customer_queries.c.query_text,
            customer_queries.c.query_date,
            customer_queries.c.response_text,
        ).order_by(customer_queries.c.query_date.desc())
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            logger.error("Error fetching chat history: %s", e)
            raise ExecutionFailed(details=str(e), message="Database error") from e
        return [dict(r) for r in rows]

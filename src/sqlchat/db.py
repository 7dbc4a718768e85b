import logging
from typing import Any, Dict, List

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from .config import Settings, mysql_url

logger = logging.getLogger(__name__)


def create_mysql_engine(cfg: Settings) -> Engine:
    """Pooled engine for the configured MySQL database."""
    return create_engine(mysql_url(cfg), echo=cfg.SQLALCHEMY_ECHO, pool_pre_ping=True)


class Database:
    """
    Runs generated SQL on a SQLAlchemy engine.

    The statement goes to the driver verbatim: no bind parameters and no
    ``%`` interpolation, since the SQL text is itself the generated artifact.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def execute(self, sql: str) -> List[Dict[str, Any]]:
        with self.engine.begin() as conn:
            result = conn.execution_options(no_parameters=True).exec_driver_sql(sql)
            if not result.returns_rows:
                logger.debug("Statement affected %s row(s)", result.rowcount)
                return []
            return [dict(row) for row in result.mappings().all()]

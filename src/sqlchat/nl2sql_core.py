import logging
import re
from typing import Any, Dict, List, Optional, Protocol

from fastapi.concurrency import run_in_threadpool

from .errors import ExecutionFailed, GenerationFailed, InvalidInput
from .schema import DEFAULT_SCHEMA, SchemaDescriptor

logger = logging.getLogger(__name__)

Rows = List[Dict[str, Any]]


# =========================
# 1) Collaborator contracts
# =========================

class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str:
        ...


class SqlDatabase(Protocol):
    def execute(self, sql: str) -> Rows:
        ...


# =========================
# 2) Prompt Builder
# =========================

def build_prompt(user_query: str, schema: SchemaDescriptor = DEFAULT_SCHEMA) -> str:
    """
    Build the prompt sent to the LLM. The schema is embedded in-band because
    the model has no other way to learn table and column names.
    """
    return (
        f"Generate a MySQL-compatible SQL query based on this unstructured query: '{user_query}'.\n"
        f"Use the following table schema: {schema.to_json()}.\n"
        "Make sure the query uses MySQL syntax, including date functions such as NOW() and DATE_SUB().\n"
        "Return only the SQL statement."
    )


# =========================
# 3) SQL Extractor
# =========================

# An opening fence keeps its language tag only when the tag is sql/mysql or a
# non-keyword word closing the line, so "```SELECT 1```" and "```SELECT\n..."
# keep their SELECT.
_SQL_LEADING_KEYWORDS = (
    "select|with|show|describe|desc|explain|insert|update|delete|replace"
    "|create|drop|alter|truncate|call|set|use|values|table"
)
_FENCE_RE = re.compile(
    r"```(?:(?:my)?sql\b|(?!(?:" + _SQL_LEADING_KEYWORDS + r")\b)[\w+#.-]+(?=[ \t]*(?:\r?\n|$)))?",
    re.IGNORECASE,
)


def extract_sql(raw_text: str) -> str:
    """Remove markdown code fences and surrounding whitespace from LLM output."""
    return _FENCE_RE.sub("", str(raw_text)).strip()


# =========================
# 4) Read-only guard (opt-in)
# =========================

_READ_ONLY_PREFIXES = ("SELECT", "WITH", "SHOW", "DESCRIBE", "DESC", "EXPLAIN")
_WRITE_KEYWORDS = re.compile(
    r"\b(INSERT|UPDATE|DELETE|DROP|ALTER|CREATE|TRUNCATE|REPLACE|GRANT|REVOKE|RENAME)\b",
    re.IGNORECASE,
)
_STRING_LITERAL = re.compile(r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"")


def is_read_only(sql: str) -> bool:
    """
    Keyword-level check that a statement only reads data.
    This is a coarse filter, not a SQL parser.
    """
    stripped = _STRING_LITERAL.sub("''", sql or "").strip().rstrip(";").strip()
    if not stripped:
        return False
    first = stripped.split(None, 1)[0].upper()
    if first not in _READ_ONLY_PREFIXES:
        return False
    if ";" in stripped:
        return False
    return not _WRITE_KEYWORDS.search(stripped)


# =========================
# 5) Query Pipeline
# =========================

class QueryPipeline:
    """
    Question in, rows out:
      1) build the prompt from the question and the schema
      2) ask the LLM for SQL
      3) strip the markdown fences
      4) run the SQL as a literal statement
      5) hand the rows back untouched
    """

    def __init__(
        self,
        generator: TextGenerator,
        database: SqlDatabase,
        schema: SchemaDescriptor = DEFAULT_SCHEMA,
        read_only: bool = False,
    ):
        self.generator = generator
        self.database = database
        self.schema = schema
        self.read_only = read_only

    async def generate_sql(self, user_query: str) -> str:
        prompt = build_prompt(user_query, self.schema)
        try:
            raw = await run_in_threadpool(self.generator.generate, prompt)
        except Exception as e:
            logger.exception("SQL generation failed for query %r", user_query)
            raise GenerationFailed(details=str(e)) from e

        if not isinstance(raw, str):
            logger.error("LLM returned a non-text payload: %r", raw)
            raise GenerationFailed(details="LLM returned no text")

        sql = extract_sql(raw)
        logger.info("Generated SQL Query: %s", sql)
        return sql

    async def execute_sql(self, sql: str) -> Rows:
        if self.read_only and not is_read_only(sql):
            logger.error("Rejected non read-only SQL: %s", sql)
            raise ExecutionFailed(details="Only read-only statements are allowed")

        try:
            rows = await run_in_threadpool(self.database.execute, sql)
        except Exception as e:
            logger.error("SQL execution error: %s", e)
            raise ExecutionFailed(details=str(e)) from e

        logger.debug("Database query returned %d row(s)", len(rows))
        return rows

    async def handle_query(self, user_query: Optional[Any]) -> Rows:
        if not isinstance(user_query, str):
            raise InvalidInput(details="'query' must be a string", message="query is required")

        sql = await self.generate_sql(user_query)
        return await self.execute_sql(sql)

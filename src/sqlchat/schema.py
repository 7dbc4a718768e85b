# schema.py

import json
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Tuple


@dataclass(frozen=True)
class TableSchema:
    table_name: str
    columns: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {"table_name": self.table_name, "columns": list(self.columns)}


class SchemaDescriptor:
    """
    Ordered, immutable description of the tables the LLM is allowed to know about.
    It is serialized into every prompt, so it is the only view of the database
    the model ever gets.
    """

    __slots__ = ("_tables",)

    def __init__(self, tables: Iterable[TableSchema]):
        tables = tuple(tables)
        if not tables:
            raise ValueError("A schema descriptor needs at least one table.")
        self._tables: Tuple[TableSchema, ...] = tables

    @classmethod
    def from_mapping(cls, mapping: Sequence[dict]) -> "SchemaDescriptor":
        """Build from a list of ``{"table_name": ..., "columns": [...]}`` dicts."""
        return cls(
            TableSchema(table_name=t["table_name"], columns=tuple(t["columns"]))
            for t in mapping
        )

    @property
    def tables(self) -> Tuple[TableSchema, ...]:
        return self._tables

    @property
    def table_names(self) -> Tuple[str, ...]:
        return tuple(t.table_name for t in self._tables)

    def __iter__(self) -> Iterator[TableSchema]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SchemaDescriptor):
            return NotImplemented
        return self._tables == other._tables

    def __hash__(self) -> int:
        return hash(self._tables)

    def to_json(self) -> str:
        return json.dumps([t.to_dict() for t in self._tables])


DEFAULT_SCHEMA = SchemaDescriptor(
    [
        TableSchema(
            "sales_data",
            ("sale_id", "product_id", "quantity_sold", "sale_date", "total_price"),
        ),
        TableSchema(
            "products",
            ("product_id", "name", "category", "price", "stock_quantity"),
        ),
        TableSchema(
            "customer_queries",
            ("query_id", "query_date", "query_text", "response_text"),
        ),
    ]
)

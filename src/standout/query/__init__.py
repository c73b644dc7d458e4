"""Filter, sort and page in-memory collections."""

from .clause import Clause
from .op import Op
from .ordering import Direction, OrderBy, compare_values
from .query import Query, default_accessor
from .value import Timestamp, Value, ValueKind, enum_discriminant

__all__ = [
    "Clause",
    "Direction",
    "Op",
    "OrderBy",
    "Query",
    "Timestamp",
    "Value",
    "ValueKind",
    "compare_values",
    "default_accessor",
    "enum_discriminant",
]

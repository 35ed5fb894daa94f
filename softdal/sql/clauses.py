"""
Condition and ordering value objects, plus the WHERE / ORDER BY renderers.

The soft-delete policy lives here: `render_where` always prepends
`deleted_at IS NULL` unless the caller opts in to soft-deleted rows, so no
SELECT or COUNT built by this package can forget it.

Accepted `where` shapes (normalised to a list of Condition):
  - None
  - [Condition("title", "LIKE", "%a%"), ...]
  - [("title", "LIKE", "%a%"), ("id", "in", [1, 2])]
  - {"is_active": True, "type": "TOP_10"}          (equality)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from softdal.errors import InvalidQueryError
from softdal.sql.dialect import DEFAULT_DIALECT, Dialect

SOFT_DELETE_COLUMN = "deleted_at"
SOFT_DELETE_CONDITION = f"{SOFT_DELETE_COLUMN} IS NULL"

OPERATORS = frozenset(
    {"=", "!=", "<>", ">", "<", ">=", "<=", "LIKE", "NOT LIKE", "IN", "NOT IN"}
)
_LIST_OPERATORS = frozenset({"IN", "NOT IN"})
DIRECTIONS = frozenset({"ASC", "DESC"})


@dataclass(frozen=True)
class Condition:
    column: str
    operator: str
    value: Any = None

    def __post_init__(self) -> None:
        op = " ".join(str(self.operator).split()).upper()
        if op == "==":
            op = "="
        if op not in OPERATORS:
            raise InvalidQueryError(
                f"Unsupported operator {self.operator!r} for column {self.column!r}"
            )
        if op in _LIST_OPERATORS and not isinstance(self.value, (list, tuple, set, frozenset)):
            raise InvalidQueryError(f"{op} on {self.column!r} requires a list of values")
        object.__setattr__(self, "operator", op)


@dataclass(frozen=True)
class OrderSpec:
    column: str
    direction: str = "ASC"

    def __post_init__(self) -> None:
        direction = str(self.direction).strip().upper()
        if direction not in DIRECTIONS:
            raise InvalidQueryError(
                f"Unsupported order direction {self.direction!r} for column {self.column!r}"
            )
        object.__setattr__(self, "direction", direction)


WhereInput = Union[None, Mapping[str, Any], Sequence[Union[Condition, Tuple[str, str, Any]]]]
OrderInput = Union[None, Sequence[Union[OrderSpec, Tuple[str, str], str]]]

DEFAULT_ORDER: Tuple[OrderSpec, ...] = (OrderSpec("created_at", "DESC"),)


@dataclass(frozen=True)
class FindOptions:
    """
    Options for find_all / find_by_search.

    Defaults:
      columns              None  -> SELECT *
      where                None  -> no caller conditions
      order_by             None  -> created_at DESC; pass [] for no ORDER BY
      pagination           None  -> plain list; {"page": .., "limit": ..} -> PaginatedResult
      include_soft_deleted False -> deleted_at IS NULL is enforced
    """

    columns: Optional[Sequence[str]] = None
    where: WhereInput = None
    order_by: OrderInput = None
    pagination: Optional[Any] = None
    include_soft_deleted: bool = False
    conditions: List[Condition] = field(init=False, repr=False)
    ordering: List[OrderSpec] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", normalize_conditions(self.where))
        ordering = list(DEFAULT_ORDER) if self.order_by is None else normalize_order(self.order_by)
        object.__setattr__(self, "ordering", ordering)


def normalize_conditions(where: WhereInput) -> List[Condition]:
    if where is None:
        return []
    if isinstance(where, Mapping):
        return [Condition(str(column), "=", value) for column, value in where.items()]

    out: List[Condition] = []
    for item in where:
        if isinstance(item, Condition):
            out.append(item)
        elif isinstance(item, (tuple, list)) and len(item) == 3:
            column, operator, value = item
            out.append(Condition(str(column), str(operator), value))
        else:
            raise InvalidQueryError(f"Cannot interpret where item {item!r}")
    return out


def normalize_order(order_by: Iterable[Union[OrderSpec, Tuple[str, str], str]]) -> List[OrderSpec]:
    out: List[OrderSpec] = []
    for item in order_by:
        if isinstance(item, OrderSpec):
            out.append(item)
        elif isinstance(item, str):
            # "col" or "col desc"
            parts = item.split()
            if not parts or len(parts) > 2:
                raise InvalidQueryError(f"Cannot interpret order item {item!r}")
            out.append(OrderSpec(parts[0], parts[1] if len(parts) == 2 else "ASC"))
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            out.append(OrderSpec(str(item[0]), str(item[1])))
        else:
            raise InvalidQueryError(f"Cannot interpret order item {item!r}")
    return out


def render_condition(condition: Condition, dialect: Dialect = DEFAULT_DIALECT) -> Tuple[str, List[Any]]:
    """Render one condition to SQL text and the parameters it consumes."""
    col, op, value = condition.column, condition.operator, condition.value

    if op in _LIST_OPERATORS:
        values = list(value)
        if not values:
            # IN () is invalid SQL; an empty IN matches nothing, an empty NOT IN everything
            return ("1 = 0" if op == "IN" else "1 = 1"), []
        return f"{col} {op} ({dialect.placeholders(len(values))})", values

    if value is None and op in ("=", "!=", "<>"):
        return f"{col} {'IS NULL' if op == '=' else 'IS NOT NULL'}", []

    return f"{col} {op} {dialect.placeholder}", [value]


def render_where(
    conditions: Sequence[Condition],
    *,
    include_soft_deleted: bool = False,
    dialect: Dialect = DEFAULT_DIALECT,
) -> Tuple[str, List[Any]]:
    """
    Build " WHERE ..." (or "") and its parameter list.

    The soft-delete condition is always first so the parameter order matches
    the caller's declaration order exactly.
    """
    clauses: List[str] = []
    params: List[Any] = []

    if not include_soft_deleted:
        clauses.append(SOFT_DELETE_CONDITION)

    for condition in conditions:
        sql, values = render_condition(condition, dialect)
        clauses.append(sql)
        params.extend(values)

    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def render_order_by(ordering: Sequence[OrderSpec]) -> str:
    if not ordering:
        return ""
    return " ORDER BY " + ", ".join(f"{o.column} {o.direction}" for o in ordering)


__all__ = [
    "Condition",
    "OrderSpec",
    "FindOptions",
    "OPERATORS",
    "DIRECTIONS",
    "DEFAULT_ORDER",
    "SOFT_DELETE_COLUMN",
    "SOFT_DELETE_CONDITION",
    "normalize_conditions",
    "normalize_order",
    "render_condition",
    "render_where",
    "render_order_by",
]

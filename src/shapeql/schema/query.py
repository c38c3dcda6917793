"""Query model: resource listings, value statistics and facet items."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from shapeql.schema.common import format_path, parse_path, to_step
from shapeql.schema.shape import Shape, _limit, _shape

if TYPE_CHECKING:
    from shapeql.compiler.sparql import QueryProbe

V = TypeVar("V")


def _path(steps) -> tuple:
    if steps is None or isinstance(steps, (str, bytes)):
        raise TypeError("path must be a sequence of steps")
    return tuple(to_step(step) for step in steps)


@dataclass(frozen=True)
class Order:
    """Sorting criterion: a path from the focus and a direction.

    String form is ``+`` (increasing) or ``-`` (decreasing) followed by the
    path steps joined by ``/``, e.g. ``-ex:name/ex:value``.
    """

    path: tuple = ()
    inverse: bool = False

    def __post_init__(self):
        object.__setattr__(self, "path", _path(self.path))
        if not isinstance(self.inverse, bool):
            raise TypeError("inverse flag must be a bool")

    def format(self) -> str:
        return ("-" if self.inverse else "+") + format_path(self.path)

    def __str__(self) -> str:
        return self.format()


def increasing(*steps) -> Order:
    return Order(steps, False)


def decreasing(*steps) -> Order:
    return Order(steps, True)


def format_order(order: Order) -> str:
    return order.format()


def parse_order(source: str) -> Order:
    """Parse ``[+|-]path``; a missing sign means increasing."""
    if not isinstance(source, str):
        raise TypeError("order must be a string")

    source = source.strip()

    if source.startswith("-"):
        return Order(parse_path(source[1:]), True)
    if source.startswith("+"):
        return Order(parse_path(source[1:]), False)
    return Order(parse_path(source), False)


class Query(ABC):
    """Base class of query variants."""

    shape: Shape

    @abstractmethod
    def accept(self, probe: QueryProbe[V]) -> V: ...


@dataclass(frozen=True)
class Edges(Query):
    """Resources matching ``shape``, sorted and paginated.

    A zero ``limit`` means no limit.
    """

    shape: Shape
    orders: tuple = ()
    offset: int = 0
    limit: int = 0

    def __post_init__(self):
        _shape(self.shape)
        if self.orders is None or isinstance(self.orders, (str, Order)):
            raise TypeError("orders must be a sequence of Order")
        orders = tuple(self.orders)
        for order in orders:
            if not isinstance(order, Order):
                raise TypeError(f"expected Order, got {type(order).__name__}")
        object.__setattr__(self, "orders", orders)
        _limit(self.offset, 0, "offset")
        _limit(self.limit, 0, "limit")

    def accept(self, probe):
        return probe.probe_edges(self)


@dataclass(frozen=True)
class Stats(Query):
    """Count and range of the values reachable along ``path``, grouped by type."""

    shape: Shape
    path: tuple = ()

    def __post_init__(self):
        _shape(self.shape)
        object.__setattr__(self, "path", _path(self.path))

    def accept(self, probe):
        return probe.probe_stats(self)


@dataclass(frozen=True)
class Items(Query):
    """Distinct values reachable along ``path`` with their labels and counts."""

    shape: Shape
    path: tuple = ()

    def __post_init__(self):
        _shape(self.shape)
        object.__setattr__(self, "path", _path(self.path))

    def accept(self, probe):
        return probe.probe_items(self)


def edges(shape: Shape, *orders: Order, offset: int = 0, limit: int = 0) -> Edges:
    return Edges(shape, orders, offset, limit)


def stats(shape: Shape, *steps) -> Stats:
    return Stats(shape, steps)


def items(shape: Shape, *steps) -> Items:
    return Items(shape, steps)

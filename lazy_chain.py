"""
Lazy operation chains over in-memory sequences.

Steps added with map()/filter() are only recorded. Nothing touches the source
until a terminal operation (collect, find, find_first, for_each, reduce,
count or plain iteration) walks it once, pushing every element through all
recorded steps in order.
"""

import logging
import operator
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")


@dataclass(frozen=True)
class Map:
    """Replace the working value with transform(value)."""
    transform: Callable[[Any], Any]


@dataclass(frozen=True)
class Filter:
    """Drop the element unless predicate(value) holds."""
    predicate: Callable[[Any], bool]


Operation = Union[Map, Filter]


@dataclass(frozen=True)
class Produced:
    """An element that made it through every step."""
    value: Any


class _Filtered:
    """Marker outcome for an element dropped by a Filter step."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "FILTERED"


FILTERED = _Filtered()

Outcome = Union[Produced, _Filtered]


def process_item(operations: Tuple[Operation, ...], item: Any) -> Outcome:
    """Run one source element through the operations, in registration order."""
    value = item
    for op in operations:
        if isinstance(op, Map):
            value = op.transform(value)
        elif isinstance(op, Filter):
            if not op.predicate(value):
                return FILTERED
        else:
            raise TypeError(f"Unknown operation: {op!r}")
    return Produced(value)


def _require_callable(fn, what):
    if not callable(fn):
        raise TypeError(f"{what} must be callable, got {type(fn).__name__}")
    return fn


class Chain(Generic[T, U]):
    """
    An immutable, chainable view over a source sequence.

    T is the source element type, U the element type after all pending
    operations. Every chaining call returns a new Chain; the receiver is
    never modified and can be consumed any number of times.
    """

    __slots__ = ("_source", "_ops")

    def __init__(self, source: Sequence, operations: Tuple[Operation, ...] = ()):
        if not isinstance(source, Sequence):
            # one-shot iterables would be exhausted by the first terminal call
            logger.debug("Materializing %s source into a list", type(source).__name__)
            source = list(source)
        self._source = source
        self._ops = tuple(operations)

    @property
    def source(self) -> Sequence:
        return self._source

    @property
    def operations(self) -> Tuple[Operation, ...]:
        return self._ops

    # --------- chainable operators (lazy) ----------
    def map(self, transform: Callable[[U], V]) -> "Chain[T, V]":
        _require_callable(transform, "transform")
        return Chain(self._source, self._ops + (Map(transform),))

    def filter(self, predicate: Callable[[U], bool]) -> "Chain[T, U]":
        _require_callable(predicate, "predicate")
        return Chain(self._source, self._ops + (Filter(predicate),))

    # --------- source views (copy, operations unchanged) ----------
    def first(self, n: int) -> "Chain[T, U]":
        """Keep the first n source elements. Negative n gives an empty source."""
        n = max(operator.index(n), 0)
        return Chain(list(self._source[:n]), self._ops)

    def last(self, n: int) -> "Chain[T, U]":
        """Keep the last n source elements, in their original order."""
        n = max(operator.index(n), 0)
        start = max(len(self._source) - n, 0)
        return Chain(list(self._source[start:]), self._ops)

    def reverse(self) -> "Chain[T, U]":
        """
        Reverse the raw source. Pending operations then see the elements in
        reversed order: wrap([1, 2, 3]).map(f).reverse() runs f on 3, 2, 1.
        """
        return Chain(list(reversed(self._source)), self._ops)

    # --------- terminal operations ----------
    def __iter__(self) -> Iterator[U]:
        ops = self._ops
        for item in self._source:
            outcome = process_item(ops, item)
            if outcome is not FILTERED:
                yield outcome.value

    def collect(self) -> List[U]:
        logger.debug("collect: %d source items, %d operations", len(self._source), len(self._ops))
        return list(self)

    def find(self, predicate: Callable[[U], bool], default: Optional[U] = None) -> Optional[U]:
        """Return the first surviving element matching predicate, or default."""
        logger.debug("find over %d source items", len(self._source))
        for value in self:
            if predicate(value):
                return value
        return default

    def find_first(self, default: Optional[U] = None) -> Optional[U]:
        """
        Processed value of the first source element.

        Only the first source element is looked at: if the pending filters
        drop it, default is returned and later elements are not consulted.
        An empty source also gives default.
        """
        if len(self._source) == 0:
            return default
        outcome = process_item(self._ops, self._source[0])
        if outcome is FILTERED:
            return default
        return outcome.value

    def for_each(self, action: Callable[[U], Any]) -> None:
        logger.debug("for_each over %d source items", len(self._source))
        for value in self:
            action(value)

    def reduce(self, combine: Callable[[V, U], V], initial: V) -> V:
        """Left fold of combine(acc, value) over surviving elements, seeded with initial."""
        logger.debug("reduce over %d source items", len(self._source))
        acc = initial
        for value in self:
            acc = combine(acc, value)
        return acc

    def count(self) -> int:
        """Number of elements surviving every filter."""
        return len(self.collect())

    def __repr__(self):
        return f"Chain(source={len(self._source)} items, operations={len(self._ops)})"


def wrap(source) -> Chain:
    """Start a chain over source with no pending operations."""
    return Chain(source)

"""Core deferred value types.

This module defines the foundational value model used during synthesis.
It distinguishes between fully resolved values and deferred cells whose
producers are only invoked once the construct tree has been finalized.

A cell is an explicit tagged state: either `Pending` (a producer has not
been run yet, or must be re-run) or `Resolved` (the cached result).
Resolution of nested structures is driven by `SynthesisContext`.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

LOG = logging.getLogger(__name__)

#: Scalars are fully resolved, atomic values that can be written
#: into a template directly.
type Scalar = str | int | float | bool

#: A value is resolved if it contains no deferred cells.
type Value = Scalar | Sequence['Value'] | Mapping[str, 'Value'] | None

#: Zero-argument producer of a deferred value.
type Producer[T] = Callable[[], T]

#: Resolution strategy of a cell.
#: `once` caches the first successful result, `always` re-invokes the
#: producer on every resolution (for producers reading mutable state).
type Strategy = Literal['once', 'always']

MAPPINGS = (dict,)
SCALARS = (str, int, float, bool)
SEQUENCES = (list, tuple)


@dataclass(frozen=True)
class Pending[T]:
    """State of a cell whose producer still has to run."""

    producer: 'Producer[T]'


@dataclass(frozen=True)
class Resolved[T]:
    """State of a cell holding its final value."""

    value: T


class Lazy[T]:
    """Deferred value cell.

    Wraps a zero-argument producer that is invoked on demand at
    synthesis time. Cells let constructs reference names and ARNs of
    resources whose physical identity is not known yet.

    Attributes:
        state: Either `Pending` or `Resolved`.
        strategy: Caching strategy, `once` or `always`.
        hint: Optional human-readable label used in errors and logs.
    """

    def __init__(self, producer: 'Producer[T]', *,
                 strategy: Strategy = 'once',
                 hint: str | None = None) -> None:
        """Initialize a pending cell.

        Args:
            producer: Callable computing the value.
            strategy: `once` to memoize the first result, `always` to
                recompute on every resolution.
            hint: Optional label of the produced value.

        Raises:
            TypeError: If the producer is not callable.
        """
        if not callable(producer):
            raise TypeError(f'{producer!r} is not a callable producer')

        self.state: Pending[T] | Resolved[T] = Pending(producer)
        self.strategy = strategy
        self.hint = hint

        self._producer = producer

    @classmethod
    def of(cls, value: T, *, hint: str | None = None) -> 'Lazy[T]':
        """Create a cell that is already resolved.

        Args:
            value: Final value of the cell.
            hint: Optional label of the value.

        Returns:
            A resolved cell.
        """
        cell = cls(lambda: value, hint=hint)
        cell.state = Resolved(value)

        return cell

    @property
    def resolved(self) -> bool:
        """Whether the cell holds a cached value."""
        return isinstance(self.state, Resolved)

    def resolve(self) -> T:
        """Compute (or return the cached) value of the cell.

        Returns:
            The produced value. It may itself be a deferred structure,
            deep resolution is the responsibility of the caller.

        Raises:
            Any exception raised by the producer. The cell stays pending.
        """
        if isinstance(self.state, Resolved):
            return self.state.value

        value = self._producer()
        LOG.debug('Resolved %s', self)

        if self.strategy == 'once':
            self.state = Resolved(value)

        return value

    def __repr__(self) -> str:
        """String representation."""
        status = 'resolved' if self.resolved else 'pending'
        label = f' {self.hint!r}' if self.hint else ''

        return f'<Lazy{label} {status}>'


#: A deferred value is either a final value or a cell producing it.
type Deferred[T] = T | Lazy[T]


def defer[T](producer: 'Producer[T]', *, strategy: Strategy = 'once',
             hint: str | None = None) -> Lazy[T]:
    """Wrap a producer into a deferred cell.

    Args:
        producer: Zero-argument callable computing the value.
        strategy: Caching strategy of the cell.
        hint: Optional label of the produced value.

    Returns:
        A pending cell.
    """
    return Lazy(producer, strategy=strategy, hint=hint)


def resolve[T](value: 'Deferred[T]') -> T:
    """Resolve a single deferred value one level deep.

    Final values are returned unchanged.

    Args:
        value: A cell or a final value.

    Returns:
        The value of the cell.

    Raises:
        Any exception raised by the producer.
    """
    if isinstance(value, Lazy):
        return value.resolve()

    return value


def is_deferred(value: Any) -> bool:  # noqa: ANN401
    """Check whether a value is a pending cell.

    Args:
        value: Any value.

    Returns:
        True for cells that still have to run their producer.
    """
    return isinstance(value, Lazy) and not value.resolved

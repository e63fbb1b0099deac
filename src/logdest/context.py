"""Synthesis-time value resolution.

This module defines the explicit resolution context of one synthesis
pass. The context walks nested structures and resolves deferred cells
into fully evaluated template values.
"""

from json import dumps
from typing import TYPE_CHECKING, Any, overload

from logdest.errors import ResolutionError
from logdest.settings import get_settings
from logdest.values import MAPPINGS, SCALARS, SEQUENCES, Deferred, Lazy, Value

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

if TYPE_CHECKING:
    from logdest.core.constructs import Stack
    from logdest.settings import Settings


class SynthesisContext:
    """Resolution context for deferred values.

    The context is created by the synthesis driver once the construct
    tree is locked, and is threaded through every resolution made during
    that pass. It is the only place where deep resolution happens; cells
    themselves only know how to run their own producer.

    Attributes:
        stack: Stack whose serialization rules apply, if any.
        settings: Runtime settings used for JSON serialization.
    """

    def __init__(self, stack: 'Stack | None' = None,
                 settings: 'Settings | None' = None) -> None:
        """Initialize a context.

        Args:
            stack: Stack being synthesized.
            settings: Settings overriding those of the stack.
        """
        self.stack = stack
        if settings is None:
            settings = stack.settings if stack is not None else get_settings()
        self.settings = settings

        self._active: list[Lazy[Any]] = []

    @overload
    def resolve[T: Value](self, value: 'Mapping[str, Deferred[T]]') -> 'Mapping[str, T]':
        ...  # pragma: no cover

    @overload
    def resolve[T: Value](self, value: 'Sequence[Deferred[T]]') -> 'Sequence[T]':
        ...  # pragma: no cover

    @overload
    def resolve[T: Value](self, value: 'Deferred[T]') -> T | None:
        ...  # pragma: no cover

    def resolve(self, value: Any) -> Any:
        """Resolve a deferred structure into a fully evaluated value.

        Args:
            value: Scalar, mapping, sequence, model exposing `to_json`
                or a deferred cell.

        Returns:
            A fully resolved value.

        Raises:
            TypeError: If a value (or mapping key) has an unsupported type.
            ResolutionError: If a cell produces itself.
            Any exception raised by deferred producers.
        """
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, Lazy):
            return self._resolve_cell(value)

        if isinstance(value, MAPPINGS):
            return {
                self._normalize_key(key): self.resolve(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                self.resolve(item)
                for item in value
            ]

        if callable(to_json := getattr(value, 'to_json', None)):
            return self.resolve(to_json())

        raise TypeError(f'{value!r} has unsupported type')

    def to_json_string(self, value: Any) -> str:  # noqa: ANN401
        """Resolve a value and serialize it as a JSON string.

        Args:
            value: Deferred structure to serialize.

        Returns:
            JSON string following the stack serialization rules.
        """
        indent = self.settings.json_indent
        separators = (',', ':') if indent is None else None

        return dumps(
            self.resolve(value),
            ensure_ascii=False,
            indent=indent,
            separators=separators,
            sort_keys=self.settings.sort_keys,
        )

    def _resolve_cell(self, cell: Lazy[Any]) -> Any:  # noqa: ANN401
        """Resolve a cell and whatever its producer returns."""
        if any(active is cell for active in self._active):
            chain = ' -> '.join(repr(item) for item in (*self._active, cell))
            raise ResolutionError(f'Deferred value depends on itself: {chain}')

        self._active.append(cell)
        try:
            return self.resolve(cell.resolve())
        finally:
            self._active.pop()

    @staticmethod
    def _normalize_key(value: Any) -> str:  # noqa: ANN401
        """Validate a mapping key.

        Raises:
            TypeError: If the provided key is not a string.
        """
        if not isinstance(value, str):
            raise TypeError(f'Can not use {value!r} as mapping key')

        return value

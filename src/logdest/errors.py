"""Core exception hierarchy.

This module defines base error types used across the library to report
malformed identifiers, construct tree misuse, deferred value resolution
failures and configuration file problems in a structured way.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump
from yaml.error import MarkedYAMLError

from logdest.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails, ValidationError

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2

FORMAT_REPLACER = '<deferred value>'
FORMAT_FILENAME = '<unicode string>'
FORMAT_INDENT = 4


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the configuration file where the error occurred.
    filename: str | None

    #: Line number in the configuration file.
    line_num: int | None
    #: Column number in the configuration file.
    column_num: int | None

    #: Construct path associated with the error.
    path: str | None
    #: Logical id of the resource being synthesized.
    logical_id: str | None

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Element associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting errors.

    Produces human-readable messages with optional location and
    YAML-based snippets of the failing element.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source and construct location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string.
        """
        indent = cls._ensure_indent(indent)
        message = ''

        if (filename := context.get('filename')) or context.get('line_num') is not None:
            message += f'{indent}in "{filename or FORMAT_FILENAME}"'
            if (line_num := context.get('line_num')) is not None:
                message += f', line {line_num + 1}'
                if (column_num := context.get('column_num')) is not None:
                    message += f', column {column_num + 1}'
            message += linesep

        if path := context.get('path'):
            message += f'{indent}at construct "{path}"'
            if logical_id := context.get('logical_id'):
                message += f' ({logical_id})'
            message += linesep

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing element or exception data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet, or an empty string.
        """
        indent = cls._ensure_indent(indent)

        if (error := context.get('error')) and isinstance(error, MarkedYAMLError):
            snippet = ''
            if error.problem_mark is not None:
                snippet = error.problem_mark.get_snippet(indent=0) or ''
            return cls._make_indent(snippet, indent)

        if element := context.get('element'):
            snippet = f'{indent}{SNIPPET_ELLIPSIS}'
            snippet += cls._make_yaml(element, indent)
            snippet += linesep
            return snippet

        return ''

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively replace deferred and opaque values with a placeholder."""
        if value is None or isinstance(value, SCALARS):
            return value

        if isinstance(value, MAPPINGS):
            return {
                key: cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, SEQUENCES):
            return [
                cls._filter_unsafe(item)
                for item in value
            ]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a sanitized value to a YAML-formatted string."""
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string, dropping blank lines."""
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation input."""
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class LogDestError(Exception, ErrorFormatter):
    """Base exception for all logdest errors.

    All custom exceptions raised by the library inherit from this
    class to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional location data.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String represenatation."""
        return self.format(self.message, self.context)


class MalformedArnError(LogDestError, ValueError):
    """Error raised when an ARN does not match the expected shape.

    Raised immediately (for example at import time) since there is no
    meaningful partial result of a malformed identifier.
    """

    def __init__(self, message: str, *, arn: str | None = None) -> None:
        """Initialize a malformed identifier error.

        Args:
            message: Human-readable error description.
            arn: The offending identifier.
        """
        self.arn = arn

        context = None
        if arn is not None:
            context = ErrorContext(element={'arn': arn})

        super().__init__(message, context=context)


class ConstructError(LogDestError):
    """Error raised for invalid construct tree operations.

    Covers invalid or duplicate construct ids, modification of a locked
    tree and conflicting logical ids within a stack.
    """


class PolicySealedError(LogDestError):
    """Error raised when a policy document is used out of order.

    Statements may only be added before the document is sealed, and the
    document may only be serialized after it is sealed.
    """


class ResolutionError(LogDestError):
    """Error raised when deferred values can not be resolved.

    For example, when a cell (transitively) produces itself.
    """


class SynthesisError(LogDestError):
    """Error raised when synthesis of a resource is aborted.

    The original exception raised by a producer is chained as
    `__cause__`.
    """


class ConfigError(LogDestError):
    """Error raised when a deployment file is invalid."""

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError) -> 'Self':
        """Create a configuration error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.

        Returns:
            ConfigError with the parser position attached.
        """
        error_context = ErrorContext(error=error)
        if (mark := error.problem_mark) is not None:
            error_context.update(
                filename=mark.name,
                line_num=mark.line,
                column_num=mark.column,
            )

        message = 'Invalid YAML'
        if error.problem:
            message += f'{linesep}{' ' * FORMAT_INDENT}{error.problem}'

        return cls(message, context=error_context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            filename: str | None = None) -> 'Self':
        """Create a configuration error from a Pydantic validation failure.

        The first located failure is reported together with a snippet of
        the smallest element containing it.

        Args:
            error: ValidationError raised by Pydantic.
            data: Validated document data.
            filename: Name of the configuration file.

        Returns:
            ConfigError representing the validation failure.
        """
        error_context = ErrorContext(filename=filename, error=error, element=data)

        if not data or not isinstance(data, dict):
            return cls('Type validation error', context=error_context)

        for item in error.errors(include_url=False, include_input=False):
            if located := cls._locate_pydantic_context(data, item):
                message, value = located
                return cls(message, context=ErrorContext({**error_context, 'element': value}))

        return cls('Validation error', context=error_context)

    @classmethod
    def _locate_pydantic_context(cls, value: Any,  # noqa: ANN401
                                 error: 'ErrorDetails') -> tuple[str, Any] | None:
        """Locate the most specific failing element in validated data.

        Args:
            value: Root data structure being validated.
            error: Pydantic error details including location path.

        Returns:
            A tuple of (error message, extracted element) if the location
            can be followed, otherwise None.
        """
        container = last_item = value
        last_key: int | str | None = None

        for key in error['loc']:
            if isinstance(last_item, list) and isinstance(key, int) and 0 <= key < len(last_item):
                container, last_item, last_key = last_item, last_item[key], key
            elif isinstance(last_item, dict) and key in last_item:
                container, last_item, last_key = last_item, last_item[key], key
            elif not isinstance(last_item, (list, dict)):
                return None

        message = next((
            line.strip()
            for line in (error.get('msg') or '').splitlines()
            if line.strip()
        ), None)

        if message is None:
            return None

        if last_key is None:
            return message, value

        if isinstance(container, list):
            return message, [last_item]

        return message, {last_key: last_item}

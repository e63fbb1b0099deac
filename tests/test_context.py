"""Tests for the synthesis context."""

import pytest

from logdest.context import SynthesisContext
from logdest.errors import ResolutionError
from logdest.iam import PolicyStatement
from logdest.settings import Settings
from logdest.values import Lazy, defer


def test_mapping_context_resolver() -> None:
    """Resolve a mapping holding cells."""
    context = SynthesisContext(settings=Settings())
    resolved = context.resolve({
        'value': defer(lambda: 20),
        'static': 'static_value',
    })

    assert resolved == {
        'value': 20,
        'static': 'static_value',
    }


@pytest.mark.parametrize('value', (
    pytest.param([1, 2, defer(lambda: 3), 4.0], id='list'),
    pytest.param((1, 2, defer(lambda: 3), 4.0), id='tuple'),
))
def test_sequence_context_resolver(value: list | tuple) -> None:
    """Resolve cells inside sequences."""
    context = SynthesisContext(settings=Settings())

    assert context.resolve(value) == [1, 2, 3, 4.0]


def test_nested_cells_resolver() -> None:
    """Resolve cells producing structures of cells."""
    name = defer(lambda: 'TestDestination')
    outer = defer(lambda: {'names': [name, defer(lambda: name)]})

    context = SynthesisContext(settings=Settings())

    assert context.resolve(outer) == {'names': ['TestDestination', 'TestDestination']}


def test_model_context_resolver() -> None:
    """Resolve models through their JSON form."""
    statement = PolicyStatement(
        actions=['logs:PutSubscriptionFilter'],
        resources=[defer(lambda: 'arn:aws:logs:us-east-1:123456789012:destination:Dest')],
    )

    context = SynthesisContext(settings=Settings())

    assert context.resolve(statement) == {
        'Action': 'logs:PutSubscriptionFilter',
        'Effect': 'Allow',
        'Resource': 'arn:aws:logs:us-east-1:123456789012:destination:Dest',
    }


def test_self_referencing_cell() -> None:
    """Detect a cell producing itself."""
    cell: Lazy = defer(lambda: cell, hint='loop')

    context = SynthesisContext(settings=Settings())

    with pytest.raises(ResolutionError, match=r'^Deferred value depends on itself'):
        context.resolve(cell)


def test_unsupported_type_context_resolver() -> None:
    """Reject values that can not be written into a template."""
    class NewType:
        pass

    context = SynthesisContext(settings=Settings())

    with pytest.raises(TypeError, match=r'has unsupported type$'):
        context.resolve(NewType())


def test_non_string_keys_context_resolver() -> None:
    """Reject non-string mapping keys."""
    context = SynthesisContext(settings=Settings())

    with pytest.raises(TypeError, match=r'^Can not use 42 as mapping key$'):
        context.resolve({42: 'value'})


@pytest.mark.parametrize('indent, sort_keys, expected', (
    pytest.param(None, False, '{"b":"x","a":[1,2]}', id='compact'),
    pytest.param(None, True, '{"a":[1,2],"b":"x"}', id='sorted'),
    pytest.param(0, False, '{\n"b": "x",\n"a": [\n1,\n2\n]\n}', id='indented'),
))
def test_to_json_string(indent: int | None, sort_keys: bool, expected: str) -> None:
    """Serialize resolved values following JSON settings."""
    context = SynthesisContext(settings=Settings(json_indent=indent, sort_keys=sort_keys))

    assert context.to_json_string({'b': defer(lambda: 'x'), 'a': [1, 2]}) == expected

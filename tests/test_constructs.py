"""Tests for the construct tree, resources and synthesis."""

from hashlib import md5

import pytest

from logdest.core import App, CfnResource, Construct, Stack, derive_name, make_unique_id
from logdest.errors import ConstructError, SynthesisError
from logdest.values import defer


def _hash(path: str) -> str:
    return md5(path.encode(), usedforsecurity=False).hexdigest()[:8].upper()


@pytest.mark.parametrize('requested_name, expected', (
    pytest.param('TestDestination', 'TestDestination', id='requested'),
    pytest.param('', 'DestStack-C6A1B2C3', id='empty'),
    pytest.param(None, 'DestStack-C6A1B2C3', id='absent'),
))
def test_derive_name(requested_name: str | None, expected: str) -> None:
    """Prefer non-empty requested names over generated ones."""
    assert derive_name(requested_name, 'DestStack', 'C6A1B2C3') == expected


@pytest.mark.parametrize('components, expected', (
    pytest.param(['Bucket'], 'Bucket', id='top level'),
    pytest.param(['My-Bucket'], 'MyBucket', id='non alphanumeric'),
    pytest.param(['Default', 'Bucket'], 'Bucket', id='default dropped'),
    pytest.param(
        ['TestDestination', 'Resource'],
        'TestDestination' + _hash('TestDestination/Resource'),
        id='hidden resource',
    ),
    pytest.param(
        ['Group', 'GroupFilter'],
        'GroupGroupFilter' + _hash('Group/GroupFilter'),
        id='nested',
    ),
    pytest.param(
        ['LogGroup', 'Group'],
        'LogGroup' + _hash('LogGroup/Group'),
        id='duplicate suffix',
    ),
))
def test_make_unique_id(components: list[str], expected: str) -> None:
    """Calculate logical ids from construct paths."""
    assert make_unique_id(components) == expected


def test_make_unique_id_empty_path() -> None:
    """Refuse to calculate ids of empty paths."""
    with pytest.raises(ConstructError):
        make_unique_id(['Default'])


def test_construct_paths(app: App, stack: Stack) -> None:
    """Build paths from construct ids."""
    parent = Construct(stack, 'Parent')
    child = Construct(parent, 'Child')

    assert child.path == 'DestinationStack/Parent/Child'
    assert child.root is app
    assert Stack.of(child) is stack
    assert stack.relative_path(child) == ['Parent', 'Child']
    assert list(app.walk()) == [app, stack, parent, child]


@pytest.mark.parametrize('construct_id', (
    pytest.param('', id='empty'),
    pytest.param('A/B', id='separator'),
))
def test_invalid_construct_id(stack: Stack, construct_id: str) -> None:
    """Reject invalid construct ids."""
    with pytest.raises(ConstructError, match=r'^Invalid construct id'):
        Construct(stack, construct_id)


def test_duplicate_construct_id(stack: Stack) -> None:
    """Reject sibling constructs with the same id."""
    Construct(stack, 'Child')

    with pytest.raises(ConstructError, match=r"^There is already a construct with id 'Child'"):
        Construct(stack, 'Child')


def test_construct_outside_stack(app: App) -> None:
    """Require resources to be defined within a stack."""
    with pytest.raises(ConstructError, match=r'is not defined within a stack$'):
        CfnResource(app, 'Orphan', resource_type='AWS::Logs::LogGroup')


def test_invalid_stack_name(app: App) -> None:
    """Reject stack names CloudFormation would refuse."""
    with pytest.raises(ConstructError, match=r'^Invalid stack name'):
        Stack(app, 'Stack', stack_name='1-invalid')


def test_stack_environment(app: App) -> None:
    """Default the environment from settings and derive the partition."""
    default = Stack(app, 'Default')
    china = Stack(app, 'China', account='210987654321', region='cn-north-1')

    assert (default.account, default.region, default.partition) == (
        '123456789012', 'us-east-1', 'aws',
    )
    assert (china.account, china.region, china.partition) == (
        '210987654321', 'cn-north-1', 'aws-cn',
    )


def test_synthesize_resources(app: App, stack: Stack) -> None:
    """Resolve properties and drop those resolving to `None`."""
    group = CfnResource(stack, 'Group', resource_type='AWS::Logs::LogGroup', properties={
        'LogGroupName': defer(lambda: 'my-group'),
        'RetentionInDays': None,
    })
    CfnResource(stack, 'Filter', resource_type='AWS::Logs::SubscriptionFilter', properties={
        'LogGroupName': group.ref,
        'FilterPattern': '',
    })
    CfnResource(stack, 'Empty', resource_type='AWS::CloudFormation::WaitConditionHandle')

    assert app.synth() == {
        'DestinationStack': {
            'Resources': {
                'Group': {
                    'Type': 'AWS::Logs::LogGroup',
                    'Properties': {'LogGroupName': 'my-group'},
                },
                'Filter': {
                    'Type': 'AWS::Logs::SubscriptionFilter',
                    'Properties': {'LogGroupName': {'Ref': 'Group'}, 'FilterPattern': ''},
                },
                'Empty': {
                    'Type': 'AWS::CloudFormation::WaitConditionHandle',
                },
            },
        },
    }


def test_get_att(app: App, stack: Stack) -> None:
    """Resolve attribute intrinsics with the final logical id."""
    stream = CfnResource(stack, 'Stream', resource_type='AWS::KinesisFirehose::DeliveryStream')
    CfnResource(stack, 'Consumer', resource_type='AWS::Logs::Destination', properties={
        'TargetArn': stream.get_att('Arn'),
    })
    stream.override_logical_id('TestFirehoseStream')

    template = app.synth()['DestinationStack']

    assert template['Resources']['Consumer']['Properties'] == {
        'TargetArn': {'Fn::GetAtt': ['TestFirehoseStream', 'Arn']},
    }


def test_tree_is_locked_by_synthesis(app: App, stack: Stack) -> None:
    """Forbid modifications once synthesis started."""
    resource = CfnResource(stack, 'Group', resource_type='AWS::Logs::LogGroup')
    app.synth()

    with pytest.raises(ConstructError, match=r'the construct tree is locked'):
        Construct(stack, 'Late')
    with pytest.raises(ConstructError, match=r'^Logical ids can not be changed'):
        resource.override_logical_id('Other')


def test_synthesize_requires_lock(stack: Stack) -> None:
    """Refuse to synthesize a stack of an unlocked tree."""
    with pytest.raises(ConstructError, match=r'must be locked before synthesis$'):
        stack.synthesize()


@pytest.mark.parametrize('logical_id', (
    pytest.param('My-Group', id='hyphen'),
    pytest.param('Ünï', id='non ascii'),
    pytest.param('', id='empty'),
))
def test_invalid_logical_id_override(stack: Stack, logical_id: str) -> None:
    """Reject logical ids that are not ASCII alphanumeric."""
    resource = CfnResource(stack, 'Group', resource_type='AWS::Logs::LogGroup')

    with pytest.raises(ConstructError, match=r'^Logical id must be alphanumeric'):
        resource.override_logical_id(logical_id)


def test_duplicate_logical_id(app: App, stack: Stack) -> None:
    """Reject two resources with the same logical id."""
    CfnResource(stack, 'Group', resource_type='AWS::Logs::LogGroup')
    other = CfnResource(stack, 'Other', resource_type='AWS::Logs::LogGroup')
    other.override_logical_id('Group')

    with pytest.raises(ConstructError, match=r"^Duplicate logical id 'Group'"):
        app.synth()


def test_producer_failure_aborts_synthesis(app: App, stack: Stack) -> None:
    """Abort synthesis with the original failure chained."""
    def fail() -> str:
        raise LookupError('name is not available')

    CfnResource(stack, 'Group', resource_type='AWS::Logs::LogGroup', properties={
        'LogGroupName': defer(fail),
    })

    with pytest.raises(SynthesisError, match=r'^Failed to synthesize AWS::Logs::LogGroup') as error:
        app.synth()

    assert isinstance(error.value.__cause__, LookupError)
    assert error.value.context['logical_id'] == 'Group'
    assert 'at construct "DestinationStack/Group" (Group)' in str(error.value)


def test_duplicate_stack_name(app: App, stack: Stack) -> None:
    """Reject stacks sharing a physical name."""
    Stack(app, 'A', stack_name='Same')

    with pytest.raises(ConstructError, match=r"^There is already a stack named 'Same'"):
        Stack(app, 'B', stack_name='Same')
    with pytest.raises(ConstructError, match=r"^There is already a stack named 'DestinationStack'"):
        Stack(app, 'Other', stack_name='DestinationStack')

    assert 'B' not in app.children
    assert [item.stack_name for item in app.stacks] == ['DestinationStack', 'Same']


def test_intrinsics_follow_late_override(app: App, stack: Stack) -> None:
    """Resolve intrinsics with the logical id final at synthesis."""
    group = CfnResource(stack, 'Group', resource_type='AWS::Logs::LogGroup')
    ref = group.ref

    assert ref.resolve() == {'Ref': 'Group'}

    CfnResource(stack, 'Filter', resource_type='AWS::Logs::SubscriptionFilter', properties={
        'LogGroupName': ref,
    })
    group.override_logical_id('Renamed')

    resources = app.synth()['DestinationStack']['Resources']

    assert resources['Filter']['Properties'] == {'LogGroupName': {'Ref': 'Renamed'}}

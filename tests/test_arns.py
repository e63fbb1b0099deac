"""Tests for ARN building and parsing."""

import pytest

from logdest.arns import ArnComponents, ArnFormat, build_arn, get_partition, parse_arn
from logdest.context import SynthesisContext
from logdest.errors import MalformedArnError
from logdest.settings import Settings
from logdest.values import Lazy, defer

ENVIRONMENT = {
    'account': '123456789012',
    'region': 'us-east-1',
    'partition': 'aws',
}


@pytest.mark.parametrize('arn_format, expected', (
    pytest.param(
        ArnFormat.COLON_RESOURCE_NAME,
        'arn:aws:logs:us-east-1:123456789012:destination:TestDestination',
        id='colon',
    ),
    pytest.param(
        ArnFormat.SLASH_RESOURCE_NAME,
        'arn:aws:logs:us-east-1:123456789012:destination/TestDestination',
        id='slash',
    ),
))
def test_build_literal_arn(arn_format: ArnFormat, expected: str) -> None:
    """Build an ARN from literal parts."""
    arn = build_arn('logs', 'destination', 'TestDestination', arn_format=arn_format, **ENVIRONMENT)

    assert arn == expected


def test_build_deferred_arn() -> None:
    """Build a deferred ARN when the resource name is deferred."""
    names = []
    name = defer(lambda: names[-1])

    arn = build_arn(
        'logs',
        'destination',
        name,
        arn_format=ArnFormat.COLON_RESOURCE_NAME,
        **ENVIRONMENT,
    )
    names.append('DestStack-C6A1B2C3')

    assert isinstance(arn, Lazy)
    assert SynthesisContext(settings=Settings()).resolve(arn) == (
        'arn:aws:logs:us-east-1:123456789012:destination:DestStack-C6A1B2C3'
    )


@pytest.mark.parametrize('arn_format', tuple(ArnFormat))
@pytest.mark.parametrize('service, resource, resource_name, region, account, partition', (
    pytest.param('logs', 'destination', 'TestDestination', 'us-east-1', '123456789012', 'aws', id='logs'),
    pytest.param('logs', 'destination', 'Dest-Stack_1.x', 'cn-north-1', '210987654321', 'aws-cn', id='china'),
    pytest.param('iam', 'role', 'service-role/Name', '', '123456789012', 'aws', id='global'),
))
def test_arn_round_trip(arn_format: ArnFormat, service: str, resource: str,  # noqa: PLR0913
                        resource_name: str, region: str, account: str, partition: str) -> None:
    """Extract the resource name of a built ARN."""
    arn = build_arn(
        service,
        resource,
        resource_name,
        account=account,
        region=region,
        partition=partition,
        arn_format=arn_format,
    )

    components = parse_arn(arn, arn_format)

    assert components.resource_name == resource_name
    assert components.format() == arn


def test_parse_colon_arn() -> None:
    """Split a destination ARN into its components."""
    components = parse_arn(
        'arn:aws:logs:us-east-1:123456789012:destination:TestDestination',
        ArnFormat.COLON_RESOURCE_NAME,
    )

    assert components == ArnComponents(
        partition='aws',
        service='logs',
        region='us-east-1',
        account='123456789012',
        resource='destination',
        resource_name='TestDestination',
        arn_format=ArnFormat.COLON_RESOURCE_NAME,
    )


@pytest.mark.parametrize('arn, arn_format, message', (
    pytest.param(
        'not-an-arn',
        ArnFormat.COLON_RESOURCE_NAME,
        r'^Not an ARN',
        id='not an arn',
    ),
    pytest.param(
        'urn:aws:logs:us-east-1:123456789012:destination:Dest',
        ArnFormat.COLON_RESOURCE_NAME,
        r'^Not an ARN',
        id='wrong prefix',
    ),
    pytest.param(
        'arn::logs:us-east-1:123456789012:destination:Dest',
        ArnFormat.COLON_RESOURCE_NAME,
        r'^ARN partition and service must not be empty',
        id='empty partition',
    ),
    pytest.param(
        'arn:aws:logs:us-east-1:123456789012:destination',
        ArnFormat.COLON_RESOURCE_NAME,
        r'^ARN resource name must not be empty',
        id='missing name',
    ),
    pytest.param(
        'arn:aws:logs:us-east-1:123456789012:destination/Dest',
        ArnFormat.COLON_RESOURCE_NAME,
        r'^Expected a colon between resource type and name',
        id='slash for colon',
    ),
    pytest.param(
        'arn:aws:logs:us-east-1:123456789012:destination:Dest',
        ArnFormat.SLASH_RESOURCE_NAME,
        r'^Expected a slash between resource type and name',
        id='colon for slash',
    ),
    pytest.param(
        'arn:aws:logs:us-east-1:123456789012::Dest',
        ArnFormat.COLON_RESOURCE_NAME,
        r'^ARN resource type must not be empty',
        id='empty resource type',
    ),
))
def test_malformed_arn(arn: str, arn_format: ArnFormat, message: str) -> None:
    """Reject identifiers that do not match the expected shape."""
    with pytest.raises(MalformedArnError, match=message) as error:
        parse_arn(arn, arn_format)

    assert error.value.arn == arn


def test_deferred_arn_can_not_be_parsed() -> None:
    """Reject deferred values where a literal ARN is required."""
    with pytest.raises(MalformedArnError, match=r'^Expected a literal ARN string'):
        parse_arn(defer(lambda: 'arn'), ArnFormat.COLON_RESOURCE_NAME)  # type: ignore[arg-type]


@pytest.mark.parametrize('region, partition', (
    pytest.param(None, 'aws', id='none'),
    pytest.param('us-east-1', 'aws', id='commercial'),
    pytest.param('cn-northwest-1', 'aws-cn', id='china'),
    pytest.param('us-gov-west-1', 'aws-us-gov', id='govcloud'),
    pytest.param('us-isob-east-1', 'aws-iso-b', id='iso-b'),
    pytest.param('aws-iso', 'aws-iso', id='partition name'),
))
def test_get_partition(region: str | None, partition: str) -> None:
    """Derive the partition of a region."""
    assert get_partition(region) == partition

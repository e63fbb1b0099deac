"""ARN formatting and parsing.

ARNs have the general shape::

    arn:{partition}:{service}:{region}:{account}:{resource}{sep}{resource_name}

where `{sep}` depends on the service convention (`ArnFormat`). Building an
ARN from parts that are still deferred yields a deferred ARN; parsing only
works on literal strings.
"""

from enum import StrEnum

from pydantic import Field

from logdest.errors import MalformedArnError
from logdest.models import SchemaModel
from logdest.values import Deferred, Lazy, resolve

DEFAULT_PARTITION = 'aws'
REGION_PREFIX_TO_PARTITION = {
    # (region prefix, aws partition)
    'cn-': 'aws-cn',
    'us-gov-': 'aws-us-gov',
    'us-iso-': 'aws-iso',
    'us-isob-': 'aws-iso-b',
}
PARTITION_NAMES = [*REGION_PREFIX_TO_PARTITION.values(), DEFAULT_PARTITION]

ARN_PREFIX = 'arn'
ARN_MIN_COMPONENTS = 6


class ArnFormat(StrEnum):
    """Separator convention between resource type and resource name."""

    #: `arn:aws:service:region:account:resource/resourceName`
    SLASH_RESOURCE_NAME = 'slash'
    #: `arn:aws:service:region:account:resource:resourceName`
    COLON_RESOURCE_NAME = 'colon'

    @property
    def separator(self) -> str:
        """Separator character of the convention."""
        if self is ArnFormat.SLASH_RESOURCE_NAME:
            return '/'
        return ':'


class ArnComponents(SchemaModel):
    """Decomposition of a literal ARN."""

    partition: str = Field(title='Partition', examples=['aws'])
    service: str = Field(title='Service namespace', examples=['logs'])
    region: str = Field(default='', title='Region', examples=['us-east-1'])
    account: str = Field(default='', title='Account', examples=['123456789012'])
    resource: str = Field(title='Resource type', examples=['destination'])
    resource_name: str = Field(title='Resource name', examples=['TestDestination'])
    arn_format: ArnFormat = Field(
        default=ArnFormat.SLASH_RESOURCE_NAME,
        title='Separator convention',
    )

    def format(self) -> str:
        """Join the components back into an ARN string."""
        return format_arn(
            self.service,
            self.resource,
            self.resource_name,
            account=self.account,
            region=self.region,
            partition=self.partition,
            arn_format=self.arn_format,
        )


def get_partition(region: str | None) -> str:
    """Return the partition a region belongs to.

    Args:
        region: Region name or partition name.

    Returns:
        The partition, `aws` when unknown.
    """
    if not region:
        return DEFAULT_PARTITION
    if region in PARTITION_NAMES:
        return region
    for prefix, partition in REGION_PREFIX_TO_PARTITION.items():
        if region.startswith(prefix):
            return partition
    return DEFAULT_PARTITION


def format_arn(service: str, resource: str, resource_name: str, *,  # noqa: PLR0913
               account: str, region: str, partition: str,
               arn_format: ArnFormat = ArnFormat.SLASH_RESOURCE_NAME) -> str:
    """Join literal parts into an ARN string."""
    return ':'.join((
        ARN_PREFIX,
        partition,
        service,
        region,
        account,
        f'{resource}{arn_format.separator}{resource_name}',
    ))


def build_arn(service: str, resource: str, resource_name: Deferred[str], *,  # noqa: PLR0913
              account: Deferred[str], region: Deferred[str], partition: Deferred[str],
              arn_format: ArnFormat = ArnFormat.SLASH_RESOURCE_NAME) -> Deferred[str]:
    """Build an ARN from its parts.

    If any part is a deferred cell the ARN is deferred too, and the
    parts are read only when the returned cell is resolved.

    Args:
        service: Service namespace, for example `logs`.
        resource: Resource type, for example `destination`.
        resource_name: Resource name, possibly deferred.
        account: Account of the enclosing stack.
        region: Region of the enclosing stack.
        partition: Partition of the enclosing stack.
        arn_format: Separator convention of the service.

    Returns:
        The ARN string or a cell producing it.
    """
    parts = (resource_name, account, region, partition)

    def produce() -> str:
        name, account_, region_, partition_ = (resolve(part) for part in parts)
        return format_arn(
            service,
            resource,
            name,
            account=account_,
            region=region_,
            partition=partition_,
            arn_format=arn_format,
        )

    if any(isinstance(part, Lazy) for part in parts):
        return Lazy(produce, hint=f'{service}:{resource} arn')

    return produce()


def parse_arn(arn: str, arn_format: ArnFormat) -> ArnComponents:
    """Split a literal ARN into its components.

    Args:
        arn: The ARN string.
        arn_format: Expected separator convention of the resource name.

    Returns:
        Parsed components with exactly the trailing resource name.

    Raises:
        MalformedArnError: If the string is not an ARN of the expected shape.
    """
    if not isinstance(arn, str):
        raise MalformedArnError(f'Expected a literal ARN string, got {arn!r}')

    components = arn.split(':')
    if len(components) < ARN_MIN_COMPONENTS or components[0] != ARN_PREFIX:
        raise MalformedArnError('Not an ARN, expected at least 6 colon separated components', arn=arn)

    _, partition, service, region, account, *rest = components
    if not partition or not service:
        raise MalformedArnError('ARN partition and service must not be empty', arn=arn)

    if arn_format is ArnFormat.COLON_RESOURCE_NAME:
        resource, *names = rest
        resource_name = ':'.join(names)
        if '/' in resource:
            raise MalformedArnError(
                'Expected a colon between resource type and name, found a slash',
                arn=arn,
            )
    else:
        resource, slash, resource_name = ':'.join(rest).partition('/')
        if not slash or ':' in resource:
            raise MalformedArnError(
                'Expected a slash between resource type and name',
                arn=arn,
            )

    if not resource:
        raise MalformedArnError('ARN resource type must not be empty', arn=arn)
    if not resource_name:
        raise MalformedArnError('ARN resource name must not be empty', arn=arn)

    return ArnComponents(
        partition=partition,
        service=service,
        region=region,
        account=account,
        resource=resource,
        resource_name=resource_name,
        arn_format=arn_format,
    )

"""Declarative stack and resource definitions of a deployment file."""

from typing import Self

from pydantic import Field, model_validator

from logdest.models import SchemaModel
from logdest.names import (  # noqa: TC001
    AccountId,
    ConstructId,
    DestinationName,
    RegionName,
    StackName,
)

from .statements import StatementDefinition


class DestinationDefinition(SchemaModel):
    """A destination declared in a stack."""

    id: ConstructId = Field(
        title='Construct id',
    )

    name: DestinationName | None = Field(
        default=None,
        title='Destination name',
        description='Physical name, generated from the stack name when omitted.',
    )

    role_arn: str = Field(
        validation_alias='roleArn',
        title='Role ARN',
        description='Role assumable by CloudWatch Logs that can write to the target.',
    )

    target_arn: str = Field(
        validation_alias='targetArn',
        title='Target ARN',
        description='ARN of the delivery target, for example a Firehose stream.',
    )

    policy: list[StatementDefinition] = Field(
        default_factory=list,
        title='Destination policy',
        description='Statements of the destination access policy.',
    )


class ImportDefinition(SchemaModel):
    """An existing destination referenced by ARN."""

    id: ConstructId = Field(
        title='Construct id',
    )

    arn: str = Field(
        title='Destination ARN',
        examples=['arn:aws:logs:us-east-1:123456789012:destination:TestDestination'],
    )


class SubscriptionDefinition(SchemaModel):
    """A subscription filter of a log group."""

    id: ConstructId = Field(
        title='Construct id',
    )

    destination: str = Field(
        title='Destination reference',
        description=(
            'Id of a destination or import of the same stack, '
            'or `StackId/DestinationId` for another stack.'
        ),
    )

    filter_pattern: str = Field(
        default='',
        validation_alias='filterPattern',
        title='Filter pattern',
        description='Pattern selecting delivered events, all events when empty.',
    )


class LogGroupDefinition(SchemaModel):
    """A log group declared in a stack."""

    id: ConstructId = Field(
        title='Construct id',
    )

    name: str | None = Field(
        default=None,
        title='Log group name',
    )

    retention_days: int | None = Field(
        default=None,
        gt=0,
        validation_alias='retentionDays',
        title='Retention in days',
    )

    subscriptions: list[SubscriptionDefinition] = Field(
        default_factory=list,
        title='Subscription filters',
    )


class StackDefinition(SchemaModel):
    """A deployable unit."""

    name: StackName = Field(
        title='Stack name',
    )

    account: AccountId | None = Field(
        default=None,
        title='Account',
        description='Target account, `LOGDEST_DEFAULT_ACCOUNT` when omitted.',
    )

    region: RegionName | None = Field(
        default=None,
        title='Region',
        description='Target region, `LOGDEST_DEFAULT_REGION` when omitted.',
    )

    destinations: list[DestinationDefinition] = Field(
        default_factory=list,
        title='Destinations',
    )

    imports: list[ImportDefinition] = Field(
        default_factory=list,
        title='Imported destinations',
    )

    log_groups: list[LogGroupDefinition] = Field(
        default_factory=list,
        validation_alias='logGroups',
        title='Log groups',
    )

    @model_validator(mode='after')
    def check_unique_ids(self) -> Self:
        """Check that construct ids are unique within the stack.

        Raises:
            ValueError: If two definitions share an id.
        """
        seen: set[str] = set()
        for item in (*self.destinations, *self.imports, *self.log_groups):
            if item.id in seen:
                raise ValueError(f'Duplicate construct id {item.id!r} in stack {self.name!r}')
            seen.add(item.id)

        return self


class DeploymentDefinition(SchemaModel):
    """Root of a deployment file."""

    stacks: list[StackDefinition] = Field(
        min_length=1,
        title='Stacks',
    )

    @model_validator(mode='after')
    def check_unique_stacks(self) -> Self:
        """Check that stack names are unique.

        Raises:
            ValueError: If two stacks share a name.
        """
        names = [stack.name for stack in self.stacks]
        if len(names) != len(set(names)):
            raise ValueError('Stack names must be unique')

        return self

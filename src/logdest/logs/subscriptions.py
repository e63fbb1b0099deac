"""Log groups and subscription filters."""

from typing import TYPE_CHECKING

from logdest.core.resources import CfnResource, Resource

if TYPE_CHECKING:
    from logdest.core.constructs import Construct
    from logdest.logs.destination import SubscriptionDestination
    from logdest.values import Lazy


class FilterPattern:
    """Common subscription filter patterns."""

    @staticmethod
    def all_events() -> str:
        """Match every log event."""
        return ''

    @staticmethod
    def literal(pattern: str) -> str:
        """Use a pattern string as-is."""
        return pattern


class LogGroup(Resource):
    """A CloudWatch Logs log group.

    Without a requested name, naming is left to CloudFormation and the
    group is referenced through its `Ref`.
    """

    def __init__(self, scope: 'Construct', id: str, *,  # noqa: A002
                 log_group_name: str | None = None,
                 retention_days: int | None = None) -> None:
        super().__init__(scope, id, physical_name=log_group_name)

        self.resource = CfnResource(self, 'Resource', resource_type='AWS::Logs::LogGroup', properties={
            'LogGroupName': self.requested_name,
            'RetentionInDays': retention_days,
        })

    @property
    def log_group_name(self) -> 'str | Lazy[dict[str, str]]':
        """Requested name of the log group, or its `Ref` intrinsic."""
        return self.requested_name or self.resource.ref

    def add_subscription_filter(self, id: str, *,  # noqa: A002
                                destination: 'SubscriptionDestination',
                                filter_pattern: str) -> 'SubscriptionFilter':
        """Create a subscription filter delivering this group's events.

        Args:
            id: Construct id of the filter.
            destination: Owned or imported destination.
            filter_pattern: Pattern selecting the events.

        Returns:
            The new subscription filter.
        """
        return SubscriptionFilter(
            self,
            id,
            log_group=self,
            destination=destination,
            filter_pattern=filter_pattern,
        )


class SubscriptionFilter(CfnResource):
    """Subscription of a log group to a destination.

    The destination is only reached through its `bind` method.
    """

    def __init__(self, scope: 'Construct', id: str, *,  # noqa: A002
                 log_group: LogGroup,
                 destination: 'SubscriptionDestination',
                 filter_pattern: str) -> None:
        config = destination.bind(scope, log_group)

        super().__init__(scope, id, resource_type='AWS::Logs::SubscriptionFilter', properties={
            'DestinationArn': config.arn,
            'FilterPattern': filter_pattern,
            'LogGroupName': log_group.log_group_name,
        })

"""CloudWatch Logs cross-account destinations.

Destinations are used to subscribe a delivery target (for example a
Kinesis or Firehose stream) in a different account to a log group.
The destination either is declared here, with a possibly generated name
and a policy filled in until synthesis, or is imported by ARN.
"""

from typing import TYPE_CHECKING, Any

from logdest.arns import ArnFormat
from logdest.core.constructs import Construct
from logdest.core.identity import ImportedIdentity, OwnedIdentity
from logdest.core.resources import CfnResource, Resource
from logdest.errors import ConstructError, ErrorContext
from logdest.iam import PolicyDocument
from logdest.names import DESTINATION_NAME_PATTERN

if TYPE_CHECKING:
    from logdest.core.identity import ResourceIdentity, SubscriptionConfig
    from logdest.iam import PolicyStatement, Role
    from logdest.values import Deferred

SERVICE = 'logs'
RESOURCE = 'destination'
RESOURCE_TYPE = 'AWS::Logs::Destination'


class SubscriptionDestination(Construct):
    """Base of everything a log group can subscribe to.

    Subclasses provide an `identity`; binding only exposes its ARN.
    """

    identity: 'ResourceIdentity'

    @property
    def destination_name(self) -> 'Deferred[str]':
        """Physical name of the destination."""
        return self.identity.name

    @property
    def destination_arn(self) -> 'Deferred[str]':
        """ARN of the destination (colon separated resource name)."""
        return self.identity.arn

    def bind(self, scope: Construct, source_log_group: Any) -> 'SubscriptionConfig':  # noqa: ANN401, ARG002
        """Return the configuration used by a subscription filter.

        Args:
            scope: Construct creating the subscription.
            source_log_group: Log group being subscribed.

        Returns:
            Subscription configuration holding the destination ARN.
        """
        return self.identity.bind(source_log_group)


class ImportedDestination(SubscriptionDestination):
    """Read-only destination defined outside of this application."""

    def __init__(self, scope: Construct, id: str, identity: ImportedIdentity) -> None:  # noqa: A002
        super().__init__(scope, id)
        self.identity = identity


class CrossAccountDestination(Resource, SubscriptionDestination):
    """A new CloudWatch Logs destination for cross-account delivery.

    Attributes:
        policy_document: Policy attached to the destination. Statements
            may be added until the application is synthesized.
        resource: Backing `AWS::Logs::Destination` resource.
    """

    def __init__(self, scope: Construct, id: str, *,  # noqa: A002
                 role: 'Role',
                 target_arn: 'Deferred[str]',
                 destination_name: str | None = None) -> None:
        """Declare a destination.

        Args:
            scope: Parent construct.
            id: Construct id.
            role: Role assumable by CloudWatch Logs that can write to the target.
            target_arn: ARN of the delivery target.
            destination_name: Physical name, generated when omitted or empty.

        Raises:
            ConstructError: If the requested name is not a valid destination name.
        """
        if destination_name and not DESTINATION_NAME_PATTERN.match(destination_name):
            raise ConstructError(
                f'Invalid destination name {destination_name!r}',
                context=ErrorContext(element={'destinationName': destination_name}),
            )

        super().__init__(scope, id, physical_name=destination_name)

        self.policy_document = PolicyDocument()

        self.resource = CfnResource(self, 'Resource', resource_type=RESOURCE_TYPE, properties={
            'DestinationName': self.physical_name,
            'DestinationPolicy': self.policy_document.lazy_string(self.stack),
            'RoleArn': role.role_arn,
            'TargetArn': target_arn,
        })

        self.identity = OwnedIdentity(
            requested_name=self.requested_name,
            generated_name=self.generated_name,
            service=SERVICE,
            resource_type=RESOURCE,
            arn_format=ArnFormat.COLON_RESOURCE_NAME,
            account=self.stack.account,
            region=self.stack.region,
            partition=self.stack.partition,
        )

    @classmethod
    def from_destination_arn(cls, scope: Construct, id: str,  # noqa: A002
                             destination_arn: str) -> ImportedDestination:
        """Import an existing destination given its ARN.

        Args:
            scope: Parent construct.
            id: Construct id.
            destination_arn: `arn:aws:logs:<region>:<account>:destination:<name>`.

        Returns:
            A read-only destination.

        Raises:
            MalformedArnError: If the ARN is not a colon separated ARN.
        """
        identity = ImportedIdentity.from_arn(destination_arn, ArnFormat.COLON_RESOURCE_NAME)

        return ImportedDestination(scope, id, identity)

    def add_to_policy(self, statement: 'PolicyStatement') -> None:
        """Add a statement to the destination policy.

        Raises:
            PolicySealedError: If the application was already synthesized.
        """
        self.policy_document.add_statements(statement)

"""Physical identities of resources.

An identity exposes a resource's final name and ARN. It is either owned
(declared in this application, name and ARN possibly deferred) or
imported (reconstructed from a literal ARN). Both variants share one
interface, so consumers can not tell them apart beyond the values they
return.
"""

from functools import cached_property
from typing import TYPE_CHECKING, Any, Literal

from pydantic import Field

from logdest.arns import ArnFormat, build_arn, parse_arn
from logdest.models import SchemaModel
from logdest.values import Lazy

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from logdest.values import Deferred


class SubscriptionConfig(SchemaModel):
    """Configuration returned to a log source subscribing to a destination."""

    arn: str | Lazy = Field(
        title='Destination ARN',
        description='Fully-qualified identifier of the subscription target.',
    )


class ResourceIdentity(SchemaModel):
    """Common interface of owned and imported identities."""

    kind: Literal['owned', 'imported']

    @property
    def name(self) -> 'Deferred[str]':
        """Final physical name."""
        raise NotImplementedError

    @property
    def arn(self) -> 'Deferred[str]':
        """Fully-qualified identifier."""
        raise NotImplementedError

    def bind(self, source: Any = None) -> SubscriptionConfig:  # noqa: ANN401, ARG002
        """Return the subscription configuration for a log source.

        Args:
            source: Subscribing log source, unused by the identity itself.

        Returns:
            The ARN to deliver to.
        """
        return SubscriptionConfig(arn=self.arn)


class OwnedIdentity(ResourceIdentity):
    """Identity of a resource declared in this application.

    The name is the requested name or, when absent, a generated name
    cell; the ARN is built from the stack environment and the name.
    """

    kind: Literal['owned'] = 'owned'

    requested_name: str | None = Field(default=None, title='Requested name')
    generated_name: Lazy = Field(title='Generated name')

    service: str = Field(title='Service namespace', examples=['logs'])
    resource_type: str = Field(title='Resource type', examples=['destination'])
    arn_format: ArnFormat = Field(default=ArnFormat.SLASH_RESOURCE_NAME)

    account: str = Field(title='Account')
    region: str = Field(title='Region')
    partition: str = Field(title='Partition')

    @cached_property
    def name(self) -> 'Deferred[str]':
        """Requested name if given, the generated cell otherwise."""
        if self.requested_name:
            return self.requested_name
        return self.generated_name

    @cached_property
    def arn(self) -> 'Deferred[str]':
        """ARN built from the environment and the (possibly deferred) name."""
        return build_arn(
            self.service,
            self.resource_type,
            self.name,
            account=self.account,
            region=self.region,
            partition=self.partition,
            arn_format=self.arn_format,
        )


class ImportedIdentity(ResourceIdentity):
    """Identity of an existing resource, known only by its ARN."""

    kind: Literal['imported'] = 'imported'

    imported_name: str = Field(title='Name')
    imported_arn: str = Field(title='ARN')

    @classmethod
    def from_arn(cls, arn: str, arn_format: ArnFormat) -> 'Self':
        """Reconstruct an identity from a literal ARN.

        Args:
            arn: Literal ARN of the resource.
            arn_format: Separator convention of the service.

        Returns:
            An identity whose name is the trailing ARN segment.

        Raises:
            MalformedArnError: If the ARN does not match the convention.
        """
        components = parse_arn(arn, arn_format)

        return cls(imported_name=components.resource_name, imported_arn=arn)

    @property
    def name(self) -> str:
        """Resource name extracted from the ARN."""
        return self.imported_name

    @property
    def arn(self) -> str:
        """The literal ARN."""
        return self.imported_arn

"""IAM value types used by log destinations.

Statements are immutable values; a `PolicyDocument` collects them and
has an explicit sealed state. Once sealed no statement can be added,
and only a sealed document can be serialized.
"""

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import Field

from logdest.arns import ArnFormat, parse_arn
from logdest.errors import MalformedArnError, PolicySealedError
from logdest.models import SchemaModel
from logdest.names import ActionName  # noqa: TC001
from logdest.values import Lazy

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from logdest.core.constructs import Stack

LOG = logging.getLogger(__name__)

POLICY_VERSION = '2012-10-17'


class Effect(StrEnum):
    """Statement effect."""

    ALLOW = 'Allow'
    DENY = 'Deny'


def _collapse(values: list[Any]) -> Any:  # noqa: ANN401
    """Render single element lists as a bare value, as IAM does."""
    if len(values) == 1:
        return values[0]
    return list(values)


class PolicyStatement(SchemaModel):
    """A single authorization statement.

    Resources and principals may hold deferred values (for example the
    ARN of a destination whose name is generated).
    """

    sid: str | None = Field(
        default=None,
        title='Statement id',
    )

    effect: Effect = Field(
        default=Effect.ALLOW,
        title='Effect',
    )

    actions: list[ActionName] = Field(
        min_length=1,
        title='Actions',
        examples=[['logs:PutSubscriptionFilter']],
    )

    resources: list[str | Lazy] = Field(
        default_factory=list,
        title='Resources',
    )

    principals: dict[str, list[str | Lazy]] = Field(
        default_factory=dict,
        title='Principals',
        description='Principals by type, for example `{"AWS": ["123456789012"]}`.',
    )

    conditions: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        title='Conditions',
    )

    def to_json(self) -> dict[str, Any]:
        """Return the IAM JSON form of the statement (possibly deferred)."""
        statement: dict[str, Any] = {
            'Action': _collapse(self.actions),
        }
        if self.conditions:
            statement['Condition'] = self.conditions
        statement['Effect'] = self.effect.value
        if self.principals:
            statement['Principal'] = {
                kind: _collapse(values)
                for kind, values in self.principals.items()
            }
        if self.resources:
            statement['Resource'] = _collapse(self.resources)
        if self.sid:
            statement['Sid'] = self.sid

        return statement


class PolicyDocument:
    """Mutable collection of policy statements with a sealed state."""

    def __init__(self, statements: list[PolicyStatement] | None = None) -> None:
        self.statements: list[PolicyStatement] = list(statements or ())
        self.sealed = False

    @property
    def is_empty(self) -> bool:
        """Whether the document has no statements."""
        return not self.statements

    def add_statements(self, *statements: PolicyStatement) -> None:
        """Append statements to the document.

        Raises:
            PolicySealedError: If the document was already serialized.
        """
        if self.sealed:
            raise PolicySealedError('Can not add statements to a sealed policy document')

        self.statements.extend(statements)

    def seal(self) -> 'Self':
        """Freeze the statement list."""
        if not self.sealed:
            LOG.debug('Sealing policy document with %d statement(s)', len(self.statements))
            self.sealed = True
        return self

    def serialize(self) -> dict[str, Any]:
        """Return the structural form of the document.

        Raises:
            PolicySealedError: If the document is not sealed yet.
        """
        if not self.sealed:
            raise PolicySealedError('Policy document must be sealed before serialization')

        return {
            'Version': POLICY_VERSION,
            'Statement': [statement.to_json() for statement in self.statements],
        }

    def lazy_string(self, stack: 'Stack') -> Lazy[str]:
        """Return a cell stringifying the document at synthesis time.

        Emptiness is checked when the cell is resolved, so statements
        added after the cell was created are included. An empty document
        produces an empty string rather than an empty JSON document.

        Args:
            stack: Stack whose JSON rules apply.

        Returns:
            A cell recomputed on every resolution.
        """
        def produce() -> str:
            self.seal()
            if self.is_empty:
                return ''
            return stack.to_json_string(self.serialize())

        return Lazy(produce, strategy='always', hint='policy document')


class Role(SchemaModel):
    """Reference to an existing IAM role."""

    role_arn: str | Lazy = Field(title='Role ARN')

    @classmethod
    def from_role_arn(cls, role_arn: str) -> 'Self':
        """Reference a role by ARN.

        Args:
            role_arn: Literal role ARN, `arn:aws:iam::123456789012:role/Name`.

        Returns:
            A role reference.

        Raises:
            MalformedArnError: If the ARN is not an IAM role ARN.
        """
        components = parse_arn(role_arn, ArnFormat.SLASH_RESOURCE_NAME)
        if components.service != 'iam' or components.resource != 'role':
            raise MalformedArnError('Expected an IAM role ARN', arn=role_arn)

        return cls(role_arn=role_arn)

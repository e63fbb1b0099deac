"""Declarative policy statement definitions."""

from typing import Any

from pydantic import Field

from logdest.iam import Effect, PolicyStatement
from logdest.models import SchemaModel
from logdest.names import ActionName  # noqa: TC001
from logdest.values import Deferred  # noqa: TC001


class StatementDefinition(SchemaModel):
    """Policy statement as written in a deployment file.

    When `resources` is omitted the statement applies to the
    destination it is attached to.
    """

    sid: str | None = Field(
        default=None,
        title='Statement id',
    )

    effect: Effect = Field(
        default=Effect.ALLOW,
        title='Effect',
        description='Whether the statement allows or denies the actions.',
    )

    actions: list[ActionName] = Field(
        min_length=1,
        title='Actions',
        description='Service-qualified actions, for example `logs:PutSubscriptionFilter`.',
        examples=[['logs:PutSubscriptionFilter']],
    )

    resources: list[str] | None = Field(
        default=None,
        title='Resources',
        description=(
            'Resource ARNs the statement applies to. '
            'Defaults to the ARN of the enclosing destination.'
        ),
    )

    principals: dict[str, list[str]] = Field(
        default_factory=dict,
        title='Principals',
        description='Principals by type, for example `AWS: ["111111111111"]`.',
    )

    conditions: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        title='Conditions',
    )

    def build(self, default_resource: Deferred[str]) -> PolicyStatement:
        """Compile the definition into a policy statement.

        Args:
            default_resource: Resource used when none is listed.

        Returns:
            A policy statement.
        """
        resources: list[Deferred[str]] = [default_resource]
        if self.resources is not None:
            resources = list(self.resources)

        return PolicyStatement(
            sid=self.sid,
            effect=self.effect,
            actions=self.actions,
            resources=resources,
            principals=self.principals,
            conditions=self.conditions,
        )

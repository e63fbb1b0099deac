"""Deployment file loading and application building.

A deployment file is parsed with PyYAML, validated against the
`DeploymentDefinition` model and compiled into a construct tree. All
destinations (owned or imported) of every stack are declared before
any log group, so subscriptions may reference destinations of stacks
listed later in the file.
"""

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from yaml import SafeLoader, load
from yaml.error import MarkedYAMLError

from logdest.core.constructs import App, Stack
from logdest.errors import ConfigError, ErrorContext
from logdest.iam import Role
from logdest.logs import CrossAccountDestination, LogGroup
from logdest.schema import DeploymentDefinition

if TYPE_CHECKING:
    from pathlib import Path
    from typing import TextIO

if TYPE_CHECKING:
    from logdest.logs import SubscriptionDestination
    from logdest.schema import DestinationDefinition, StackDefinition
    from logdest.settings import Settings

LOG = logging.getLogger(__name__)

REFERENCE_SEPARATOR = '/'


class DeploymentLoader:
    """Loader of YAML deployment files.

    Attributes:
        loader: PyYAML loader class, `SafeLoader` by default.
        settings: Settings of the applications built.
    """

    def __init__(self, loader: type[SafeLoader] = SafeLoader,
                 settings: 'Settings | None' = None) -> None:
        self.loader = loader
        self.settings = settings

    def load_file(self, path: 'Path') -> DeploymentDefinition:
        """Read and validate a deployment file.

        Args:
            path: Path to the YAML file.

        Returns:
            Validated deployment definition.

        Raises:
            ConfigError: If the file is not valid YAML or fails validation.
        """
        with path.open('rt', encoding='utf-8') as stream:
            return self.load_string(stream, filename=str(path))

    def load_string(self, content: 'str | TextIO', filename: str | None = None) -> DeploymentDefinition:
        """Parse and validate deployment file content.

        Args:
            content: YAML document or an open text stream.
            filename: Name reported in errors.

        Returns:
            Validated deployment definition.

        Raises:
            ConfigError: If the content is not valid YAML or fails validation.
        """
        try:
            data = load(content, Loader=self.loader)  # noqa: S506
        except MarkedYAMLError as error:
            raise ConfigError.from_yaml_error(error) from error

        try:
            return DeploymentDefinition.model_validate(data)
        except ValidationError as error:
            raise ConfigError.from_pydantic_error(error, data=data, filename=filename) from error

    def build(self, definition: DeploymentDefinition) -> App:
        """Compile a deployment definition into a construct tree.

        Args:
            definition: Validated deployment definition.

        Returns:
            An application ready to be synthesized.

        Raises:
            ConfigError: If a subscription references an unknown destination.
            MalformedArnError: If an imported or role ARN is malformed.
        """
        app = App(self.settings)
        stacks: dict[str, Stack] = {}
        destinations: dict[tuple[str, str], SubscriptionDestination] = {}

        for stack_definition in definition.stacks:
            stack = Stack(
                app,
                stack_definition.name,
                account=stack_definition.account,
                region=stack_definition.region,
            )
            stacks[stack_definition.name] = stack

            for item in stack_definition.destinations:
                destinations[stack_definition.name, item.id] = self._build_destination(stack, item)

            for item in stack_definition.imports:
                destinations[stack_definition.name, item.id] = (
                    CrossAccountDestination.from_destination_arn(stack, item.id, item.arn)
                )

        for stack_definition in definition.stacks:
            self._build_log_groups(stacks[stack_definition.name], stack_definition, destinations)

        LOG.debug('Built %d stack(s) with %d destination(s)', len(stacks), len(destinations))

        return app

    @staticmethod
    def _build_destination(stack: Stack, item: 'DestinationDefinition') -> CrossAccountDestination:
        destination = CrossAccountDestination(
            stack,
            item.id,
            role=Role.from_role_arn(item.role_arn),
            target_arn=item.target_arn,
            destination_name=item.name,
        )

        for statement in item.policy:
            destination.add_to_policy(statement.build(destination.destination_arn))

        return destination

    @staticmethod
    def _build_log_groups(stack: Stack, definition: 'StackDefinition',
                          destinations: dict[tuple[str, str], Any]) -> None:
        for group in definition.log_groups:
            log_group = LogGroup(
                stack,
                group.id,
                log_group_name=group.name,
                retention_days=group.retention_days,
            )

            for subscription in group.subscriptions:
                stack_name, _, destination_id = subscription.destination.rpartition(
                    REFERENCE_SEPARATOR,
                )
                key = (stack_name or definition.name, destination_id)

                if key not in destinations:
                    raise ConfigError(
                        f'Unknown destination {subscription.destination!r}',
                        context=ErrorContext(
                            path=log_group.path,
                            element={'destination': subscription.destination},
                        ),
                    )

                log_group.add_subscription_filter(
                    subscription.id,
                    destination=destinations[key],
                    filter_pattern=subscription.filter_pattern,
                )

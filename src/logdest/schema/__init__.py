"""Deployment file schema.

Pydantic models describing a YAML deployment file: stacks, their
destinations, imported destinations and subscribed log groups.
"""

from .stacks import (
    DeploymentDefinition,
    DestinationDefinition,
    ImportDefinition,
    LogGroupDefinition,
    StackDefinition,
    SubscriptionDefinition,
)
from .statements import StatementDefinition

__all__ = (
    'DeploymentDefinition',
    'DestinationDefinition',
    'ImportDefinition',
    'LogGroupDefinition',
    'StackDefinition',
    'StatementDefinition',
    'SubscriptionDefinition',
)

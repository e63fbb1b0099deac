"""Construct tree, resources and synthesis.

Exports the tree nodes (`App`, `Stack`, `Construct`), the resource
sink and base classes, and the identity model shared by owned and
imported resources.
"""

from .constructs import App, Construct, Stack, make_unique_id
from .identity import ImportedIdentity, OwnedIdentity, ResourceIdentity, SubscriptionConfig
from .resources import CfnResource, Resource, derive_name

__all__ = (
    'App',
    'CfnResource',
    'Construct',
    'ImportedIdentity',
    'OwnedIdentity',
    'Resource',
    'ResourceIdentity',
    'Stack',
    'SubscriptionConfig',
    'derive_name',
    'make_unique_id',
)

"""CloudWatch Logs constructs.

Destinations, log groups and subscription filters. Owned and imported
destinations are interchangeable wherever a subscription target is
expected.
"""

from .destination import CrossAccountDestination, ImportedDestination, SubscriptionDestination
from .subscriptions import FilterPattern, LogGroup, SubscriptionFilter

__all__ = (
    'CrossAccountDestination',
    'FilterPattern',
    'ImportedDestination',
    'LogGroup',
    'SubscriptionDestination',
    'SubscriptionFilter',
)

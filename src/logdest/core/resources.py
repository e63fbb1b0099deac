"""Resource constructs.

`CfnResource` is the low-level sink rendering a `{Type, Properties}`
template entry. `Resource` is the base of higher level constructs that
own a physical name, requested by the user or generated from the stack
name and the logical id of the backing `CfnResource`.
"""

import logging
from typing import TYPE_CHECKING, Any

from logdest.core.constructs import Construct, Stack
from logdest.errors import ConstructError, ErrorContext
from logdest.names import LOGICAL_ID_PATTERN
from logdest.values import Lazy

if TYPE_CHECKING:
    from logdest.context import SynthesisContext
    from logdest.values import Deferred

LOG = logging.getLogger(__name__)


def derive_name(requested_name: str | None, scope_path: str, unique_suffix: str) -> str:
    """Derive the physical name of a resource.

    An empty requested name is treated as absent and falls through to
    the generated name.

    Args:
        requested_name: Name supplied by the user, if any.
        scope_path: Stable name of the enclosing deployable unit.
        unique_suffix: Identifier unique within that unit.

    Returns:
        The requested name, or `{scope_path}-{unique_suffix}`.
    """
    if requested_name:
        return requested_name

    return f'{scope_path}-{unique_suffix}'


class CfnResource(Construct):
    """Template resource of a given type.

    Property values may be deferred; they are resolved when the stack is
    synthesized. Properties resolving to `None` are omitted.
    """

    def __init__(self, scope: Construct, id: str, *,  # noqa: A002
                 resource_type: str,
                 properties: dict[str, Any] | None = None) -> None:
        super().__init__(scope, id)

        self.resource_type = resource_type
        self.properties = dict(properties or {})
        self.stack = Stack.of(self)

        self._logical_id_override: str | None = None

    @property
    def logical_id(self) -> str:
        """Logical id of the resource within its stack.

        Only final once the construct tree is locked.
        """
        if self._logical_id_override:
            return self._logical_id_override
        return self.stack.allocate_logical_id(self)

    def override_logical_id(self, logical_id: str) -> None:
        """Replace the generated logical id.

        Raises:
            ConstructError: If the tree is already locked or the id is invalid.
        """
        if self.locked:
            raise ConstructError(
                'Logical ids can not be changed after the tree is locked',
                context=ErrorContext(path=self.path),
            )
        if not LOGICAL_ID_PATTERN.match(logical_id):
            raise ConstructError(f'Logical id must be alphanumeric, got {logical_id!r}')

        self._logical_id_override = logical_id

    @property
    def ref(self) -> Lazy[dict[str, str]]:
        """Deferred `Ref` intrinsic of the resource."""
        return Lazy(
            lambda: {'Ref': self.logical_id},
            strategy='always',
            hint=f'{self.path} ref',
        )

    def get_att(self, attribute: str) -> Lazy[dict[str, list[str]]]:
        """Deferred `Fn::GetAtt` intrinsic of the resource."""
        return Lazy(
            lambda: {'Fn::GetAtt': [self.logical_id, attribute]},
            strategy='always',
            hint=f'{self.path}.{attribute}',
        )

    def render(self, context: 'SynthesisContext') -> dict[str, Any]:
        """Resolve the resource into its template entry."""
        properties = {
            name: value
            for name, value in context.resolve(self.properties).items()
            if value is not None
        }

        entry: dict[str, Any] = {'Type': self.resource_type}
        if properties:
            entry['Properties'] = properties
        return entry


class Resource(Construct):
    """Base of constructs owning a physical name.

    Subclasses create their backing `CfnResource` and assign it to
    `self.resource` before the physical name is resolved.
    """

    resource: CfnResource

    def __init__(self, scope: Construct, id: str, *,  # noqa: A002
                 physical_name: str | None = None) -> None:
        """Initialize a resource.

        Args:
            scope: Parent construct.
            id: Construct id.
            physical_name: Requested physical name, generated when empty.
        """
        super().__init__(scope, id)

        self.stack = Stack.of(self)
        self.requested_name = physical_name or None
        if physical_name == '':
            LOG.debug('Empty physical name of %s, a name will be generated', self.path)

        self.generated_name: Lazy[str] = Lazy(self.generate_physical_name, hint=f'{self.path} name')
        self.physical_name: Deferred[str] = self.requested_name or self.generated_name

    def generate_physical_name(self) -> str:
        """Generate a name from the stack name and the resource logical id.

        Raises:
            ConstructError: If the tree is not locked yet.
        """
        if not self.locked:
            raise ConstructError(
                'Generated names are only available once the tree is locked for synthesis',
                context=ErrorContext(path=self.path),
            )

        name = derive_name(None, self.stack.stack_name, self.resource.logical_id)
        LOG.debug('Generated physical name %r for %s', name, self.path)
        return name

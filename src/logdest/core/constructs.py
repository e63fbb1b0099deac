"""Construct tree and synthesis driver.

The tree has an `App` at its root, `Stack` nodes as deployable units and
arbitrary constructs below them. Synthesis happens in two strictly
ordered phases: the tree is locked (no more children, logical ids are
final), then every stack resolves its deferred values in one pass.
"""

import logging
from hashlib import md5
from re import sub
from typing import TYPE_CHECKING, Any

from logdest.arns import ArnFormat, build_arn, get_partition
from logdest.context import SynthesisContext
from logdest.errors import ConstructError, ErrorContext, SynthesisError
from logdest.names import CONSTRUCT_ID_PATTERN, STACK_NAME_PATTERN
from logdest.settings import get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import Self

if TYPE_CHECKING:
    from logdest.core.resources import CfnResource
    from logdest.settings import Settings
    from logdest.values import Deferred

LOG = logging.getLogger(__name__)

PATH_SEPARATOR = '/'
HASH_LENGTH = 8
MAX_HUMAN_LENGTH = 240

#: Path components hidden from the human readable part of logical ids.
HIDDEN_ID = 'Resource'
DEFAULT_ID = 'Default'


def _remove_non_alphanumeric(value: str) -> str:
    return sub(r'[^A-Za-z0-9]', '', value)


def _path_hash(components: list[str]) -> str:
    digest = md5(PATH_SEPARATOR.join(components).encode(), usedforsecurity=False)
    return digest.hexdigest()[:HASH_LENGTH].upper()


def _remove_dupes(components: list[str]) -> list[str]:
    """Drop components already ending the previous kept component."""
    kept: list[str] = []
    for component in components:
        if kept and kept[-1].endswith(component):
            continue
        kept.append(component)
    return kept


def make_unique_id(components: list[str]) -> str:
    """Calculate a logical id from a stack-relative construct path.

    The id is the concatenation of the alphanumeric characters of the
    path components followed by a hash of the full path. A top-level
    construct uses its own id without a hash.

    Args:
        components: Construct ids from the stack (exclusive) downwards.

    Returns:
        A logical id unique within the stack.

    Raises:
        ConstructError: If the path is empty.
    """
    components = [item for item in components if item != DEFAULT_ID]
    if not components:
        raise ConstructError('Unable to calculate a unique id for an empty path')

    if len(components) == 1:
        candidate = _remove_non_alphanumeric(components[0])
        if candidate:
            return candidate

    human = ''.join(
        _remove_non_alphanumeric(item)
        for item in _remove_dupes(components)
        if item != HIDDEN_ID
    )[:MAX_HUMAN_LENGTH]

    return human + _path_hash(components)


class Construct:
    """A node of the construct tree."""

    def __init__(self, scope: 'Construct | None', id: str) -> None:  # noqa: A002
        """Attach a new construct to its parent.

        Args:
            scope: Parent construct, `None` for the root only.
            id: Identifier unique among siblings.

        Raises:
            ConstructError: If the id is invalid or taken, or the tree is locked.
        """
        self.scope = scope
        self.id = id
        self.children: dict[str, Construct] = {}
        self._locked = False

        if scope is None:
            return

        if not CONSTRUCT_ID_PATTERN.match(id):
            raise ConstructError(f'Invalid construct id {id!r}')
        if scope.locked:
            raise ConstructError(
                f'Can not add {id!r}: the construct tree is locked for synthesis',
                context=ErrorContext(path=scope.path),
            )
        if id in scope.children:
            raise ConstructError(
                f'There is already a construct with id {id!r}',
                context=ErrorContext(path=scope.path),
            )

        scope.children[id] = self

    @property
    def root(self) -> 'Construct':
        """Root of the tree."""
        node = self
        while node.scope is not None:
            node = node.scope
        return node

    @property
    def locked(self) -> bool:
        """Whether the tree was locked for synthesis."""
        return self.root._locked  # noqa: SLF001

    @property
    def scopes(self) -> list['Construct']:
        """Constructs from the root down to this one."""
        scopes = []
        node: Construct | None = self
        while node is not None:
            scopes.append(node)
            node = node.scope
        return scopes[::-1]

    @property
    def path(self) -> str:
        """Path of the construct, excluding the root."""
        return PATH_SEPARATOR.join(node.id for node in self.scopes[1:])

    def walk(self) -> 'Iterator[Construct]':
        """Iterate over this construct and its descendants, depth first."""
        yield self
        for child in self.children.values():
            yield from child.walk()

    def __repr__(self) -> str:
        """String representation."""
        return f'<{type(self).__name__} {self.path or "<root>"}>'


class App(Construct):
    """Root of a construct tree."""

    def __init__(self, settings: 'Settings | None' = None) -> None:
        """Initialize an application.

        Args:
            settings: Synthesis settings, read from the environment by default.
        """
        super().__init__(None, '')
        self.settings = settings or get_settings()

    @property
    def stacks(self) -> list['Stack']:
        """All stacks of the application."""
        return [node for node in self.walk() if isinstance(node, Stack)]

    def lock(self) -> None:
        """Forbid further modifications of the tree."""
        if not self._locked:
            LOG.debug('Locking construct tree')
            self._locked = True

    def synth(self) -> dict[str, dict[str, Any]]:
        """Synthesize every stack.

        Returns:
            Templates by stack name.

        Raises:
            SynthesisError: If a resource can not be resolved.
            ConstructError: If logical ids conflict.
        """
        self.lock()

        return {
            stack.stack_name: stack.synthesize()
            for stack in self.stacks
        }


class Stack(Construct):
    """A deployable unit providing naming and environment context.

    Attributes:
        stack_name: Physical stack name, defaults to the construct id.
        account: Account resources are deployed to.
        region: Region resources are deployed to.
        partition: Partition derived from the region.
    """

    def __init__(self, scope: Construct, id: str, *,  # noqa: A002
                 stack_name: str | None = None,
                 account: str | None = None,
                 region: str | None = None) -> None:
        """Initialize a stack.

        Args:
            scope: Parent construct, usually the `App`.
            id: Construct id.
            stack_name: Physical stack name.
            account: Target account, from settings by default.
            region: Target region, from settings by default.

        Raises:
            ConstructError: If the stack name is invalid or already used.
        """
        stack_name = stack_name or id
        if not STACK_NAME_PATTERN.match(stack_name):
            raise ConstructError(f'Invalid stack name {stack_name!r}')

        for node in scope.root.walk():
            if isinstance(node, Stack) and node.stack_name == stack_name:
                raise ConstructError(
                    f'There is already a stack named {stack_name!r}',
                    context=ErrorContext(path=node.path),
                )

        super().__init__(scope, id)

        self.stack_name = stack_name

        self.account = account or self.settings.default_account
        self.region = region or self.settings.default_region
        self.partition = get_partition(self.region)

    @property
    def settings(self) -> 'Settings':
        """Settings of the application."""
        root = self.root
        if isinstance(root, App):
            return root.settings
        return get_settings()

    @classmethod
    def of(cls, construct: Construct) -> 'Self':
        """Return the stack a construct belongs to.

        Raises:
            ConstructError: If the construct is not inside a stack.
        """
        for node in reversed(construct.scopes):
            if isinstance(node, cls):
                return node

        raise ConstructError(f'{construct!r} is not defined within a stack')

    @property
    def resources(self) -> list['CfnResource']:
        """Resources of this stack, excluding nested stacks."""
        from logdest.core.resources import CfnResource  # noqa: PLC0415

        found = []
        pending = list(self.children.values())
        while pending:
            node = pending.pop(0)
            if isinstance(node, Stack):
                continue
            if isinstance(node, CfnResource):
                found.append(node)
            pending.extend(node.children.values())
        return found

    def relative_path(self, construct: Construct) -> list[str]:
        """Construct ids between this stack (exclusive) and a construct."""
        scopes = construct.scopes
        index = next(
            position
            for position, node in enumerate(scopes)
            if node is self
        )
        return [node.id for node in scopes[index + 1:]]

    def allocate_logical_id(self, construct: Construct) -> str:
        """Calculate the default logical id of a construct in this stack."""
        return make_unique_id(self.relative_path(construct))

    def format_arn(self, service: str, resource: str,
                   resource_name: 'Deferred[str]', *,
                   arn_format: ArnFormat = ArnFormat.SLASH_RESOURCE_NAME) -> 'Deferred[str]':
        """Build an ARN in this stack's account, region and partition."""
        return build_arn(
            service,
            resource,
            resource_name,
            account=self.account,
            region=self.region,
            partition=self.partition,
            arn_format=arn_format,
        )

    def to_json_string(self, value: Any) -> str:  # noqa: ANN401
        """Serialize a deferred structure following this stack's rules."""
        return SynthesisContext(self).to_json_string(value)

    def synthesize(self) -> dict[str, Any]:
        """Resolve every resource of the stack into a template.

        Returns:
            Template mapping with a `Resources` section.

        Raises:
            ConstructError: If the tree is not locked or logical ids conflict.
            SynthesisError: If a resource can not be resolved.
        """
        if not self.locked:
            raise ConstructError('The construct tree must be locked before synthesis')

        context = SynthesisContext(self)
        resources: dict[str, Any] = {}

        for resource in self.resources:
            logical_id = resource.logical_id
            if logical_id in resources:
                raise ConstructError(
                    f'Duplicate logical id {logical_id!r}',
                    context=ErrorContext(path=resource.path, logical_id=logical_id),
                )

            LOG.debug('Synthesizing %s as %s', resource.path, logical_id)
            try:
                resources[logical_id] = resource.render(context)
            except Exception as error:
                raise SynthesisError(
                    f'Failed to synthesize {resource.resource_type}: {error}',
                    context=ErrorContext(
                        path=resource.path,
                        logical_id=logical_id,
                        element={'Type': resource.resource_type},
                    ),
                ) from error

        return {'Resources': resources}

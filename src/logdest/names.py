"""Name primitive types and validation rules.

This module defines the identifier patterns and strongly-typed aliases
used by constructs and configuration models: construct ids, stack names,
CloudWatch Logs destination names, account/region identifiers, logical
ids and IAM actions.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated

from pydantic import Field

#: Construct ids are non-empty and can not contain the path separator.
CONSTRUCT_ID_PATTERN = regexp(r'^[^/]+$')

#: CloudFormation stack names.
STACK_NAME_PATTERN = regexp(r'^[A-Za-z][A-Za-z0-9-]{0,127}$', flags=ASCII)

#: CloudWatch Logs destination names: 1 to 512 characters, no colons or asterisks.
DESTINATION_NAME_PATTERN = regexp(r'^[^:*]{1,512}$')

#: Twelve digit AWS account id.
ACCOUNT_PATTERN = regexp(r'^\d{12}$', flags=ASCII)

#: AWS region name, for example `us-east-1` or `us-gov-west-1`.
REGION_PATTERN = regexp(r'^[a-z]{2}(-[a-z]+)+-\d+$', flags=ASCII)

#: CloudFormation logical ids: ASCII letters and digits only.
LOGICAL_ID_PATTERN = regexp(r'^[A-Za-z0-9]{1,255}$', flags=ASCII)

#: IAM actions: a wildcard or `service:Action`, the action possibly wildcarded.
ACTION_PATTERN = regexp(r'^(\*|[a-z0-9-]+:[A-Za-z0-9*?]+)$', flags=ASCII)


ConstructId = Annotated[
    str, Field(
        pattern=CONSTRUCT_ID_PATTERN.pattern,
        title='Construct identifier',
        description=(
            'Identifier of a construct, unique among its siblings. '
            'Must not contain the path separator `/`.'
        ),
        examples=['TestDestination', 'SourceLogGroup'],
    ),
]

StackName = Annotated[
    str, Field(
        pattern=STACK_NAME_PATTERN.pattern,
        title='Stack name',
        description=(
            'Physical name of a deployable unit. '
            'Starts with a letter and contains letters, digits and hyphens.'
        ),
        examples=['DestinationStack'],
    ),
]

DestinationName = Annotated[
    str, Field(
        pattern=DESTINATION_NAME_PATTERN.pattern,
        title='Destination name',
        description=(
            'Physical name of a CloudWatch Logs destination. '
            'Omitted names are generated from the stack name and logical id.'
        ),
        examples=['TestDestination'],
    ),
]

AccountId = Annotated[
    str, Field(
        pattern=ACCOUNT_PATTERN.pattern,
        title='Account id',
        description='Twelve digit AWS account id.',
        examples=['123456789012'],
    ),
]

RegionName = Annotated[
    str, Field(
        pattern=REGION_PATTERN.pattern,
        title='Region',
        description='AWS region name.',
        examples=['us-east-1'],
    ),
]

ActionName = Annotated[
    str, Field(
        pattern=ACTION_PATTERN.pattern,
        title='Action',
        description='Service-qualified IAM action or `*`.',
        examples=['logs:PutSubscriptionFilter', 'logs:*'],
    ),
]

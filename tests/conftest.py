"""Tests configurations and fixtures."""

import pytest

from logdest.core import App, Stack
from logdest.iam import Role
from logdest.settings import Settings

ACCOUNT = '123456789012'
REGION = 'us-east-1'

ROLE_ARN = f'arn:aws:iam::{ACCOUNT}:role/DestinationToFirehoseRole'
TARGET_ARN = f'arn:aws:firehose:{REGION}:{ACCOUNT}:deliverystream/TestFirehoseStream'


@pytest.fixture
def settings() -> Settings:
    """Provide settings isolated from `LOGDEST_*` environment variables."""
    return Settings(
        default_account=ACCOUNT,
        default_region=REGION,
    )


@pytest.fixture
def app(settings: Settings) -> App:
    """Provide an empty application."""
    return App(settings)


@pytest.fixture
def stack(app: App) -> Stack:
    """Provide a stack in the default environment."""
    return Stack(app, 'DestinationStack')


@pytest.fixture
def role() -> Role:
    """Provide a reference to the role used by destinations."""
    return Role.from_role_arn(ROLE_ARN)

"""Runtime settings resolved from the environment."""

from functools import cache

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from logdest.models import SettingsModel
from logdest.names import AccountId, RegionName  # noqa: TC001

ENV_PREFIX = 'LOGDEST_'

DEFAULT_ACCOUNT = '000000000000'
DEFAULT_REGION = 'us-east-1'


class Settings(SettingsModel):
    """Synthesis settings.

    Values are read from `LOGDEST_*` environment variables, for example
    `LOGDEST_DEFAULT_REGION=eu-west-1`.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        frozen=True,
        extra='ignore',
    )

    default_account: AccountId = Field(
        default=DEFAULT_ACCOUNT,
        title='Default account',
        description='Account of stacks that do not specify one.',
    )

    default_region: RegionName = Field(
        default=DEFAULT_REGION,
        title='Default region',
        description='Region of stacks that do not specify one.',
    )

    json_indent: int | None = Field(
        default=None,
        ge=0,
        title='JSON indentation',
        description=(
            'Indentation of JSON strings embedded into templates '
            '(for example destination policies). Compact when unset.'
        ),
    )

    sort_keys: bool = Field(
        default=False,
        title='Sort keys',
        description='Sort object keys of embedded JSON strings.',
    )


@cache
def get_settings() -> Settings:
    """Return settings read once from the environment.

    Returns:
        Cached settings instance.
    """
    return Settings()

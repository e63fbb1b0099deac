"""CLI utilities for logdest.

Synthesizes deployment files into CloudFormation templates, splits
ARNs and prints the JSON Schema of deployment files.
"""

import logging
from json import dumps
from pathlib import Path

from click import Choice, ClickException, argument, echo, group, option
from click import Path as PathParam
from yaml import dump

from logdest.arns import ArnFormat, parse_arn
from logdest.core.loader import DeploymentLoader
from logdest.errors import LogDestError
from logdest.schema import DeploymentDefinition

LOG_FORMAT = '%(asctime)s %(levelname)-5s %(name)s: %(message)s'

InputFilepath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)

OutputFilepath = PathParam(
    dir_okay=False,
    writable=True,
    path_type=Path,
)


def _render(value: object, output_format: str) -> str:
    """Render a value as JSON or YAML text."""
    if output_format == 'yaml':
        return dump(value, indent=2, sort_keys=False)

    return dumps(value, ensure_ascii=False, indent=2)


@group(help='Command-line utilities for CloudWatch Logs destinations.')
@option('-v', '--verbose', is_flag=True, help='Enable debug logging.')
def cli(verbose: bool) -> None:
    """Root CLI group for logdest tools."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)


@cli.command(
    name='synth',
    help='Synthesize a deployment file into one template per stack.',
)
@option(
    '-f', '--format', 'output_format',
    type=Choice(['json', 'yaml']),
    default='json',
    show_default=True,
    help='Output format.',
)
@option(
    '-o', '--output',
    type=OutputFilepath,
    default=None,
    help='Write the templates to a file instead of standard output.',
)
@argument('config', type=InputFilepath)
def synth(config: Path, output_format: str, output: Path | None) -> None:
    """Synthesize the templates of a deployment file.

    Args:
        config: Path of the deployment file.
        output_format: `json` or `yaml`.
        output: Optional output file.
    """
    loader = DeploymentLoader()

    try:
        app = loader.build(loader.load_file(config))
        templates = app.synth()
    except LogDestError as error:
        raise ClickException(str(error)) from error

    content = _render(templates, output_format)
    if output is None:
        echo(content)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open('wt', encoding='utf-8') as stream:
        stream.write(content)
        stream.write('\n')


@cli.command(
    name='parse-arn',
    help='Split an ARN into its components.',
)
@option(
    '--arn-format',
    type=Choice([item.value for item in ArnFormat]),
    default=ArnFormat.COLON_RESOURCE_NAME.value,
    show_default=True,
    help='Separator between resource type and resource name.',
)
@argument('arn')
def print_arn(arn: str, arn_format: str) -> None:
    """Print the components of an ARN as YAML."""
    try:
        components = parse_arn(arn, ArnFormat(arn_format))
    except LogDestError as error:
        raise ClickException(str(error)) from error

    echo(_render(components.model_dump(mode='json'), 'yaml'), nl=False)


@cli.command(
    name='schema',
    help='Print the JSON Schema of deployment files to standard output.',
)
def print_schema() -> None:
    """Generate and print the JSON Schema."""
    schema = {
        **DeploymentDefinition.model_json_schema(),
        'title': 'logdest',
        'description': 'JSON Schema for logdest deployment files',
    }

    echo(dumps(schema, ensure_ascii=False, sort_keys=True, indent=4))


if __name__ == '__main__':
    cli()

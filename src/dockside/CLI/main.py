# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command Line Interface for dockside.
"""
import click
import yaml
from pydantic import ValidationError

from ..errors import DocksideError
from ..MANAGERS.docker_sandbox import DockerSandbox
from ..MODELS.container_config import ContainerConfig
from ..MODELS.image import Image
from ..PARSERS.settings_parser import SettingsParser
from ..UTILS.logger import setup_logging


def _parse_image(ctx, param, value):
    try:
        return Image.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _sandbox(ctx) -> DockerSandbox:
    """Create the sandbox lazily so --help works without Docker."""
    if 'sandbox' not in ctx.obj:
        ctx.obj['sandbox'] = DockerSandbox.create(ctx.obj['settings'])
    return ctx.obj['sandbox']


class DocksideGroup(click.Group):
    """Turns dockside errors into a one-line message and exit status 1."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except DocksideError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=DocksideGroup)
@click.option('--config', '-c', 'config_path', default=None, type=click.Path(exists=True, dir_okay=False),
              help='YAML settings file')
@click.option('--log-level', default=None, help='Log level (DEBUG, INFO, ...)')
@click.pass_context
def cli(ctx, config_path, log_level):
    """
    dockside - run commands in pinned Docker images.

    Checks, pulls and runs one-shot containers with captured output.
    """
    ctx.ensure_object(dict)
    try:
        settings = SettingsParser().parse(config_path)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
        )
        raise click.ClickException(f"Invalid settings: {problems}")
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid settings: {' '.join(str(e).split())}")
    setup_logging(log_level or settings.log_level)
    ctx.obj['settings'] = settings


@cli.command()
@click.pass_context
def check(ctx):
    """Check that Docker is installed and running."""
    settings = ctx.obj['settings']
    if not DockerSandbox.is_installed(settings.executable):
        click.echo("Docker is not installed.")
        ctx.exit(1)

    sandbox = _sandbox(ctx)
    if sandbox.is_running():
        click.echo("Docker is installed and running.")
    else:
        click.echo("Docker is installed but not running.")
        ctx.exit(1)


@cli.command()
@click.argument('image', callback=_parse_image)
@click.pass_context
def exists(ctx, image):
    """Check whether IMAGE exists in the registry."""
    if _sandbox(ctx).image_exists(image):
        click.echo(f"{image} exists.")
    else:
        click.echo(f"{image} doesn't exist.")
        ctx.exit(1)


@cli.command()
@click.argument('image', callback=_parse_image)
@click.pass_context
def status(ctx, image):
    """Show whether IMAGE is pulled and up to date"""
    sandbox = _sandbox(ctx)
    pulled = sandbox.has_pulled_image(image)
    up_to_date = pulled and sandbox.is_image_up_to_date(image)

    click.echo(f"{'IMAGE':30} {'PULLED':8} {'UP TO DATE':10}")
    click.echo("-" * 50)
    click.echo(f"{str(image):30} {'yes' if pulled else 'no':8} {'yes' if up_to_date else 'no':10}")


@cli.command()
@click.argument('image', callback=_parse_image)
@click.pass_context
def pull(ctx, image):
    """Pull IMAGE from the registry."""
    _sandbox(ctx).pull_image(image)
    click.echo(f"Pulled {image}.")


@cli.command(context_settings={'ignore_unknown_options': True})
@click.option('--workdir', '-w', default=None, help='Working directory inside the container')
@click.option('--bind', '-b', 'binds', multiple=True, help='HOST:CONTAINER bind mount')
@click.option('--network', default=None, help='Network mode')
@click.argument('image', callback=_parse_image)
@click.argument('command', nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def run(ctx, workdir, binds, network, image, command):
    """Run COMMAND in a one-shot IMAGE container."""
    binds_map = {}
    for bind in binds:
        host, sep, container = bind.rpartition(':')
        if not sep or not host or not container:
            raise click.BadParameter(f"Expected HOST:CONTAINER, got {bind}", param_hint='--bind')
        binds_map[host] = container

    config = ContainerConfig(
        working_directory=workdir,
        binds=binds_map or None,
        network_mode=network,
    )
    result = _sandbox(ctx).run_container(image, list(command), config)

    for name, output in (("stdout", result.stdout), ("stderr", result.stderr)):
        stream = click.get_binary_stream(name)
        stream.write(output)
        stream.flush()
    ctx.exit(result.status_code)


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()

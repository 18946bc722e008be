import click

from gocator.cli.base import tree_option
from gocator.util import format_error_response


@click.group()
@tree_option
def fleet():
    """Manage fleet configurations."""
    pass


@fleet.command(name="list")
def list_fleets():
    """List available fleet configurations."""
    from gocator.system.sysconfig import list_available_fleets

    fleets = list_available_fleets()

    click.echo("\nAvailable fleet configurations:")
    click.echo("-------------------------------")

    if not fleets:
        click.echo("No fleet configurations found")
        click.echo("")
        return

    package_fleets = [name for name, src in fleets.items() if src == "package"]
    user_fleets = [name for name, src in fleets.items() if src == "user"]

    if package_fleets:
        click.echo("\nPackage defaults:")
        for name in sorted(package_fleets):
            click.echo(f"  - {name}")

    if user_fleets:
        click.echo("\nUser configurations:")
        for name in sorted(user_fleets):
            click.echo(f"  - {name}")
    click.echo("")


@fleet.command()
@click.argument("name")
def install(name: str):
    """Install a package fleet config to the user file.

    NAME: Name of fleet configuration to install
    """
    from gocator.system.sysconfig import install_fleet_config

    try:
        install_fleet_config(name)
        click.echo(f"Installed fleet configuration '{name}' to user directory")
    except (FileNotFoundError, ValueError):
        click.echo(f"Error: {format_error_response()}", err=True)
        raise click.ClickException(f"Could not install fleet '{name}'.")


@fleet.command()
@click.argument("name")
def show(name: str):
    """Show the sensors of a fleet configuration.

    NAME: Name of fleet configuration
    """
    from gocator.system.sysconfig import load_fleet_config

    try:
        config = load_fleet_config(name)
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(f"\nFleet '{config.fleet_name}' (timeout {config.timeout} s):")
    for sensor in config.sensors:
        state = "enabled" if sensor.enabled else "disabled"
        click.echo(
            f"  - {sensor.name}: {sensor.endpoint} [{sensor.variant}, {state}]"
        )
    click.echo("")


@fleet.command()
def init():
    """Create the user fleets file with an example emulator fleet."""
    from gocator.system.sysconfig import create_default_fleets_file, user_fleets_file

    path = user_fleets_file()
    create_default_fleets_file(path)
    click.echo(f"Wrote fleet configurations to {path}")

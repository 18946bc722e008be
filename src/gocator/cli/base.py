import time

import click

from gocator.util import (
    DEFAULT_HOST_ADDR,
    DEFAULT_LOGLEVEL,
    DEFAULT_SETTLE_TIME,
    SAMPLE_POINTS,
    format_error_response,
    get_log_filename,
    start_log,
)


def print_tree(cmd, prefix="", parent_ctx=None):
    """Print command tree starting from given command."""
    ctx = click.Context(cmd, info_name=cmd.name, parent=parent_ctx)

    # Only print root name if no parent
    if not parent_ctx:
        click.echo(cmd.name)

    for sub in sorted(cmd.list_commands(ctx)):
        sub_cmd = cmd.get_command(ctx, sub)
        click.echo(f"{prefix}└── {sub}")
        if isinstance(sub_cmd, click.Group):
            print_tree(sub_cmd, prefix + "    ", ctx)


def tree_option(f):
    """Add --tree option to command."""

    def callback(ctx, param, value):
        if not value or ctx.resilient_parsing:
            return
        print_tree(ctx.command)
        ctx.exit()

    return click.option(
        "--tree",
        is_flag=True,
        help="Show command tree from this point",
        expose_value=False,
        is_eager=True,
        callback=callback,
    )(f)


def log_options(f):
    """Add the logging options shared by every command that talks to sensors."""
    options = [
        click.option(
            "--log-to-file/--no-log-to-file",
            "-ltf/",
            default=True,
            help="Enable/disable logging to file (default: enabled)",
        ),
        click.option(
            "--log-to-stdout/--no-log-to-stdout",
            "-lts/",
            default=False,
            help="Enable/disable console logging (default: disabled)",
        ),
        click.option(
            "--log-path",
            "-lp",
            default="",
            help="Custom path for log file (default: ~/.gocator/gocator.log)",
        ),
        click.option(
            "--log-level",
            "-ll",
            default=DEFAULT_LOGLEVEL,
            help="Logging level (DEBUG, INFO, WARNING, ERROR) (default: INFO)",
        ),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _start_log(kwargs: dict):
    start_log(
        log_to_file=kwargs.pop("log_to_file"),
        log_to_stdout=kwargs.pop("log_to_stdout"),
        log_path=kwargs.pop("log_path"),
        log_level=kwargs.pop("log_level"),
    )


@click.group()
@tree_option
def cli():
    """gocator - 3D profile sensor client.

    Talks to profile sensors over their control, data and health channels:

    - Fleet-wide start/stop/trigger/read from the command line

    - Automated self-test of a fleet, against hardware or the emulator

    - A protocol emulator for working without hardware
    """
    pass


@cli.command()
@click.option("--count", "-c", default=2, type=int, help="Number of sensors (default: 2)")
@click.option(
    "--host-address",
    "-ha",
    default=DEFAULT_HOST_ADDR,
    help="Network address to listen on (default: localhost)",
)
@click.option(
    "--base-offset",
    "-o",
    default=0,
    type=int,
    help="Port offset of the first sensor; others follow at +10 (default: 0)",
)
@click.option(
    "--untagged", is_flag=True, help="Reply with untagged X,Y lines instead of DATA,..."
)
@click.option(
    "--points",
    "-p",
    default=SAMPLE_POINTS,
    type=int,
    help="Points in the loaded sample profile (default: 10)",
)
@click.option(
    "--duration",
    "-d",
    default=0.0,
    type=float,
    help="Serve for this many seconds, 0 to run until interrupted (default: 0)",
)
@log_options
def emulator(count, host_address, base_offset, untagged, points, duration, **kwargs):
    """Serve emulated sensors until interrupted.

    Each sensor listens on control/data/health ports 3190/3192/3194 plus its
    offset, and is loaded with a random sample profile.
    """
    from gocator.emulator import EmulatorBank

    _start_log(kwargs)
    bank = EmulatorBank(
        count=count, host=host_address, base_offset=base_offset, tagged=not untagged
    )
    try:
        bank.start()
    except OSError:
        click.echo(f"Error: {format_error_response()}", err=True)
        raise click.ClickException("Could not start the emulator.")
    bank.load_sample(points)
    for sensor in bank:
        click.echo(f"{sensor.name}: {sensor.endpoint}")
    log_file = get_log_filename()
    if log_file:
        click.echo(f"Logging to {log_file}")

    t0 = time.monotonic()
    try:
        while duration <= 0 or time.monotonic() - t0 < duration:
            time.sleep(0.1)
    except KeyboardInterrupt:
        pass
    finally:
        bank.stop()
    click.echo("Emulator stopped.")


@cli.command()
@click.option(
    "--fleet-name",
    "-n",
    default=None,
    help='Fleet configuration to test (e.g. "Lab", "Emulator")',
)
@click.option(
    "--emulate/--no-emulate",
    "-e/",
    default=False,
    help="Test against an in-process emulator instead of a configured fleet",
)
@click.option(
    "--count",
    "-c",
    default=2,
    type=int,
    help="Number of emulated sensors with --emulate (default: 2)",
)
@click.option(
    "--settle-time",
    "-s",
    default=DEFAULT_SETTLE_TIME,
    type=float,
    help="Pause after start, load sample and trigger, in seconds (default: 1)",
)
@click.option("--parallel", is_flag=True, help="Address the sensors concurrently")
@click.option("--json", "as_json", is_flag=True, help="Print the run as JSON")
@log_options
@click.pass_context
def selftest(ctx, fleet_name, emulate, count, settle_time, parallel, as_json, **kwargs):
    """Run the automated self-test.

    Drives the fleet through start, load sample, trigger, read and stop, and
    prints the result of every step. Reads that fail are replaced by a
    simulated profile and reported in the notes.

    Exits with status 1 if the run FAILED.
    """
    from gocator.cli.summary import print_run_summary
    from gocator.emulator import EmulatorBank
    from gocator.harness import SelfTest
    from gocator.system import load_fleet_config

    if bool(fleet_name) == emulate:
        raise click.UsageError("Give exactly one of --fleet-name or --emulate.")

    _start_log(kwargs)
    bank = None
    try:
        if emulate:
            bank = EmulatorBank(count=count, base_offset=None)
            bank.start()
            test = SelfTest(
                bank.sensor_configs(),
                load_sample=bank.load_sample,
                settle_time=settle_time,
                parallel=parallel,
            )
        else:
            try:
                sensors = load_fleet_config(fleet_name).sensors
            except (FileNotFoundError, ValueError) as e:
                raise click.ClickException(str(e))
            test = SelfTest(sensors, settle_time=settle_time, parallel=parallel)
        run = test.run()
    finally:
        if bank is not None:
            bank.stop()

    if as_json:
        click.echo(run.to_json())
    else:
        print_run_summary(run)
    if not run.passed:
        ctx.exit(1)


def _fleet_operation(fleet_name: str, parallel: bool, operation: str, title: str):
    from gocator.cli.summary import print_outcomes
    from gocator.system import Fleet

    try:
        fleet = Fleet.from_config(fleet_name, parallel=parallel)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))
    with fleet:
        if not fleet.enabled_devices:
            raise click.ClickException(f"No device of fleet '{fleet_name}' is enabled.")
        outcomes = getattr(fleet, operation)()
    print_outcomes(title, outcomes)
    return outcomes


def _fleet_command(operation: str, title: str, doc: str):
    @click.option(
        "--fleet-name", "-n", required=True, help="Fleet configuration to address"
    )
    @click.option("--parallel", is_flag=True, help="Address the sensors concurrently")
    @log_options
    @click.pass_context
    def command(ctx, fleet_name, parallel, **kwargs):
        _start_log(kwargs)
        outcomes = _fleet_operation(fleet_name, parallel, operation, title)
        if not any(o.succeeded for o in outcomes):
            ctx.exit(1)

    command.__doc__ = doc
    return command


cli.command(name="read")(
    _fleet_command("read_all", "Profiles", "Read one profile from every sensor.")
)
cli.command(name="start")(
    _fleet_command("start_all", "Start", "Send Start to every sensor.")
)
cli.command(name="stop")(_fleet_command("stop_all", "Stop", "Send Stop to every sensor."))
cli.command(name="trigger")(
    _fleet_command("trigger_all", "Trigger", "Send a software trigger to every sensor.")
)

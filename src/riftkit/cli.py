"""riftkit CLI - development VM setup and maintenance.

Commands:
    setup       Install a development environment profile (root)
    bootstrap   Run setup through sudo from a regular user account
    status      Show AI agent installation status
    killports   Kill processes on development ports
    monitor     Show resource usage of this VM
    config      Show and change riftkit settings
"""

import logging

import click

from riftkit import __version__
from riftkit.click_group import RiftkitGroup
from riftkit.commands import bootstrap, config_group, killports, monitor, setup, status

logger = logging.getLogger(__name__)


@click.group(
    cls=RiftkitGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
@click.version_option(version=__version__)
def main(ctx: click.Context, verbose: bool) -> None:
    """riftkit - set up and maintain AI agent development VMs.

    \b
    SETUP COMMANDS:
        setup         Install a profile (agent, full, custom) as root
        bootstrap     Check requirements, then run setup through sudo
        status        Show which AI agents are installed

    \b
    MAINTENANCE COMMANDS:
        killports     Kill processes on development ports
        monitor       Show CPU, memory, disk and network usage
        config        Show and change settings

    \b
    EXAMPLES:
        $ sudo riftkit setup agent
        $ riftkit killports -p 3000
        $ riftkit monitor --json

    For help on any command: riftkit <command> --help
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


main.add_command(setup)
main.add_command(bootstrap)
main.add_command(status)
main.add_command(killports)
main.add_command(monitor)
main.add_command(config_group)


if __name__ == "__main__":
    main()

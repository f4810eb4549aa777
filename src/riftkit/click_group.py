"""Click group that answers usage errors with the relevant help page.

``riftkit monitor --bogus`` prints the error followed by the monitor help,
and an unknown subcommand prints the top-level help.
"""

from typing import Any, NoReturn

import click

USAGE_ERRORS = (click.exceptions.UsageError, click.exceptions.BadParameter)


def _fail_with_help(error: click.UsageError, fallback: click.Context | None) -> NoReturn:
    ctx = getattr(error, "ctx", None) or fallback
    click.echo(f"Error: {error.format_message()}", err=True)
    if ctx is None:
        raise SystemExit(error.exit_code)
    click.echo("")
    click.echo(ctx.get_help())
    # ctx.exit raises click.exceptions.Exit, which CliRunner understands
    ctx.exit(error.exit_code)


class RiftkitGroup(click.Group):
    """Group that prints contextual help for usage errors in any subcommand."""

    def main(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return super().main(*args, **kwargs)
        except USAGE_ERRORS as e:
            _fail_with_help(e, None)

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except USAGE_ERRORS as e:
            _fail_with_help(e, ctx)

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            # Bad parameters belong to the subcommand and are reported by invoke()
            if isinstance(e, click.exceptions.BadParameter):
                raise
            _fail_with_help(e, ctx)


RiftkitGroup.group_class = RiftkitGroup

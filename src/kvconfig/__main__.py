import click

from kvconfig.core.version import PACKAGE_VERSION
from kvconfig.interfaces.cli.refs import refs
from kvconfig.interfaces.cli.resolve import resolve


@click.group(invoke_without_command=True)
@click.version_option(PACKAGE_VERSION, prog_name="kvconfig")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Resolve Azure Key Vault references in configuration files."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(resolve)
cli.add_command(refs)


if __name__ == "__main__":
    cli()

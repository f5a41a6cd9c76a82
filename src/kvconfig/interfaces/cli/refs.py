from pathlib import Path
from typing import Any

import click

from kvconfig.core.config.clients import AzureClientFactory
from kvconfig.core.config.matcher import match_reference
from kvconfig.core.config.models import KeyVaultLoaderOptions
from kvconfig.core.config.processor import ResolverEngine, load_config_file
from kvconfig.interfaces.cli.utils import output_error, output_result


def format_config_path(path: list[str | int]) -> str:
    """Render a config path as ``database.hosts[0].password``."""
    rendered = ""
    for part in path:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered += f".{part}" if rendered else str(part)
    return rendered


@click.command(name="refs")
@click.argument("config_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def refs(config_file: Path, json_output: bool, debug: bool) -> None:
    """List the Key Vault references of a configuration file.

    Nothing is fetched from the vault.

    \b
    Examples:
        kvconfig refs app.yaml
        kvconfig refs app.yaml --json-output
    """
    try:
        config_data = load_config_file(config_file)
        # The factory is never called while scanning
        engine = ResolverEngine(KeyVaultLoaderOptions(client=AzureClientFactory()))
        found = engine.find_references_in_config(config_data)

        if json_output:
            result: list[dict[str, Any]] = []
            for path, original, resolver_name in found:
                ref = match_reference(original)
                result.append(
                    {
                        "path": path,
                        "reference": original,
                        "resolver": resolver_name,
                        "vault": ref.vault_base_url if ref else None,
                        "secret": ref.secret_name if ref else None,
                        "version": ref.secret_version if ref else None,
                    }
                )
            output_result(result, json_output)
            return

        if not found:
            click.echo(click.style("No Key Vault references found", fg="blue"))
            return

        click.echo(click.style(f"Found {len(found)} Key Vault reference(s):", fg="cyan", bold=True))
        for path, original, _ in found:
            click.echo(f"  {click.style(format_config_path(path), fg='yellow')}: {original}")

    except click.ClickException:
        raise
    except Exception as e:
        output_error(e, json_output, debug)

import os
from pathlib import Path
from typing import Any

import click
import yaml

from kvconfig.core.config.clients import AzureClientFactory
from kvconfig.core.config.loader import load_resolver_config
from kvconfig.core.config.models import ResolverConfigModel
from kvconfig.core.config.processor import ResolverEngine
from kvconfig.interfaces.cli.utils import (
    configure_logging_from_config,
    output_error,
    output_result,
    run_async_cli,
)


async def _resolve_file(
    config_file: Path,
    resolver_config: ResolverConfigModel,
    cache: bool | None,
    cache_dir: Path | None,
) -> dict[str, Any]:
    async with AzureClientFactory() as factory:
        options = resolver_config.to_loader_options(factory)

        overrides: dict[str, Any] = {}
        if cache is not None:
            overrides["cache"] = cache
        if cache_dir is not None:
            overrides["cache_dir"] = cache_dir
        if overrides:
            options = options.model_copy(update=overrides)

        async with ResolverEngine(options) as engine:
            return await engine.process_file(config_file)


def _write_output(path: Path, contents: str) -> None:
    # The file holds plaintext secrets
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(contents)


@click.command(name="resolve")
@click.argument("config_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--cache/--no-cache",
    default=None,
    help="Cache secrets on disk, encrypted (overrides the resolver config)",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Cache directory (default: system temporary directory)",
)
@click.option(
    "--resolver-config",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Resolver configuration file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the resolved configuration to a file instead of stdout",
)
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def resolve(
    config_file: Path,
    cache: bool | None,
    cache_dir: Path | None,
    resolver_config: Path | None,
    output: Path | None,
    json_output: bool,
    debug: bool,
) -> None:
    """Resolve the Key Vault references of a YAML or JSON configuration file.

    Every value shaped like https://VAULT.vault.azure.net/secrets/NAME[/VERSION]
    is replaced with the secret's value. Authentication uses
    DefaultAzureCredential.

    \b
    Examples:
        kvconfig resolve app.yaml                  # Print resolved YAML
        kvconfig resolve app.yaml --cache          # Reuse secrets cached on disk
        kvconfig resolve app.yaml -o resolved.yaml # Write to a file (mode 600)
        kvconfig resolve app.yaml --json-output    # Output in JSON format
    """
    try:
        config = load_resolver_config(resolver_config)
        configure_logging_from_config(config.logging, debug=debug)

        resolved = run_async_cli(_resolve_file(config_file, config, cache, cache_dir))

        if output:
            _write_output(output, yaml.safe_dump(resolved, sort_keys=False))
            if json_output:
                output_result({"output": str(output)}, json_output)
            else:
                click.echo(
                    f"{click.style('✓', fg='green')} Resolved configuration written to {output}",
                    err=True,
                )
        elif json_output:
            output_result(resolved, json_output)
        else:
            click.echo(yaml.safe_dump(resolved, sort_keys=False), nl=False)

    except click.ClickException:
        raise
    except Exception as e:
        output_error(e, json_output, debug)

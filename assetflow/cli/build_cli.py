#!/usr/bin/env python3
"""
assetflow CLI

Runs the development loop or a one-shot production build of a front-end
source tree.
"""

import asyncio
import click
import logging
import sys

from ..config.build_config_loader import load_build_config
from ..config.module_registry import ModuleRegistry
from ..core.exceptions import AssetflowError, BuildError, ConfigurationError
from ..manager import BuildManager
from ..utils.paths import path_join


def _create_manager(ctx) -> BuildManager:
    try:
        return BuildManager(ctx.obj['build_config'])
    except ConfigurationError as e:
        click.echo(str(e), err=True)
        sys.exit(1)


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except BuildError as e:
        click.echo(str(e), err=True)
        for module_id, error in sorted(e.errors.items()):
            click.echo(f"  {module_id}: {error}", err=True)
        sys.exit(1)
    except (AssetflowError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("Stopped")


@click.group()
@click.option('--config', 'config_path', default=None, help='Path to assetflow YAML config')
@click.option('--log-level', default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              help='Set the logging level')
@click.pass_context
def cli(ctx, config_path, log_level):
    """assetflow - build front-end assets for development or production"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    ctx.ensure_object(dict)
    ctx.obj['build_config'] = load_build_config(config_path)


@cli.command()
@click.pass_context
def dev(ctx):
    """Build, then watch sources and serve the output with live reload"""
    manager = _create_manager(ctx)
    _run(manager.dev())


@cli.command()
@click.pass_context
def prod(ctx):
    """Build once with production optimizations"""
    manager = _create_manager(ctx)
    _run(manager.prod())
    click.echo(f"Production build written to {manager.config.dest_root}")


@cli.command()
@click.pass_context
def build(ctx):
    """Build once in development mode"""
    manager = _create_manager(ctx)
    _run(manager.build())


@cli.command()
@click.pass_context
def clean(ctx):
    """Delete everything in the output directory"""
    manager = _create_manager(ctx)
    _run(manager.clean())


@cli.command()
@click.pass_context
def watch(ctx):
    """Watch sources and rebuild changed modules (no initial build)"""
    manager = _create_manager(ctx)
    _run(manager.watch())


@cli.command()
@click.pass_context
def serve(ctx):
    """Serve the output directory with live reload"""
    manager = _create_manager(ctx)
    _run(manager.serve())


@cli.command()
@click.pass_context
def modules(ctx):
    """List enabled modules with their sources and output directories"""
    config = ctx.obj['build_config']
    try:
        registry = ModuleRegistry.from_config(config)
    except ConfigurationError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    click.echo(f"Source: {config.src_root}")
    click.echo(f"Output: {config.dest_root}")
    click.echo("-" * 40)
    for module in registry:
        dest = path_join(config.dest_dir, module.output_subpath)
        click.echo(f"{module.identifier}")
        click.echo(f"  src:  {', '.join(module.source_patterns)}")
        click.echo(f"  dest: {dest}")
        if module.output_extension:
            click.echo(f"  ext:  {module.output_extension}")
        if module.sourcemaps:
            click.echo("  sourcemaps in development")
    disabled = sorted(m for m, enabled in config.modules.items() if not enabled)
    if disabled:
        click.echo(f"Disabled: {', '.join(disabled)}")
    click.echo(f"Server: {'enabled' if registry.server_enabled else 'disabled'}")


if __name__ == "__main__":
    cli()

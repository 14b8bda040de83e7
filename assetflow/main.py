#!/usr/bin/env python3
"""
Programmatic entry points for assetflow: ``dev()`` and ``prod(callback)``.
"""
import asyncio
import logging
from typing import Callable, Optional

from .config.build_config_loader import load_build_config
from .manager import BuildManager


def setup_logging(level: int = logging.INFO):
    """Set up logging configuration."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def dev(config_path: Optional[str] = None) -> None:
    """Build, then watch and serve until interrupted."""
    manager = BuildManager(load_build_config(config_path))
    asyncio.run(manager.dev())


def prod(callback: Optional[Callable[[Optional[BaseException]], None]] = None,
         config_path: Optional[str] = None) -> None:
    """Run one production build and report the outcome to callback."""
    manager = BuildManager(load_build_config(config_path))
    asyncio.run(manager.prod(callback))


def main():
    """Main function: hand over to the click CLI."""
    from .cli.build_cli import cli
    cli()


if __name__ == "__main__":
    main()

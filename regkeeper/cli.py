"""
Command-line interface for regkeeper.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from regkeeper.config import ENV_CONFIG_PATH, load_config
from regkeeper.__version__ import __version__
from regkeeper.context import RegKeeperContext
from regkeeper.exceptions import ConfigError, RegKeeperError
from regkeeper.utils.logger import get_logger, setup_logging
from regkeeper.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar=ENV_CONFIG_PATH,
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="REGKEEPER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="regkeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """regkeeper: plugin registry compatibility generator.

    \b
    Available commands:
      regkeeper generate           Build the compatibility registry

    \b
    Examples:
      regkeeper generate
      regkeeper generate index.json -o generated-registry.json
      regkeeper -v generate --batch-size 5

    Use ``regkeeper COMMAND --help`` for command-specific options.
    """
    _configure_logging(verbose)

    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    regkeeper_ctx = RegKeeperContext()
    regkeeper_ctx.config_path = config or loaded_config.source_path
    regkeeper_ctx.color = color
    regkeeper_ctx.verbose = verbose
    regkeeper_ctx.config = loaded_config
    ctx.obj = regkeeper_ctx

    logger.debug("regkeeper v%s", __version__)
    logger.debug("Config path: %s", regkeeper_ctx.config_path)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
from regkeeper.commands.generate import generate  # noqa: E402

cli.add_command(generate)


def main() -> int:
    """Main entry point for the regkeeper CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except RegKeeperError as exc:
        print_error(str(exc))
        logger.debug(
            "RegKeeperError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())

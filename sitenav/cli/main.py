"""Main CLI entry point for the sitenav command.

This module provides the Typer application that serves as the entry point
for the sitenav command-line tool. It loads the configuration, builds the
router and the contributor filters, and runs navigation operations against
the YAML option store.
"""

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

import typer

from sitenav import __version__
from sitenav.cli.config import ConfigLoader
from sitenav.cli.errors import ConfigError, ConfigFilesystemError
from sitenav.cli.models import ExitCode, NavConfig
from sitenav.cli.output import OutputHandler
from sitenav.filters import FilterError, FilterRegistry
from sitenav.navigation import Navigation, NavigationError
from sitenav.settings import SettingsError, YamlOptionStore

app = typer.Typer(
    name="sitenav",
    help="""Maintain the site navigation from plugin-contributed pages.

QUICK START:
  sitenav install                 # Store the default navigation
  sitenav sync --dry-run          # Preview contributed page changes
  sitenav sync                    # Add new pages, prune expired ones
  sitenav show                    # Print the stored navigation""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

MAIN_OPTION = Navigation.PUBLIC_NAVIGATION_MAIN_OPTION_NAME


@dataclass
class CliState:
    """Global options shared by every command."""
    config_path: Optional[str] = None
    verbosity: int = 0
    no_color: bool = False


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'sitenav' namespace logger to avoid affecting
    third-party libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("sitenav")
    app_logger.setLevel(level)
    app_logger.handlers.clear()

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"sitenav_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _load_setup(state: CliState) -> Tuple[NavConfig, Navigation, YamlOptionStore]:
    """Load the configuration and build an empty navigation and its store.

    An explicit --config must exist; the default configuration path may be
    missing, in which case defaults are used.
    """
    config_path = ConfigLoader.resolve_config_path(state.config_path)
    if state.config_path:
        config = ConfigLoader.load(config_path)
    else:
        config = ConfigLoader.load_or_default(config_path)

    router = ConfigLoader.build_router(config)
    filters: FilterRegistry = ConfigLoader.build_filters(config)
    store = YamlOptionStore(config.settings_file)
    return config, Navigation(router=router, filters=filters), store


def _exit_for_error(output: OutputHandler, error: Exception) -> None:
    """Report an error and exit with the matching exit code."""
    if isinstance(error, (ConfigError, ConfigFilesystemError)):
        logger.error(f"Configuration failed: {error}")
        output.error(str(error))
        raise typer.Exit(ExitCode.CONFIG_ERROR)

    if isinstance(error, NavigationError):
        logger.error(f"Invalid navigation: {error}")
        output.error(f"Invalid navigation: {error}")
        raise typer.Exit(ExitCode.VALIDATION_ERROR)

    if isinstance(error, (FilterError, SettingsError)):
        logger.error(str(error))
        output.error(str(error))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    logger.exception("Unexpected error")
    output.error(f"Unexpected error: {error}")
    raise typer.Exit(ExitCode.GENERAL_ERROR)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sitenav version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: $SITENAV_CONFIG or .sitenav/config.yaml)",
        metavar="PATH",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Maintain the site navigation from plugin-contributed pages."""
    _configure_logging(verbosity, logdir)
    ctx.obj = CliState(config_path=config, verbosity=verbosity, no_color=no_color)


@app.command()
def show(
    ctx: typer.Context,
    option: str = typer.Option(MAIN_OPTION, "--option", help="Option name of the navigation"),
) -> None:
    """Print the stored navigation as a tree."""
    state: CliState = ctx.obj
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)

    try:
        _, nav, store = _load_setup(state)
        output.debug(f"Settings file: {store.path}")
        nav.load_as_option(option, store)
    except Exception as e:
        _exit_for_error(output, e)

    output.print_navigation(nav, option)
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def sync(
    ctx: typer.Context,
    filter_name: str = typer.Option(
        "",
        "--filter",
        help="Filter to apply (default: the main navigation filter)",
    ),
    option: str = typer.Option(MAIN_OPTION, "--option", help="Option name of the navigation"),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--dryrun",
        help="Preview changes without saving them",
    ),
) -> None:
    """Add pages contributors provide and prune the ones they dropped."""
    state: CliState = ctx.obj
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)

    try:
        _, nav, store = _load_setup(state)
        output.debug(f"Settings file: {store.path}")
        nav.load_as_option(option, store)
        output.info(f"Loaded {nav.count()} top-level page(s) from option '{option}'")

        result = nav.add_pages_from_filter(filter_name)

        if result.changed and not dry_run:
            nav.save_as_option(option, store)
            output.info(f"Saved option '{option}' to {store.path}")
    except Exception as e:
        _exit_for_error(output, e)

    output.print_filter_summary(result, dry_run=dry_run)
    if state.verbosity >= 1:
        output.print_navigation(nav, option)

    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def install(
    ctx: typer.Context,
    option: str = typer.Option(MAIN_OPTION, "--option", help="Option name of the navigation"),
    force: bool = typer.Option(
        False,
        "--force",
        help="Replace an already stored navigation",
    ),
) -> None:
    """Store the default navigation for an option."""
    state: CliState = ctx.obj
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)

    try:
        _, nav, store = _load_setup(state)

        if store.get(option) and not force:
            output.warning(f"Option '{option}' already has a navigation (use --force to replace it)")
            raise typer.Exit(ExitCode.SUCCESS)

        value = Navigation.get_navigation_option_value_for_install(option, nav.filters, nav.router)
        if not value:
            output.warning(f"No default navigation for option '{option}'")
            raise typer.Exit(ExitCode.SUCCESS)

        store.set(option, value)
    except typer.Exit:
        raise
    except Exception as e:
        _exit_for_error(output, e)

    output.success(f"Installed default navigation as option '{option}'")
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def export(
    ctx: typer.Context,
    option: str = typer.Option(MAIN_OPTION, "--option", help="Option name of the navigation"),
) -> None:
    """Print the stored navigation as JSON."""
    state: CliState = ctx.obj
    output = OutputHandler(verbosity=state.verbosity, no_color=state.no_color)

    try:
        _, nav, store = _load_setup(state)
        nav.load_as_option(option, store)
    except Exception as e:
        _exit_for_error(output, e)

    typer.echo(json.dumps(nav.to_list(), indent=2))
    raise typer.Exit(ExitCode.SUCCESS)


def main() -> None:
    """Main entry point for the CLI application."""
    app()


# Allow running as: python -m sitenav.cli.main
if __name__ == "__main__":
    main()

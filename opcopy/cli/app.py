"""Main CLI application for opcopy."""

import logging
import sys
from importlib.metadata import distribution
from typing import Annotated

import typer

from opcopy.cli.decorators.error_handling import print_stack_trace_if_verbose
from opcopy.cli.helpers.location import parse_location
from opcopy.config.user_config import UserConfig, create_user_config
from opcopy.core.errors import ConfigError
from opcopy.core.logging import get_logger, setup_logging
from opcopy.factory import DefaultOperatorFactory, ProfileOperatorFactory
from opcopy.protocols import StorageOperatorProtocol


__all__ = ["app", "main", "__version__", "AppContext"]


__version__ = distribution("opcopy").version

logger = logging.getLogger(__name__)


class AppContext:
    """Application context for storing shared state."""

    def __init__(
        self,
        user_config: UserConfig,
        verbose: int = 0,
        log_file: str | None = None,
    ):
        """Initialize AppContext.

        Args:
            user_config: Loaded user configuration
            verbose: Verbosity level
            log_file: Path to log file
        """
        self.user_config = user_config
        self.verbose = verbose
        self.log_file = log_file

        base = DefaultOperatorFactory(
            chunk_size=user_config.data.chunk_size_kb * 1024
        )
        self._local_factory = base
        self._profile_factory = ProfileOperatorFactory(
            user_config.get_profiles(), base=base
        )
        self._local_operator: StorageOperatorProtocol | None = None

    def resolve_location(self, text: str) -> tuple[StorageOperatorProtocol, str]:
        """Turn a CLI location into an operator and a path on it."""
        location = parse_location(text)
        if location.profile is not None:
            operator = self._profile_factory.from_uri(f"{location.profile}://")
            return operator, location.path

        if self._local_operator is None:
            self._local_operator = self._local_factory.from_uri("fs:///")
        return self._local_operator, location.path


app = typer.Typer(
    name="opcopy",
    help=f"""opcopy v{__version__}

Copy and list files across storage backends.

Locations are either '<profile>:<path>', using a profile from the
configuration file, or a local path.

Common workflows:
  • Copy a file:        opcopy cp report.pdf archive:reports/
  • Copy a directory:   opcopy cp -r photos/ archive:photos/
  • Copy glob matches:  opcopy cp 'logs/**/*.log' archive:logs/
  • List entries:       opcopy ls -r archive:reports/""",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG)",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging (equivalent to -vv)"),
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Log to file")
    ] = None,
    config_file: Annotated[
        str | None,
        typer.Option("-c", "--config", help="Path to configuration file"),
    ] = None,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    """opcopy storage copy tool."""
    if version:
        print(f"opcopy v{__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit()

    log_level = logging.WARNING
    if debug:
        log_level = logging.DEBUG
    elif verbose == 1:
        log_level = logging.INFO
    elif verbose >= 2:
        log_level = logging.DEBUG

    setup_logging(level=log_level, log_file=log_file)

    try:
        user_config = create_user_config(cli_config_path=config_file)
    except ConfigError as e:
        get_logger(__name__).error("configuration_error", error=str(e))
        print_stack_trace_if_verbose()
        raise typer.Exit(1) from e

    if not verbose and not debug:
        # No explicit CLI flag, use the configured log level
        setup_logging(level=user_config.get_log_level_int(), log_file=log_file)

    ctx.obj = AppContext(user_config=user_config, verbose=verbose, log_file=log_file)


def main() -> int:
    """Main CLI entry point."""
    exit_code = 0

    try:
        from opcopy.cli.commands import register_all_commands

        register_all_commands(app)

        app()

    except SystemExit as e:
        exit_code = e.code if isinstance(e.code, int) else 0

    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        print_stack_trace_if_verbose()
        exit_code = 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())

"""CLI utility functions for jdkpack.

This module provides common utilities used across CLI commands including:
- Configuration loading from jdkpack.ini, the environment and flags
- Error handling and formatting
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

from jdkpack.build import ConfigureFailedError, MakeFailedError
from jdkpack.config import BuildConfig, BuildConfigLoader
from jdkpack.errors import JdkPackError

DEFAULT_CONFIG_FILE = "jdkpack.ini"


class ConfigResolver:
    """Builds the BuildConfig a command runs with."""

    @staticmethod
    def find_config_file(config_file: Optional[Path], cwd: Optional[Path] = None) -> Optional[Path]:
        """Explicit config file, or jdkpack.ini in the working directory if present.

        Raises:
            FileNotFoundError: If an explicit config file doesn't exist
        """
        if config_file is not None:
            if not config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_file}")
            return config_file

        default = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILE
        return default if default.exists() else None

    @staticmethod
    def load(config_file: Optional[Path], overrides: Dict[str, Any]) -> BuildConfig:
        """Load configuration; flags override the environment, which overrides the file.

        Raises:
            FileNotFoundError: If an explicit config file doesn't exist
            BuildConfigError: If the resulting configuration is invalid
        """
        ini_path = ConfigResolver.find_config_file(config_file)
        return BuildConfigLoader(ini_path).load(overrides)


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Configuration error", "Build failed")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def error_title(error: JdkPackError) -> str:
        if isinstance(error, ConfigureFailedError):
            return "Configure failed!"
        if isinstance(error, MakeFailedError):
            return "Make failed!"
        return f"Build failed! ({type(error).__name__})"

    @staticmethod
    def handle_build_error(error: JdkPackError) -> None:
        """Report a pipeline failure and exit with status 1."""
        ErrorFormatter.print_error(ErrorFormatter.error_title(error), str(error))
        sys.exit(1)

    @staticmethod
    def handle_file_not_found(error: FileNotFoundError) -> None:
        ErrorFormatter.print_error("Error: File not found", str(error))
        print("Pass --config or run from a directory containing jdkpack.ini.")
        sys.exit(1)

    @staticmethod
    def handle_permission_error(error: PermissionError) -> None:
        ErrorFormatter.print_error("Error: Permission denied", str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)

"""
Command-line interface for jdkpack.

This module provides the `jdkpack` CLI tool for building and packaging JDKs.
"""

import argparse
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from jdkpack import __version__
from jdkpack.cli_utils import ConfigResolver, ErrorFormatter
from jdkpack.errors import JdkPackError
from jdkpack.log_utils import setup_logging
from jdkpack.orchestrator import BuildOrchestrator
from jdkpack.version import semantic_version


@dataclass
class BuildArgs:
    """Arguments for the build and package commands."""

    config_file: Optional[Path] = None
    overrides: Dict[str, Any] = field(default_factory=dict)
    version_tag: Optional[str] = None
    verbose: bool = False


@dataclass
class ResolveArgs:
    """Arguments for the resolve-version and configure-args commands."""

    config_file: Optional[Path] = None
    overrides: Dict[str, Any] = field(default_factory=dict)
    fetch: bool = True
    verbose: bool = False


def _print_artifacts(artifacts: Dict[Any, Path]) -> None:
    if not artifacts:
        return
    print()
    print("Artifacts:")
    for kind, path in artifacts.items():
        print(f"  {kind.value:<16} {path}")


def build_command(args: BuildArgs) -> None:
    """Build and package a JDK.

    Examples:
        jdkpack build                              # Use ./jdkpack.ini
        jdkpack build -c ci.ini --release          # Release build
        jdkpack build --variant openj9 --feature-version 17
    """
    print(f"jdkpack v{__version__}")
    print()

    try:
        config = ConfigResolver.load(args.config_file, args.overrides)
        setup_logging(config.config_dir, verbose=args.verbose)

        print(f"Building {config.variant.value} {config.core_version}...")

        orchestrator = BuildOrchestrator(
            config,
            invocation_args=" ".join(sys.argv[1:]),
            verbose=args.verbose,
        )
        start_time = time.time()
        result = orchestrator.build()
        build_time = time.time() - start_time

        if result.success:
            ErrorFormatter.print_success("Build successful!")
            print()
            print(f"Version: {result.version}")
            _print_artifacts(result.artifacts)
            print()
            print(f"Build time: {build_time:.2f}s")
            sys.exit(0)
        elif result.error is not None:
            ErrorFormatter.handle_build_error(result.error)
        else:
            ErrorFormatter.print_error("Build failed!", result.message)
            sys.exit(1)

    except JdkPackError as e:
        ErrorFormatter.handle_build_error(e)
    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def package_command(args: BuildArgs) -> None:
    """Package an already built JDK.

    Examples:
        jdkpack package                            # Re-resolve the version without fetching
        jdkpack package --version-tag jdk-17.0.2+8
    """
    try:
        config = ConfigResolver.load(args.config_file, args.overrides)
        setup_logging(config.config_dir, verbose=args.verbose)

        orchestrator = BuildOrchestrator(config, verbose=args.verbose)
        version = args.version_tag or orchestrator.resolve_version(fetch=False)
        print(f"Packaging {version}...")

        result = orchestrator.package(version)
        ErrorFormatter.print_success("Packaging successful!")
        _print_artifacts(result.artifacts)
        sys.exit(0)

    except JdkPackError as e:
        ErrorFormatter.handle_build_error(e)
    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except PermissionError as e:
        ErrorFormatter.handle_permission_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def resolve_version_command(args: ResolveArgs) -> None:
    """Print the OpenJDK version a build would use."""
    try:
        config = ConfigResolver.load(args.config_file, args.overrides)
        setup_logging(verbose=args.verbose)
        version = BuildOrchestrator(config).resolve_version(fetch=args.fetch)
        print(version)
        if args.verbose:
            print(f"Semantic version: {semantic_version(version)}")
        sys.exit(0)

    except JdkPackError as e:
        ErrorFormatter.handle_build_error(e)
    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def configure_args_command(args: ResolveArgs) -> None:
    """Print the configure arguments a build would use."""
    try:
        config = ConfigResolver.load(args.config_file, args.overrides)
        setup_logging(verbose=args.verbose)
        orchestrator = BuildOrchestrator(config)
        version = orchestrator.resolve_version(fetch=args.fetch)
        print(orchestrator.configure_arguments(version).render())
        sys.exit(0)

    except JdkPackError as e:
        ErrorFormatter.handle_build_error(e)
    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


# (flag, config field, extra argparse options)
CONFIG_FLAGS: List[tuple] = [
    ("--workspace", "workspace_dir", {"type": Path, "help": "Workspace directory"}),
    ("--variant", "variant", {"help": "Build variant (temurin, corretto, openj9, ...)"}),
    ("--feature-version", "feature_version", {"type": int, "help": "OpenJDK feature version (e.g. 17)"}),
    ("--tag", "tag", {"help": "Build this tag instead of the latest one"}),
    ("--boot-jdk", "jdk_boot_dir", {"help": "Boot JDK directory"}),
    ("--configure-args", "user_configure_args", {"help": "Extra configure arguments, applied last"}),
    ("--make-args", "user_make_args", {"help": "Extra make arguments"}),
    ("--target-file-name", "target_file_name", {"help": "JDK archive file name"}),
    ("--scm-ref", "scm_ref", {"help": "Source control ref recorded in the SBOM"}),
]

# (flag, config field, help)
CONFIG_SWITCHES: List[tuple] = [
    ("--release", "release", "Release build"),
    ("--jre", "create_jre_image", "Also package a JRE"),
    ("--debug-image", "create_debug_image", "Also package a debug image"),
    ("--sbom", "create_sbom", "Generate an SBOM"),
    ("--source-archive", "create_source_archive", "Also archive the sources"),
    ("--use-docker", "use_docker", "Build runs inside docker"),
    ("--disable-branch-safety", "disable_branch_safety", "Fall back to a placeholder version when no tag matches"),
]


def _common_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "-c",
        "--config",
        dest="config_file",
        type=Path,
        default=None,
        help="Configuration file (default: ./jdkpack.ini if present)",
    )
    for flag, dest, options in CONFIG_FLAGS:
        parser.add_argument(flag, dest=dest, default=None, **options)
    for flag, dest, help_text in CONFIG_SWITCHES:
        parser.add_argument(flag, dest=dest, action="store_true", default=None, help=help_text)
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )
    return parser


def _overrides(parsed_args: argparse.Namespace) -> Dict[str, Any]:
    names = [dest for _, dest, _ in CONFIG_FLAGS] + [dest for _, dest, _ in CONFIG_SWITCHES]
    return {name: getattr(parsed_args, name) for name in names if getattr(parsed_args, name) is not None}


def main(argv: Optional[List[str]] = None) -> None:
    """jdkpack - JDK build orchestration and packaging."""
    parser = argparse.ArgumentParser(
        prog="jdkpack",
        description="jdkpack - JDK build orchestration and packaging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"jdkpack {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    common = _common_parser()

    subparsers.add_parser("build", parents=[common], help="Build and package a JDK")

    package_parser = subparsers.add_parser("package", parents=[common], help="Package an already built JDK")
    package_parser.add_argument(
        "--version-tag",
        default=None,
        help="OpenJDK version that was built (default: resolve from tags without fetching)",
    )

    for name, help_text in (
        ("resolve-version", "Print the OpenJDK version to build"),
        ("configure-args", "Print the configure arguments"),
    ):
        sub = subparsers.add_parser(name, parents=[common], help=help_text)
        sub.add_argument(
            "--no-fetch",
            dest="fetch",
            action="store_false",
            help="Do not fetch tags from the remote",
        )

    parsed_args = parser.parse_args(argv)

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    overrides = _overrides(parsed_args)

    if parsed_args.command in ("build", "package"):
        build_args = BuildArgs(
            config_file=parsed_args.config_file,
            overrides=overrides,
            version_tag=getattr(parsed_args, "version_tag", None),
            verbose=parsed_args.verbose,
        )
        if parsed_args.command == "build":
            build_command(build_args)
        else:
            package_command(build_args)
    else:
        resolve_args = ResolveArgs(
            config_file=parsed_args.config_file,
            overrides=overrides,
            fetch=parsed_args.fetch,
            verbose=parsed_args.verbose,
        )
        if parsed_args.command == "resolve-version":
            resolve_version_command(resolve_args)
        else:
            configure_args_command(resolve_args)


if __name__ == "__main__":
    main()

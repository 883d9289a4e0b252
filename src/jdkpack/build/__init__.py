"""Build system components for jdkpack.

This module provides configure argument derivation and the toolchain driver.
"""

from .build_time import BuildTimestamp, DateDialect, EnvironmentCompatibilityError
from .configure_args import ConfigureArgumentBuilder, ConfigureArgumentSet
from .driver import (
    BuildDriver,
    BuildDriverError,
    ConfigureFailedError,
    MakeFailedError,
)
from .failure_logs import FailureLogCollector
from .process_tree import kill_process_tree
from .source_archive import SourceArchiveCreator
from .vendor import VendorInfo, vendor_for

__all__ = [
    "BuildTimestamp",
    "DateDialect",
    "EnvironmentCompatibilityError",
    "ConfigureArgumentBuilder",
    "ConfigureArgumentSet",
    "BuildDriver",
    "BuildDriverError",
    "ConfigureFailedError",
    "MakeFailedError",
    "FailureLogCollector",
    "kill_process_tree",
    "SourceArchiveCreator",
    "VendorInfo",
    "vendor_for",
]

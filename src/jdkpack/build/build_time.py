"""Build timestamps for reproducible builds.

The hotspot build time must be identical across the passes of a multi-pass
build, so it is taken once from the system date utility. GNU (and BusyBox)
date and BSD date take different arguments; the dialect is detected by
probing `date --version`. Internally the time is a UTC datetime at whole
second precision and is only formatted at the configure boundary.
"""

import subprocess
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from ..errors import JdkPackError

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
DATE_SUFFIX_FORMAT = "%Y%m%d%H%M"


class EnvironmentCompatibilityError(JdkPackError):
    """Raised when no usable date utility is available."""

    pass


class DateDialect(str, Enum):
    GNU = "gnu"
    BSD = "bsd"


DIALECT_COMMANDS = {
    DateDialect.GNU: ["date", "--utc", f"+{ISO_FORMAT}"],
    DateDialect.BSD: ["date", "-u", "-j", f"+{ISO_FORMAT}"],
}


class BuildTimestamp:
    """Reads the current UTC time through the system date utility."""

    def __init__(self, run: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        """
        Args:
            run: subprocess.run compatible callable (injectable for tests)
        """
        self._run = run
        self._dialect: Optional[DateDialect] = None

    def detect_dialect(self) -> DateDialect:
        """Probe the date utility for GNU/BusyBox compatibility.

        Raises:
            EnvironmentCompatibilityError: If no date utility can be run
        """
        if self._dialect is not None:
            return self._dialect

        try:
            result = self._run(
                ["date", "--version"],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise EnvironmentCompatibilityError(
                "No usable date utility found, cannot compute build time"
            ) from e

        output = result.stdout or ""
        if "GNU" in output or "BusyBox" in output:
            self._dialect = DateDialect.GNU
        else:
            self._dialect = DateDialect.BSD
        return self._dialect

    def now(self) -> datetime:
        """Current time according to the date utility, UTC, whole seconds.

        Raises:
            EnvironmentCompatibilityError: If the detected dialect does not work
        """
        dialect = self.detect_dialect()
        cmd = DIALECT_COMMANDS[dialect]
        try:
            result = self._run(cmd, capture_output=True, text=True)
        except (FileNotFoundError, PermissionError) as e:
            raise EnvironmentCompatibilityError(f"Failed to run {' '.join(cmd)}") from e

        if result.returncode != 0:
            raise EnvironmentCompatibilityError(
                f"{' '.join(cmd)} failed ({dialect.value} dialect): {result.stderr}"
            )

        try:
            parsed = datetime.strptime(result.stdout.strip(), ISO_FORMAT)
        except ValueError as e:
            raise EnvironmentCompatibilityError(
                f"Unexpected output from {' '.join(cmd)}: {result.stdout!r}"
            ) from e
        return parsed.replace(tzinfo=timezone.utc)

    def hotspot_build_time(self) -> str:
        return format_iso(self.now())


def format_iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime(ISO_FORMAT)


def date_suffix(moment: datetime) -> str:
    """UTC minute-granularity suffix used for non-release version strings."""
    return moment.astimezone(timezone.utc).strftime(DATE_SUFFIX_FORMAT)

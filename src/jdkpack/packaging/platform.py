"""Host platform probes used while packaging."""

import logging
import subprocess
from typing import Callable

from ..config import BuildConfig

GLIBC = "glibc"
MUSL = "musl"


def detect_libc(run: Callable[..., subprocess.CompletedProcess] = subprocess.run) -> str:
    """C library flavour of the build host.

    musl's ldd prints its banner on stderr and exits non-zero for --version,
    so only the first output line is inspected and the exit code ignored.
    """
    try:
        result = run(
            ["ldd", "--version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        logging.info(f"ldd unavailable, assuming {GLIBC}: {e}")
        return GLIBC

    first_line = (result.stdout or "").splitlines()[:1]
    if first_line and MUSL in first_line[0].lower():
        return MUSL
    return GLIBC


def static_libs_arch(config: BuildConfig) -> str:
    if config.os_architecture == "x86_64":
        return "amd64"
    return config.os_architecture


def static_libs_layout(config: BuildConfig, libc: str = "") -> str:
    """Directory scheme static libraries are expected under.

    Examples:
        Linux:   lib/static/linux-amd64/glibc
        Darwin:  Contents/Home/lib/static/darwin-amd64
        Windows: lib/static/windows-amd64
    """
    arch = static_libs_arch(config)
    kernel = config.os_kernel_name.lower()
    if config.is_windows:
        return f"lib/static/windows-{arch}"
    if kernel == "darwin":
        return f"Contents/Home/lib/static/darwin-{arch}"
    if kernel == "linux":
        return f"lib/static/linux-{arch}/{libc or GLIBC}"
    return f"lib/static/{config.os_kernel_name}-{arch}"

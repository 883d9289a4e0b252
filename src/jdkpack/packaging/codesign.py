"""Code signing of packaged images (macOS)."""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

from ..errors import JdkPackError


class CodeSignError(JdkPackError):
    """Raised when the signing utility rejects a path."""

    pass


class CodeSigner(ABC):
    """Signs a file or bundle in place."""

    @abstractmethod
    def sign(self, path: Path) -> None:
        ...


class MacCodeSigner(CodeSigner):
    """Signs with the macOS codesign tool using a hardened runtime."""

    def __init__(
        self,
        identity: str,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.identity = identity
        self.run = run

    def command(self, path: Path) -> list:
        return [
            "codesign",
            "--options",
            "runtime",
            "--timestamp",
            "--sign",
            self.identity,
            str(path),
        ]

    def sign(self, path: Path) -> None:
        """
        Raises:
            CodeSignError: If codesign is missing or fails
        """
        logging.info(f"Signing {path}")
        try:
            result = self.run(self.command(path), capture_output=True, text=True)
        except OSError as e:
            raise CodeSignError(f"codesign could not be run: {e}") from e
        if result.returncode != 0:
            raise CodeSignError(f"codesign failed for {path}: {result.stderr.strip()}")

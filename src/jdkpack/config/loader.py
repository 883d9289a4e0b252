"""
Build configuration loader.

Reads a jdkpack.ini file, applies environment variable overrides and then
explicit overrides (from the command line) to produce a BuildConfig.

Example jdkpack.ini:
    [build]
    workspace_dir = /home/build/workspace
    variant = temurin
    feature_version = 17
    release = true
    user_configure_args = --with-extra-cflags=-O2

Environment overrides use the JDKPACK_ prefix, e.g. JDKPACK_RELEASE=false.
"""

import configparser
import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .build_config import BuildConfig, BuildConfigError

ENV_PREFIX = "JDKPACK_"
SECTION = "build"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class BuildConfigLoader:
    """Loads BuildConfig values from INI files and the environment.

    Usage:
        loader = BuildConfigLoader(Path("jdkpack.ini"))
        config = loader.load(overrides={"release": True})
    """

    def __init__(
        self,
        ini_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            ini_path: Optional path to an INI file with a [build] section
            environ: Environment mapping (defaults to os.environ)
        """
        self.ini_path = ini_path
        self.environ = os.environ if environ is None else environ
        self._types = {f.name: f.type for f in fields(BuildConfig)}

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> BuildConfig:
        """Load configuration.

        Precedence (lowest to highest): INI file, environment, overrides.

        Raises:
            BuildConfigError: If the file cannot be parsed or values are invalid
        """
        values: Dict[str, Any] = {}
        values.update(self._read_ini())
        values.update(self._read_environment())
        for key, value in (overrides or {}).items():
            if value is not None:
                values[key] = value

        return BuildConfig.from_dict(
            {key: self._coerce(key, value) for key, value in values.items()}
        )

    def _read_ini(self) -> Dict[str, str]:
        if self.ini_path is None:
            return {}

        if not self.ini_path.exists():
            raise BuildConfigError(f"Configuration file not found: {self.ini_path}")

        parser = configparser.ConfigParser(
            interpolation=configparser.ExtendedInterpolation()
        )
        try:
            parser.read(self.ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise BuildConfigError(f"Failed to parse {self.ini_path}: {e}") from e

        if SECTION not in parser:
            raise BuildConfigError(f"No [{SECTION}] section in {self.ini_path}")

        return {key: value.strip() for key, value in parser[SECTION].items()}

    def _read_environment(self) -> Dict[str, str]:
        values = {}
        for name in self._types:
            env_key = ENV_PREFIX + name.upper()
            if env_key in self.environ:
                values[name] = self.environ[env_key]
        return values

    def _coerce(self, key: str, value: Any) -> Any:
        """Convert string values from files/environment to field types."""
        if not isinstance(value, str):
            return value

        field_type = self._types.get(key)
        # Annotations may be strings when postponed evaluation is enabled
        type_name = getattr(field_type, "__name__", str(field_type))

        if type_name == "bool":
            lowered = value.strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
            raise BuildConfigError(f"Invalid boolean for '{key}': {value}")
        if type_name == "int":
            try:
                return int(value)
            except ValueError:
                raise BuildConfigError(f"Invalid integer for '{key}': {value}") from None
        return value

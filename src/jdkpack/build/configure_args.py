"""Configure Argument Builder.

This module derives the full argument list passed to OpenJDK's configure
script from a BuildConfig and the resolved version.

Design:
    - Arguments are collected in an ordered ConfigureArgumentSet
    - An automatic argument is skipped when its flag name appears anywhere in
      the user-supplied configure string (substring match, so the user can
      also pass value variants of a flag)
    - Per-band version rules are dispatched through a table keyed by the
      feature version band (8 / 9 / 10+)
    - The user-supplied string is appended last and always has final say
"""

import logging
import shutil
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from ..config import BuildConfig, BuildVariant
from ..version.tags import build_number_from_version, update_number_from_version
from .build_time import BuildTimestamp, date_suffix
from .vendor import NULL_URL, VendorInfo, vendor_for

# Lets users pass literal double quotes through several layers of shell
SPEECH_MARK_PLACEHOLDER = "temporary_speech_mark_placeholder"

_SHELL_SPECIAL = set(" \t\n'\"$`\\;&|<>()*?")


def _quote(value: str) -> str:
    """Double-quote a value for the configure command line when needed."""
    if value and any(ch in _SHELL_SPECIAL for ch in value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$").replace("`", "\\`")
        return f'"{escaped}"'
    return value


class ConfigureArgumentSet:
    """Ordered (flag, value) pairs plus the user override string.

    Flags carry their separator, e.g. ("--with-boot-jdk=", "/opt/jdk") or
    ("--enable-jfr", "").
    """

    def __init__(self, user_args: str = ""):
        """
        Args:
            user_args: User-supplied configure arguments, appended last
        """
        self.user_args = user_args.replace(SPEECH_MARK_PLACEHOLDER, '"').strip()
        self._entries: List[Tuple[str, str]] = []

    def is_overridden(self, flag: str) -> bool:
        """True when the user string mentions the flag (substring match).

        This deliberately preserves substring semantics: a user flag such as
        "--with-x" also suppresses "--with-x11".
        """
        return flag in self.user_args

    def add(self, flag: str, value: str = "") -> bool:
        """Append an argument unless the user already supplied that flag.

        Returns:
            True if the argument was added
        """
        if self.is_overridden(flag):
            logging.debug(f"Skipping {flag}, overridden by user configure args")
            return False
        self._entries.append((flag, value))
        return True

    def add_if_value(self, flag: str, value: Optional[str]) -> bool:
        """Append an argument only when the value is non-empty."""
        if not value:
            return False
        return self.add(flag, value)

    def remove(self, flag: str) -> None:
        """Remove every automatic argument with the given flag."""
        self._entries = [(f, v) for f, v in self._entries if f != flag]

    def mentions(self, text: str) -> bool:
        """True when the automatic or user arguments contain the text."""
        return text in self._render_entries() or text in self.user_args

    def value_of(self, flag: str) -> Optional[str]:
        for f, v in reversed(self._entries):
            if f == flag:
                return v
        return None

    @property
    def entries(self) -> List[Tuple[str, str]]:
        return list(self._entries)

    @property
    def flags(self) -> List[str]:
        return [f for f, _ in self._entries]

    def __contains__(self, flag: str) -> bool:
        return any(f == flag for f, _ in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _render_entries(self) -> str:
        return " ".join(f"{flag}{_quote(value)}" for flag, value in self._entries)

    def render(self) -> str:
        """Render the final configure argument string, user args last."""
        parts = [self._render_entries(), self.user_args]
        return " ".join(part for part in parts if part)

    def __str__(self) -> str:
        return self.render()


class ConfigureArgumentBuilder:
    """Builds configure arguments from a BuildConfig.

    Example usage:
        builder = ConfigureArgumentBuilder(config, version="jdk-11.0.2+9")
        args = builder.build()
        print(args.render())
    """

    def __init__(
        self,
        config: BuildConfig,
        version: str,
        now: Optional[datetime] = None,
        timestamp: Optional[BuildTimestamp] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        """
        Args:
            config: Build configuration
            version: Resolved version string (e.g. "jdk-17.0.2+8")
            now: Time used for date suffixes (defaults to current UTC time)
            timestamp: Date utility wrapper for the hotspot build time
            which: Executable lookup (injectable for tests)
        """
        self.config = config
        self.version = version
        self.now = now or datetime.now(timezone.utc)
        self.timestamp = timestamp or BuildTimestamp()
        self.which = which
        self.vendor: VendorInfo = vendor_for(config)

    def build(self) -> ConfigureArgumentSet:
        """Derive the complete argument set.

        Raises:
            EnvironmentCompatibilityError: If a build time is needed and no
                date utility works
        """
        args = ConfigureArgumentSet(self.config.user_configure_args)

        self._add_version_string_args(args)
        self._add_boot_jdk_args(args)
        self._add_shenandoah_args(args)
        self._add_codesign_args(args)
        self._add_debug_args(args)

        if self.config.is_windows:
            logging.info(
                "Windows environment detected, skipping custom boot JDK and other configure settings"
            )
        else:
            self._add_platform_args(args)

        self._add_reproducible_build_args(args)
        args.add_if_value("--with-jvm-variants=", self.config.jvm_variant)
        self._add_cacerts_args(args)
        self._add_freetype_args(args)

        logging.info(f"Configure args are now: {args.render()}")
        return args

    # Version string

    @property
    def date_suffix(self) -> str:
        return date_suffix(self.now)

    def _version_band(self) -> str:
        if self.config.feature_version == 8:
            return "8"
        if self.config.feature_version == 9:
            return "9"
        return "10+"

    def _add_version_string_args(self, args: ConfigureArgumentSet) -> None:
        config = self.config

        # --with-milestone is only used for 8; later versions use version-pre/opt
        if config.feature_version == 8:
            args.add("--with-milestone=", "fcs" if config.release else "beta")

        if config.feature_version != 8:
            args.add("--with-vendor-name=", self.vendor.name)
        args.add("--with-vendor-url=", self.vendor.url)
        args.add("--with-vendor-bug-url=", self.vendor.bug_url or NULL_URL)
        args.add("--with-vendor-vm-bug-url=", self.vendor.vm_bug_url or NULL_URL)

        band_rules: Dict[str, Callable[[ConfigureArgumentSet], str]] = {
            "8": self._jdk8_version_args,
            "9": self._jdk9_version_args,
            "10+": self._modern_version_args,
        }
        build_number = band_rules[self._version_band()](args)

        if config.feature_version > 8 and config.variant == BuildVariant.TEMURIN:
            args.add(
                "--with-vendor-version-string=",
                f"{self.vendor.version or 'Temurin'}-{self.vendor_version_suffix(build_number)}",
            )

    def vendor_version_suffix(self, build_number: str) -> str:
        """jdk-11.0.7+10 with build 10 -> 11.0.7+10 (plus date when not a release)."""
        base = self.version
        if base.startswith("jdk-"):
            base = base[len("jdk-"):]
        derived = f"{base.split('+', 1)[0]}+{build_number}"
        if not self.config.release:
            derived = f"{derived}-{self.date_suffix}"
        return derived

    def _jdk8_version_args(self, args: ConfigureArgumentSet) -> str:
        config = self.config
        if not config.release:
            args.add("--with-user-release-suffix=", self.date_suffix)

        if config.variant == BuildVariant.TEMURIN:
            args.add("--with-company-name=", "Temurin")
            # No JFR support in AIX or zero builds (s390x or armv7l)
            if (
                config.os_architecture not in ("s390x", "armv7l")
                and config.os_kernel_name != "aix"
            ):
                args.add("--enable-jfr")

        update_number = config.update_version or update_number_from_version(self.version)
        args.add_if_value("--with-update-version=", update_number)

        build_number = config.build_number or build_number_from_version(self.version, 8)
        if build_number and build_number != "ga":
            args.add_if_value("--with-build-number=", build_number)
        return build_number

    def _add_opt_pre_args(self, args: ConfigureArgumentSet) -> None:
        if self.config.release:
            args.add("--without-version-opt")
            args.add("--without-version-pre")
        else:
            args.add("--with-version-opt=", self.date_suffix)
            args.add("--with-version-pre=", "beta")

    def _jdk9_version_args(self, args: ConfigureArgumentSet) -> str:
        build_number = self.config.build_number
        if not build_number:
            parts = self.version.split("+", 1)
            build_number = parts[1] if len(parts) > 1 else ""
        self._add_opt_pre_args(args)
        args.add_if_value("--with-version-build=", build_number)
        return build_number

    def _modern_version_args(self, args: ConfigureArgumentSet) -> str:
        build_number = self.config.build_number or build_number_from_version(
            self.version, self.config.feature_version
        )
        self._add_opt_pre_args(args)
        args.add_if_value("--with-version-build=", build_number)
        return build_number

    # Toolchain and features

    def _add_boot_jdk_args(self, args: ConfigureArgumentSet) -> None:
        args.add_if_value("--with-boot-jdk=", self.config.jdk_boot_dir)

    def _add_shenandoah_args(self, args: ConfigureArgumentSet) -> None:
        # Shenandoah was backported to 11 but needs an explicit feature flag there
        if self.config.feature_version == 11 and self.config.variant in (
            BuildVariant.TEMURIN,
            BuildVariant.CORRETTO,
        ):
            args.add("--with-jvm-features=", "shenandoahgc")

    def _add_codesign_args(self, args: ConfigureArgumentSet) -> None:
        args.add_if_value("--with-macosx-codesign-identity=", self.config.codesign_identity)

    def _add_debug_args(self, args: ConfigureArgumentSet) -> None:
        config = self.config
        args.add("--with-debug-level=", "release")

        if config.create_debug_image:
            args.add("--with-native-debug-symbols=", "external")
            return

        # OpenJ9 keeps its symbols attached, its own packaging extracts them
        keeps_symbols = config.variant == BuildVariant.OPENJ9
        if config.feature_version == 8:
            args.add("--disable-zip-debug-info")
            if not keeps_symbols:
                args.add("--disable-debug-symbols")
        elif not keeps_symbols:
            args.add("--with-native-debug-symbols=", "none")

    def _add_platform_args(self, args: ConfigureArgumentSet) -> None:
        config = self.config
        work_dir = config.workspace_dir / config.working_dir

        if self.which("ccache"):
            args.add("--enable-ccache")

        if config.variant == BuildVariant.OPENJ9 and config.freemarker_version:
            args.add(
                "--with-freemarker-jar=",
                str(work_dir / f"freemarker-{config.freemarker_version}" / "freemarker.jar"),
            )

        if config.feature_version == 8:
            args.add("--with-x=", "/usr/include/X11")
            args.add("--with-alsa=", str(work_dir / "installedalsa"))

    def _add_reproducible_build_args(self, args: ConfigureArgumentSet) -> None:
        """17 and 19+ support reproducible builds via --with-source-date."""
        fv = self.config.feature_version
        if not (fv >= 19 or fv == 17):
            return

        if self.config.release:
            # Use the release date and disable ccache
            args.add("--with-source-date=", "version")
            args.add("--disable-ccache")
            args.remove("--enable-ccache")
        else:
            args.add("--with-source-date=", "updated")
            # Dual pass builds (e.g. macOS) must share one hotspot build time
            args.add("--with-hotspot-build-time=", self.timestamp.hotspot_build_time())

        args.add("--with-build-user=", self.config.variant.value)

    def _add_cacerts_args(self, args: ConfigureArgumentSet) -> None:
        config = self.config
        if not config.custom_cacerts or not config.security_dir:
            return
        if config.feature_version >= 17:
            args.add_if_value("--with-cacerts-src=", f"{config.security_dir}/certs")
        else:
            args.add_if_value("--with-cacerts-file=", f"{config.security_dir}/cacerts")

    def _add_freetype_args(self, args: ConfigureArgumentSet) -> None:
        config = self.config
        if args.mentions("--with-freetype") or not config.freetype:
            return

        freetype_dir = config.freetype_directory
        legacy = config.feature_version <= 10
        if config.is_windows:
            if legacy:
                args.add("--with-freetype-src=", str(config.workspace_dir / "libs" / "freetype"))
            else:
                freetype_dir = freetype_dir or "bundled"
        elif legacy:
            freetype_dir = freetype_dir or str(
                config.workspace_dir / config.working_dir / "installedfreetype"
            )
        else:
            freetype_dir = freetype_dir or "bundled"

        if freetype_dir:
            logging.info(f"Setting freetype dir to {freetype_dir}")
            args.add("--with-freetype=", freetype_dir)

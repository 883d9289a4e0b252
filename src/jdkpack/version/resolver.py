"""
Version resolution for jdkpack.

Derives the canonical version string (e.g. "jdk-11.0.12+7" or
"jdk8u292-b10") for a build. Three sources are consulted, in order:

1. A version manifest (version.txt) for variants whose upstream ships one
2. An explicit tag from the build configuration
3. The highest release tag in the source repository

Per-variant rules live in a strategy table keyed by variant and feature
version band, so each variant's rules can be tested on their own.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..config import BuildConfig, BuildVariant
from ..errors import JdkPackError
from .tags import TagGrammar, grammar_for_feature_version, select_latest_tag
from .vcs import VersionControlProvider


class VersionResolutionError(JdkPackError):
    """Raised when no version can be determined for a build."""

    pass


MANIFEST_NAME = "version.txt"
OPENJ9_TAG_FILE = Path("closed") / "openjdk-tag.gmk"


@dataclass(frozen=True)
class TagStrategy:
    """How a variant finds and post-processes its version tag."""

    search_pattern: str
    grammar: TagGrammar
    postprocess: Callable[[str], str]
    # Maps a listed tag onto the grammar it is ranked by
    comparable: Callable[[str], str] = lambda tag: tag


def _strip_adopt(tag: str) -> str:
    if tag.endswith("_adopt"):
        tag = tag[: -len("_adopt")]
    if tag.startswith("aarch64-shenandoah-"):
        tag = tag[len("aarch64-shenandoah-"):]
    return tag


def _dragonwell_tag(tag: str) -> str:
    # dragonwell-11.0.12.8_jdk-11.0.12-ga -> jdk-11.0.12-ga
    parts = tag.split("_")
    return parts[1] if len(parts) > 1 else tag


def _bisheng_comparable(tag: str) -> str:
    # aarch64-shenandoah-jdk8u302-b08 -> jdk8u302-b08, jdk-11.0.14+9-bisheng_riscv -> jdk-11.0.14+9
    if tag.startswith("aarch64-shenandoah-"):
        tag = tag[len("aarch64-shenandoah-"):]
    return tag.split("-bisheng", 1)[0]


def _bisheng_tag(tag: str) -> str:
    # jdk-11.0.14+9-bisheng_riscv -> 11.0.14+9, aarch64-shenandoah-jdk8u302-b08 -> jdk8u302-b08
    tag = _bisheng_comparable(tag)
    if tag.startswith("jdk-"):
        return tag[len("jdk-"):].split("_", 1)[0]
    return tag


def tag_strategy(config: BuildConfig) -> TagStrategy:
    """Select the tag strategy for a build."""
    fv = config.feature_version
    grammar = grammar_for_feature_version(fv)
    default_pattern = "jdk8u*-b*" if fv == 8 else f"jdk-{fv}*+*"

    if config.variant == BuildVariant.DRAGONWELL:
        return TagStrategy("dragonwell-*_jdk*", grammar, _dragonwell_tag)

    if config.variant == BuildVariant.BISHENG:
        if config.os_architecture == "riscv64":
            return TagStrategy("jdk-*+*bisheng_riscv", grammar, _bisheng_tag, _bisheng_comparable)
        if fv == 8:
            # Bisheng's 8 tags follow the aarch64 convention
            return TagStrategy("aarch64-shenandoah-jdk8u*-b*", grammar, _bisheng_tag, _bisheng_comparable)
        return TagStrategy(default_pattern, grammar, _bisheng_tag)

    return TagStrategy(default_pattern, grammar, _strip_adopt)


def _fields(line: str) -> List[str]:
    return line.strip().split(".")


def _field(values: List[str], position: int) -> str:
    """1-based field lookup, empty when absent."""
    return values[position - 1] if len(values) >= position else ""


def _corretto_manifest(values: List[str], config: BuildConfig) -> str:
    if _field(values, 1) == "8":
        return f"jdk8u{_field(values, 2)}-b{_field(values, 3)}.{_field(values, 4)}"
    return (
        f"jdk-{_field(values, 1)}.{_field(values, 2)}.{_field(values, 3)}"
        f"+{_field(values, 4)}.{_field(values, 5)}"
    )


def _dragonwell_manifest(values: List[str], config: BuildConfig) -> str:
    if config.feature_version == 8:
        return f"jdk8u{_field(values, 2)}-b{_field(values, 6)}"
    build = _field(values, 5).split("-", 1)[0]
    return f"jdk-11.{_field(values, 2)}.{_field(values, 3)}+{build}"


def _bisheng_manifest(values: List[str], config: BuildConfig) -> str:
    if config.feature_version == 8:
        return f"jdk8u{_field(values, 2)}-b{_field(values, 5)}"
    return f"jdk-11.{_field(values, 2)}.{_field(values, 3)}+{_field(values, 5)}"


# Variants whose upstream ships a version manifest, and whether it is mandatory
MANIFEST_PARSERS: Dict[BuildVariant, Callable[[List[str], BuildConfig], str]] = {
    BuildVariant.CORRETTO: _corretto_manifest,
    BuildVariant.DRAGONWELL: _dragonwell_manifest,
    BuildVariant.BISHENG: _bisheng_manifest,
}
MANIFEST_REQUIRED = {BuildVariant.CORRETTO}


def placeholder_version(feature_version: int) -> str:
    """Version used when no tag is found and branch safety is disabled."""
    if feature_version == 8:
        return "8u000-b00"
    return f"jdk-{feature_version}.0.0+0"


class VersionResolver:
    """Resolves the canonical version string for a build.

    Example usage:
        resolver = VersionResolver(config, GitProvider(config.source_path))
        version = resolver.resolve()   # e.g. "jdk-17.0.2+8"
    """

    def __init__(self, config: BuildConfig, vcs: VersionControlProvider):
        """
        Args:
            config: Build configuration
            vcs: Provider for the OpenJDK source repository
        """
        self.config = config
        self.vcs = vcs

    def resolve(self, fetch: bool = True) -> str:
        """Resolve the version string.

        Args:
            fetch: Fetch tags from the remote before querying them

        Returns:
            Canonical version string

        Raises:
            VersionResolutionError: If no version can be determined
        """
        manifest_version = self.version_from_manifest()
        if manifest_version is not None:
            logging.info(f"Version from {MANIFEST_NAME}: {manifest_version}")
            return manifest_version

        strategy = tag_strategy(self.config)
        tag = self.config.tag or self.latest_tag(fetch=fetch)
        version = strategy.postprocess(tag)
        logging.info(f"OpenJDK repo tag is {version}")
        return version

    def version_from_manifest(self) -> Optional[str]:
        """Read the version from the variant's manifest file, if it has one.

        Raises:
            VersionResolutionError: If a mandatory manifest is missing
        """
        parser = MANIFEST_PARSERS.get(self.config.variant)
        if parser is None:
            return None

        manifest = self.config.source_path / MANIFEST_NAME
        if not manifest.is_file():
            if self.config.variant in MANIFEST_REQUIRED:
                raise VersionResolutionError(
                    f"{self.config.variant.value} requires a version manifest: {manifest}"
                )
            return None

        lines = manifest.read_text(encoding="utf-8").splitlines()
        first_line = lines[0] if lines else ""
        return parser(_fields(first_line), self.config)

    def latest_tag(self, fetch: bool = True) -> str:
        """Find the highest release tag for this build.

        Raises:
            VersionResolutionError: If no tag matches and branch safety is on
        """
        openj9_tag = self._openj9_pinned_tag()
        if openj9_tag:
            return openj9_tag

        strategy = tag_strategy(self.config)
        if fetch:
            self.vcs.fetch_tags()

        tags = self.vcs.list_tags(strategy.search_pattern)
        by_comparable = {}
        for tag in tags:
            by_comparable.setdefault(strategy.comparable(tag), tag)
        best = select_latest_tag(by_comparable, strategy.grammar)
        if best is not None:
            return by_comparable[best.raw]

        logging.warning("Failed to identify latest tag in the repository")
        if self.config.disable_branch_safety:
            fallback = placeholder_version(self.config.feature_version)
            logging.warning(
                f"Branch safety is off, defaulting to placeholder version {fallback}"
            )
            return fallback

        raise VersionResolutionError(
            f"No tag matching '{strategy.search_pattern}' found for "
            f"{self.config.variant.value} {self.config.feature_version}"
        )

    def _openj9_pinned_tag(self) -> Optional[str]:
        """OpenJ9 pins its OpenJDK level in closed/openjdk-tag.gmk."""
        if self.config.variant != BuildVariant.OPENJ9:
            return None

        tag_file = self.config.source_path / OPENJ9_TAG_FILE
        if not tag_file.is_file():
            return None

        for line in tag_file.read_text(encoding="utf-8").splitlines():
            if "OPENJDK_TAG" in line:
                parts = re.split(r"[ :=]+", line)
                if len(parts) > 1 and parts[1]:
                    return parts[1]
        return None

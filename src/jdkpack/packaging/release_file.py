"""
Release file metadata.

Every JDK image carries a "release" file of KEY="value" lines. The build
appends its own provenance fields to it in a fixed order, mirrors the result
to the JRE image, and finally appends the IMAGE_TYPE marker to each. Fields
are only ever appended, never rewritten.
"""

import logging
import platform
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..config import BuildConfig, BuildVariant
from ..version.tags import semantic_version
from ..version.vcs import VersionControlProvider
from .targets import PackagingError

RELEASE_FILE = "release"


class JavaRuntimeProbe:
    """Queries the freshly built java launcher.

    Cross-compiled images cannot run on the build host, so every query
    answers empty for them.
    """

    def __init__(
        self,
        java_home: Path,
        cross_compile: bool = False,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.java_home = Path(java_home)
        self.cross_compile = cross_compile
        self.run = run
        self._properties: Optional[Dict[str, str]] = None

    @property
    def java(self) -> Path:
        return self.java_home / "bin" / "java"

    def check(self) -> None:
        """
        Raises:
            PackagingError: If the image has no java launcher
        """
        if not self.java.exists():
            raise PackagingError(f"Error 'java' does not exist in '{self.java_home}'.")

    def _java(self, args: List[str]) -> str:
        if self.cross_compile:
            return ""
        try:
            result = self.run(
                [str(self.java), *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise PackagingError(f"Failed to run {self.java}: {e}") from e
        return result.stdout.replace("\r", "")

    def version_output(self) -> str:
        """Output of java -version."""
        return self._java(["-version"]).strip()

    def properties(self) -> Dict[str, str]:
        """System properties from -XshowSettings:properties."""
        if self._properties is None:
            properties = {}
            for line in self._java(["-XshowSettings:properties", "-version"]).splitlines():
                if " = " in line:
                    key, _, value = line.strip().partition(" = ")
                    properties.setdefault(key.strip(), value.strip())
            self._properties = properties
        return self._properties

    def property(self, name: str) -> str:
        return self.properties().get(name, "")


class ReleaseMetadata:
    """Ordered, append-only KEY="value" record."""

    def __init__(self):
        self._fields: List[Tuple[str, str]] = []

    def append(self, key: str, value: str) -> None:
        self._fields.append((key, value))

    @property
    def fields(self) -> List[Tuple[str, str]]:
        return list(self._fields)

    def keys(self) -> List[str]:
        return [key for key, _ in self._fields]

    def render(self) -> str:
        return "".join(f'{key}="{value}"\n' for key, value in self._fields)


def jvm_variant_name(variant: BuildVariant) -> str:
    if variant in (BuildVariant.TEMURIN, BuildVariant.CORRETTO):
        return "Hotspot"
    return variant.value[:1].upper() + variant.value[1:]


class ReleaseFileWriter:
    """Appends build provenance to the release files of the built images."""

    def __init__(
        self,
        config: BuildConfig,
        version: str,
        vendor: str,
        build_vcs: VersionControlProvider,
        source_vcs: VersionControlProvider,
        probe: JavaRuntimeProbe,
        openj9_tag: Optional[str] = None,
    ):
        """
        Args:
            config: Build configuration
            version: Resolved OpenJDK version tag
            vendor: Vendor name recorded as IMPLEMENTOR
            build_vcs: Repository of the build scripts (the workspace)
            source_vcs: OpenJDK source repository
            probe: Probe of the built java launcher
            openj9_tag: Tag of the OpenJ9 commit built, for OPENJ9_TAG
        """
        self.config = config
        self.version = version
        self.vendor = vendor
        self.build_vcs = build_vcs
        self.source_vcs = source_vcs
        self.probe = probe
        self.openj9_tag = openj9_tag

    def build_info(self) -> str:
        kernel = self.config.os_kernel_name.lower()
        if kernel == "darwin":
            build_os, build_version = "macOS", platform.mac_ver()[0] or "Unknown"
        elif kernel == "linux":
            build_os, build_version = platform.system() or "Unknown", platform.release() or "Unknown"
        else:
            build_os = self.probe.property("os.name") or "Unknown"
            build_version = self.probe.property("os.version") or "Unknown"
        return f"OS: {build_os} Version: {build_version}"

    def collect(self) -> ReleaseMetadata:
        """Provenance fields in release-file order, without IMAGE_TYPE."""
        record = ReleaseMetadata()
        if self.config.feature_version == 8:
            record.append("IMPLEMENTOR", self.vendor)

        build_sha = self.build_vcs.current_commit_short_hash()
        if build_sha:
            record.append("BUILD_SOURCE", f"git:{build_sha}")
        else:
            logging.warning("Unable to fetch build SHA, does a work tree exist?...")

        build_repo = self.build_vcs.remote_url()
        if build_repo:
            record.append("BUILD_SOURCE_REPO", build_repo)
        else:
            logging.warning("Unable to fetch Build Source Repo, does a work tree exist?...")

        source_repo = self.source_vcs.remote_url()
        if source_repo:
            record.append("SOURCE_REPO", source_repo)
        else:
            logging.warning("Unable to fetch OpenJDK Source Repo, does a work tree exist?...")

        record.append("FULL_VERSION", self.probe.property("java.runtime.version"))
        record.append("SEMANTIC_VERSION", semantic_version(self.version))
        record.append("BUILD_INFO", self.build_info())
        record.append("JVM_VARIANT", jvm_variant_name(self.config.variant))
        record.append("JVM_VERSION", self.probe.property("java.vm.version"))

        if self.config.variant == BuildVariant.OPENJ9 and not self.config.release:
            record.append("OPENJ9_TAG", self.openj9_tag or "")
        return record

    @staticmethod
    def already_written(release: Path) -> bool:
        if not release.is_file():
            return False
        return any(line.startswith("IMAGE_TYPE=") for line in release.read_text(encoding="utf-8").splitlines())

    def write(self, jdk_home: Path, jre_home: Optional[Path] = None) -> Optional[ReleaseMetadata]:
        """Append the record to the JDK release file and mirror it to the JRE.

        Args:
            jdk_home: Java home of the JDK image
            jre_home: Java home of the JRE image, if one was produced

        Returns:
            The appended record, or None if the image already carries one
        """
        jdk_release = Path(jdk_home) / RELEASE_FILE
        if self.already_written(jdk_release):
            logging.info(f"{jdk_release} already has build metadata, skipping")
            return None

        record = self.collect()
        with open(jdk_release, "a", encoding="utf-8") as f:
            f.write(record.render())

        jre_release = None
        if self.config.create_jre_image and jre_home is not None:
            if Path(jre_home).is_dir():
                jre_release = Path(jre_home) / RELEASE_FILE
                shutil.copyfile(jdk_release, jre_release)
            else:
                logging.warning(f"JRE image {jre_home} not found, release file not mirrored")

        with open(jdk_release, "a", encoding="utf-8") as f:
            f.write('IMAGE_TYPE="JDK"\n')
        if jre_release is not None:
            with open(jre_release, "a", encoding="utf-8") as f:
                f.write('IMAGE_TYPE="JRE"\n')

        record.append("IMAGE_TYPE", "JDK")
        return record

"""Build metadata files consumed by publishing and the SBOM."""

import logging
from pathlib import Path
from typing import Dict, Optional

from ..config import BuildConfig, BuildVariant
from ..version.vcs import VersionControlProvider

UNKNOWN_REPO = "ErrorUnknown"


def _commit_url(repo_url: Optional[str], sha: str, fallback: str = "") -> str:
    repo = repo_url or fallback
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return f"{repo}/commit/{sha}"


def variant_version_parts(openj9_tag: str) -> Dict[str, str]:
    """Split an OpenJ9 tag such as "openj9-0.22.0-m2" into version parts."""
    parts = openj9_tag[len("openj9-"):].replace("-", ".").split(".")

    def part(index: int, default: str) -> str:
        if index < len(parts) and parts[index]:
            return parts[index]
        return default

    return {
        "major": part(0, "0"),
        "minor": part(1, "0"),
        "security": part(2, "0"),
        "tags": part(3, ""),
    }


class MetadataWriter:
    """Writes the plain-text files under <target>/metadata."""

    def __init__(
        self,
        config: BuildConfig,
        vendor: str,
        build_vcs: VersionControlProvider,
        source_vcs: VersionControlProvider,
    ):
        self.config = config
        self.vendor = vendor
        self.build_vcs = build_vcs
        self.source_vcs = source_vcs

    @property
    def directory(self) -> Path:
        return self.config.metadata_dir

    def _write(self, name: str, content: str) -> Path:
        path = self.directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def write_version_output(self, version_output: str) -> Path:
        return self._write("version.txt", version_output)

    def write_all(self, openj9_tag: Optional[str] = None) -> Dict[str, Path]:
        """Write vendor, source and variant metadata.

        Returns:
            Written files keyed by file name
        """
        written = {}

        if self.config.variant == BuildVariant.OPENJ9 and openj9_tag:
            for name, value in variant_version_parts(openj9_tag).items():
                written[f"variant_version/{name}.txt"] = self._write(f"variant_version/{name}.txt", value)

        written["vendor.txt"] = self._write("vendor.txt", self.vendor)

        build_sha = self.build_vcs.current_commit_short_hash()
        if build_sha:
            url = _commit_url(self.build_vcs.remote_url(), build_sha, UNKNOWN_REPO)
            written["buildSource.txt"] = self._write("buildSource.txt", url)
        else:
            logging.warning("Unable to fetch build SHA, does a work tree exist?...")

        source_sha = self.source_vcs.current_commit_short_hash()
        if source_sha:
            url = _commit_url(self.source_vcs.remote_url(), source_sha)
            written["openjdkSource.txt"] = self._write("openjdkSource.txt", url)
        else:
            logging.warning("Unable to fetch OpenJDK Source SHA, does a work tree exist?...")

        # Always present so the SBOM can reference it, empty when no ref was given
        written["scmref.txt"] = self._write("scmref.txt", self.config.scm_ref)
        return written

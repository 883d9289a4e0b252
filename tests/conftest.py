"""Shared fixtures for jdkpack tests."""

import fnmatch
from pathlib import Path
from typing import List, Optional
from unittest.mock import Mock

import pytest

from jdkpack.config import BuildConfig
from jdkpack.version import VersionControlProvider


class FakeVcs(VersionControlProvider):
    """In-memory repository."""

    def __init__(
        self,
        tags: Optional[List[str]] = None,
        sha: Optional[str] = None,
        remote: Optional[str] = None,
        describe: Optional[str] = None,
    ):
        self.tags = list(tags or [])
        self.sha = sha
        self.remote = remote
        self.describe = describe
        self.fetch_count = 0
        self.listed_patterns: List[str] = []

    def list_tags(self, pattern: str) -> List[str]:
        self.listed_patterns.append(pattern)
        return [tag for tag in self.tags if fnmatch.fnmatchcase(tag, pattern)]

    def fetch_tags(self) -> None:
        self.fetch_count += 1

    def current_commit_short_hash(self) -> Optional[str]:
        return self.sha

    def remote_url(self) -> Optional[str]:
        return self.remote

    def describe_tag(self) -> Optional[str]:
        return self.describe


@pytest.fixture
def fake_vcs():
    """Factory for in-memory repositories."""
    return FakeVcs


@pytest.fixture
def make_config(tmp_path):
    """Factory for BuildConfig values rooted in a temporary workspace."""

    def _make(**overrides) -> BuildConfig:
        values = {
            "workspace_dir": tmp_path / "workspace",
            "variant": "temurin",
            "feature_version": 17,
            "target_file_name": "OpenJDK17U-jdk_x64_linux_hotspot_17.0.2_8.tar.gz",
        }
        values.update(overrides)
        return BuildConfig(**values)

    return _make


@pytest.fixture
def built_images():
    """Factory laying out a fake OpenJDK build output tree.

    Returns the images directory, e.g.
    <build_root>/build/linux-x86_64-server-release/images
    """

    def _build(config: BuildConfig, images: Optional[List[str]] = None) -> Path:
        images_dir = config.build_root / "build" / "linux-x86_64-server-release" / "images"
        jdk = images_dir / config.jdk_image_name
        (jdk / "bin").mkdir(parents=True)
        (jdk / "bin" / "java").write_text("#!/bin/sh\n")
        (jdk / "lib").mkdir()
        (jdk / "lib" / "libjvm.so").write_bytes(b"\x7fELF")
        (jdk / "release").write_text('JAVA_VERSION="17.0.2"\n')

        for name in images or []:
            image = images_dir / name
            (image / "lib").mkdir(parents=True)
            (image / "lib" / f"{name}.bin").write_bytes(b"data")
            if name == config.jre_image_name:
                (image / "release").write_text('JAVA_VERSION="17.0.2"\n')
        return images_dir

    return _build


def java_probe_output(runtime_version: str = "17.0.2+8", vm_version: str = "17.0.2+8") -> str:
    return (
        "Property settings:\n"
        "    java.runtime.version = " + runtime_version + "\n"
        "    java.vm.version = " + vm_version + "\n"
        "    os.name = Linux\n"
        "    os.version = 5.15.0\n"
        'openjdk version "17.0.2" 2022-01-18\n'
    )


@pytest.fixture
def java_runner():
    """subprocess.run stand-in answering like a built java launcher."""

    def _runner(output: Optional[str] = None) -> Mock:
        result = Mock(returncode=0, stdout=output if output is not None else java_probe_output(), stderr="")
        return Mock(return_value=result)

    return _runner

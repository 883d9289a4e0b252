"""
Unit tests for BuildOrchestrator.

Tests the complete build orchestration process including:
- Workspace preparation
- Version resolution and configure arguments
- Toolchain invocation (mocked)
- Metadata, SBOM and packaging
- Build result generation
"""

from unittest.mock import Mock

import pytest

from jdkpack.build import ConfigureFailedError
from jdkpack.orchestrator import BuildOrchestrator, BuildResult, detect_boot_jdk
from jdkpack.packaging import ArtifactKind, TarArchiver

MAINLINE_TAGS = ["jdk-11.0.2+9", "jdk-11.0.2+7", "jdk-11.0.1+13"]
JDK11_NAME = "OpenJDK11U-jdk_x64_linux_hotspot_11.0.2_9.tar.gz"


def _process(exit_code=0):
    process = Mock()
    process.stdout = iter(["Finished building target 'images'\n"])
    process.wait = Mock(return_value=exit_code)
    process.pid = 1
    return process


@pytest.fixture
def orchestrator_for(fake_vcs, built_images, java_runner):
    """Orchestrator whose toolchain lays out a fake build when run."""

    def _orchestrator(config, exit_code=0, tags=MAINLINE_TAGS, **kwargs):
        vcs = fake_vcs(
            tags=tags,
            sha="abc1234",
            remote="https://github.com/adoptium/jdk11u.git",
            describe="openj9-0.30.0",
        )

        def popen(cmd, **popen_kwargs):
            if exit_code == 0:
                built_images(config, images=["jre"])
            return _process(exit_code)

        timestamp = Mock()
        timestamp.hotspot_build_time = Mock(return_value="2024-01-02T03:04:05Z")
        options = {
            "vcs_factory": lambda path: vcs,
            "archiver": TarArchiver(show_progress=False),
            "timestamp": timestamp,
            "popen": Mock(side_effect=popen),
            "run": java_runner(),
            "libc_probe": lambda: "glibc",
        }
        options.update(kwargs)
        orchestrator = BuildOrchestrator(config, **options)
        orchestrator.fake_vcs = vcs
        return orchestrator

    return _orchestrator


class TestBuild:
    """End-to-end builds with a mocked toolchain."""

    def test_mainline_11_release(self, make_config, orchestrator_for):
        config = make_config(feature_version=11, release=True, target_file_name=JDK11_NAME)
        result = orchestrator_for(config).build()

        assert isinstance(result, BuildResult)
        assert result.success, result.message
        assert result.version == "jdk-11.0.2+9"
        assert "--without-version-opt" in result.configure_args
        assert "--without-version-pre" in result.configure_args
        assert "--with-version-opt" not in result.configure_args
        assert result.artifacts[ArtifactKind.JDK] == config.target_path / JDK11_NAME
        assert result.artifacts[ArtifactKind.JDK].stat().st_size > 0

    def test_metadata_written(self, make_config, orchestrator_for):
        config = make_config(feature_version=11, release=True, target_file_name=JDK11_NAME)
        orchestrator_for(config).build()
        metadata = config.metadata_dir

        assert (metadata / "vendor.txt").read_text() == "Eclipse Adoptium"
        assert (metadata / "configure.txt").read_text().startswith("--with-vendor-name=")
        assert (metadata / "makeCommandArg.txt").read_text() == "make images"
        assert (metadata / "version.txt").exists()
        assert (config.target_path / "build.log").exists()

    def test_sbom_and_jre(self, make_config, orchestrator_for):
        config = make_config(create_sbom=True, create_jre_image=True)
        orchestrator = orchestrator_for(config, tags=["jdk-17.0.2+8"], invocation_args="build --sbom --jre")

        result = orchestrator.build()

        assert result.success, result.message
        assert result.artifacts[ArtifactKind.SBOM].name == "OpenJDK17U-sbom_x64_linux_hotspot_17.0.2_8.json"
        assert result.artifacts[ArtifactKind.JRE].exists()
        assert (config.config_dir / "makejdk-any-platform.args").read_text() == "build --sbom --jre"

    def test_target_dir_is_wiped(self, make_config, orchestrator_for):
        config = make_config(feature_version=11, target_file_name=JDK11_NAME)
        config.target_path.mkdir(parents=True)
        (config.target_path / "stale.tar.gz").write_text("old")

        orchestrator_for(config).build()

        assert not (config.target_path / "stale.tar.gz").exists()

    def test_configure_failure(self, make_config, orchestrator_for):
        config = make_config(feature_version=11, target_file_name=JDK11_NAME)
        result = orchestrator_for(config, exit_code=2).build()

        assert not result.success
        assert isinstance(result.error, ConfigureFailedError)
        assert result.artifacts == {}

    def test_no_tags(self, make_config, orchestrator_for):
        result = orchestrator_for(make_config(), tags=[]).build()

        assert not result.success
        assert "No tag matching" in result.message

    def test_make_exploded_skips_packaging(self, make_config, orchestrator_for):
        config = make_config(feature_version=11, make_exploded=True, target_file_name=JDK11_NAME)
        result = orchestrator_for(config).build()

        assert result.success
        assert ArtifactKind.JDK not in result.artifacts

    def test_source_archive(self, make_config, orchestrator_for):
        config = make_config(feature_version=11, create_source_archive=True, target_file_name=JDK11_NAME)
        config.source_path.mkdir(parents=True)
        (config.source_path / "configure").write_text("#!/bin/sh\n")

        result = orchestrator_for(config).build()

        assert result.success, result.message
        assert result.artifacts[ArtifactKind.SOURCES].name == "OpenJDK11U-jdk-sources_11.0.2_9.tar.gz"


class TestPhases:
    """Tests for individual orchestration phases."""

    def test_docker_redetects_boot_jdk(self, make_config, orchestrator_for):
        config = make_config(use_docker=True, jdk_boot_dir="/host/jdk")
        orchestrator = orchestrator_for(config, boot_jdk_probe=lambda: "/container/jdk")

        assert orchestrator.prepare_config().jdk_boot_dir == "/container/jdk"

    def test_boot_jdk_kept_outside_docker(self, make_config, orchestrator_for):
        config = make_config(jdk_boot_dir="/host/jdk")
        assert orchestrator_for(config).prepare_config().jdk_boot_dir == "/host/jdk"

    def test_openj9_target_layout(self, make_config, orchestrator_for):
        config = make_config(variant="openj9")
        orchestrator_for(config).prepare_target_dir()

        assert (config.metadata_dir / "variant_version").is_dir()

    def test_openj9_package_records_tag(self, make_config, orchestrator_for, built_images):
        config = make_config(variant="openj9")
        built_images(config)
        result = orchestrator_for(config).package("jdk-17.0.2+8")

        assert (config.metadata_dir / "variant_version" / "minor.txt").read_text() == "30"
        assert result.release.fields[-2] == ("OPENJ9_TAG", "openj9-0.30.0")

    def test_resolve_version_without_fetch(self, make_config, orchestrator_for):
        orchestrator = orchestrator_for(make_config(feature_version=11))

        assert orchestrator.resolve_version(fetch=False) == "jdk-11.0.2+9"
        assert orchestrator.fake_vcs.fetch_count == 0

    def test_cross_compile_skips_version_output(self, make_config, orchestrator_for, built_images):
        config = make_config(cross_compile=True)
        built_images(config)
        run = Mock()
        orchestrator_for(config, run=run).package("jdk-17.0.2+8")

        assert not (config.metadata_dir / "version.txt").exists()
        run.assert_not_called()


class TestDetectBootJdk:
    """Tests for boot JDK detection."""

    def test_jdk_boot_dir_wins(self, tmp_path):
        environ = {"JDK_BOOT_DIR": str(tmp_path), "JAVA_HOME": "/elsewhere"}
        assert detect_boot_jdk(environ, which=lambda name: None) == str(tmp_path)

    def test_java_home(self, tmp_path):
        assert detect_boot_jdk({"JAVA_HOME": str(tmp_path)}, which=lambda name: None) == str(tmp_path)

    def test_javac_on_path(self, tmp_path):
        javac = tmp_path / "jdk16" / "bin" / "javac"
        javac.parent.mkdir(parents=True)
        javac.write_text("")

        assert detect_boot_jdk({}, which=lambda name: str(javac)) == str((tmp_path / "jdk16").resolve())

    def test_nothing_found(self):
        assert detect_boot_jdk({"JAVA_HOME": "/does/not/exist"}, which=lambda name: None) == ""

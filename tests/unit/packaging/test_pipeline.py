"""
Unit tests for the packaging pipeline.

These run every stage against a fake build output tree and produce real
tarballs in the target directory.
"""

from pathlib import Path

import pytest

from jdkpack.packaging import (
    ArchiveCreator,
    ArchiveVerificationError,
    Archiver,
    ArtifactKind,
    PackagingPipeline,
    TarArchiver,
)
from jdkpack.packaging.codesign import CodeSigner
from jdkpack.packaging.targets import find_images_dir

VERSION = "jdk-17.0.2+8"


class RecordingSigner(CodeSigner):
    """Records what a bundle looked like when it was sealed."""

    def __init__(self, archive_dir: Path):
        self.archive_dir = archive_dir
        self.sealed = []

    def sign(self, path: Path) -> None:
        home = path / "Contents" / "Home"
        release = home / "release"
        self.sealed.append(
            {
                "bundle": path.name,
                "release": release.read_text() if release.exists() else "",
                "notice": (home / "NOTICE").exists(),
                "archives": sorted(p.name for p in self.archive_dir.glob("*.tar.gz")),
            }
        )


class EmptyArchiver(Archiver):
    """Produces a zero-byte archive."""

    extension = ".tar.gz"

    def compress(self, source_dir: Path) -> Path:
        path = self.scratch_path(source_dir)
        path.write_bytes(b"")
        return path


@pytest.fixture
def pipeline_for(built_images, fake_vcs, java_runner):
    def _pipeline(config, archiver=None, images=("jre", "test", "static-libs"), signer=None):
        built_images(config, images=list(images))
        creator = ArchiveCreator(archiver or TarArchiver(show_progress=False), config.target_path, show_progress=False)
        return PackagingPipeline(
            config,
            VERSION,
            "Eclipse Adoptium",
            creator,
            fake_vcs(sha="abc1234", remote="https://github.com/adoptium/temurin-build.git"),
            fake_vcs(sha="def5678", remote="https://github.com/adoptium/jdk17u.git"),
            signer=signer,
            libc_probe=lambda: "musl",
            run=java_runner(),
            show_progress=False,
        )

    return _pipeline


class TestPackagingPipeline:
    """Tests for the staged packaging run."""

    def test_run_produces_named_artifacts(self, make_config, pipeline_for):
        config = make_config(create_jre_image=True)
        result = pipeline_for(config).run()
        target = config.target_path

        assert result.artifacts == {
            ArtifactKind.JRE: target / "OpenJDK17U-jre_x64_linux_hotspot_17.0.2_8.tar.gz",
            ArtifactKind.TEST_IMAGE: target / "OpenJDK17U-testimage_x64_linux_hotspot_17.0.2_8.tar.gz",
            ArtifactKind.STATIC_LIBS: target / "OpenJDK17U-static-libs-musl_x64_linux_hotspot_17.0.2_8.tar.gz",
            ArtifactKind.JDK: target / "OpenJDK17U-jdk_x64_linux_hotspot_17.0.2_8.tar.gz",
        }
        for path in result.artifacts.values():
            assert path.stat().st_size > 0

    def test_jdk_is_archived_last(self, make_config, pipeline_for):
        result = pipeline_for(make_config()).run()
        assert list(result.artifacts)[-1] == ArtifactKind.JDK

    def test_release_and_notice_injected(self, make_config, pipeline_for):
        config = make_config(create_jre_image=True)
        pipeline = pipeline_for(config)
        result = pipeline.run()
        targets = pipeline.targets()

        assert result.release.keys()[-1] == "IMAGE_TYPE"
        assert (targets.jdk / "release").read_text().endswith('IMAGE_TYPE="JDK"\n')
        assert (targets.jre / "release").read_text().endswith('IMAGE_TYPE="JRE"\n')
        assert (targets.jdk / "NOTICE").exists()

    def test_static_libs_laid_out_before_archiving(self, make_config, pipeline_for):
        pipeline = pipeline_for(make_config())
        pipeline.run()

        layout = pipeline.targets().static_libs / "lib" / "static" / "linux-amd64" / "musl"
        assert (layout / "static-libs.bin").exists()

    def test_rerun_is_idempotent(self, make_config, pipeline_for):
        config = make_config()
        pipeline = pipeline_for(config)
        pipeline.run()
        second = pipeline.run()

        release = (pipeline.targets().jdk / "release").read_text()
        assert release.count("IMAGE_TYPE=") == 1
        assert second.release is None
        assert second.artifacts[ArtifactKind.JDK].exists()

    def test_sbom_copied_as_json(self, make_config, pipeline_for):
        config = make_config(create_sbom=True)
        config.metadata_dir.mkdir(parents=True)
        (config.metadata_dir / "sbom.json").write_text('{"bomFormat": "CycloneDX"}')

        result = pipeline_for(config).run()

        sbom = result.artifacts[ArtifactKind.SBOM]
        assert sbom.name == "OpenJDK17U-sbom_x64_linux_hotspot_17.0.2_8.json"
        assert sbom.read_text() == '{"bomFormat": "CycloneDX"}'

    def test_empty_archive_fails_with_artifact_name(self, make_config, pipeline_for):
        pipeline = pipeline_for(make_config(), archiver=EmptyArchiver(show_progress=False), images=())

        with pytest.raises(ArchiveVerificationError, match="OpenJDK17U-jdk_x64_linux_hotspot_17.0.2_8.tar.gz failed to be archived"):
            pipeline.run()

    def test_libc_only_probed_on_linux(self, make_config, pipeline_for):
        pipeline = pipeline_for(make_config(os_kernel_name="CYGWIN_NT-10.0"), images=())
        assert pipeline.libc == ""


class TestMacOSSigning:
    """Bundles are sealed only once their content is final."""

    @staticmethod
    def bundle(images_dir: Path, image_name: str) -> None:
        home = images_dir / image_name / "Contents" / "Home"
        (home / "bin").mkdir(parents=True)
        (home / "bin" / "java").write_text("#!/bin/sh\n")
        (home / "release").write_text('JAVA_VERSION="17.0.2"\n')

    def test_signed_after_metadata_and_before_archiving(self, make_config, pipeline_for):
        config = make_config(os_kernel_name="Darwin", codesign_identity="Developer ID", create_jre_image=True)
        signer = RecordingSigner(config.target_path)
        pipeline = pipeline_for(config, images=("jre",), signer=signer)
        images_dir = find_images_dir(config)
        self.bundle(images_dir, config.jdk_image_name)
        self.bundle(images_dir, config.jre_image_name)

        pipeline.run()

        assert [seal["bundle"] for seal in signer.sealed] == [f"{VERSION}-jre", VERSION]
        for seal in signer.sealed:
            assert "BUILD_SOURCE=" in seal["release"]
            assert "IMAGE_TYPE=" in seal["release"]
            assert seal["notice"] is True

        jre_seal, jdk_seal = signer.sealed
        assert jre_seal["archives"] == []
        assert jdk_seal["archives"] == ["OpenJDK17U-jre_x64_linux_hotspot_17.0.2_8.tar.gz"]

    def test_unsigned_without_identity(self, make_config, pipeline_for):
        config = make_config(os_kernel_name="Darwin")
        signer = RecordingSigner(config.target_path)
        pipeline = pipeline_for(config, images=(), signer=signer)
        self.bundle(find_images_dir(config), config.jdk_image_name)

        pipeline.run()

        assert signer.sealed == []

"""Unit tests for build metadata files."""

from jdkpack.packaging import MetadataWriter
from jdkpack.packaging.metadata import UNKNOWN_REPO, variant_version_parts


class TestMetadataWriter:
    """Tests for files under target/metadata."""

    def test_write_all(self, make_config, fake_vcs):
        config = make_config(scm_ref="jdk-17.0.2+8_adopt")
        build_vcs = fake_vcs(sha="abc1234", remote="https://github.com/adoptium/temurin-build.git")
        source_vcs = fake_vcs(sha="def5678", remote="https://github.com/adoptium/jdk17u")

        MetadataWriter(config, "Eclipse Adoptium", build_vcs, source_vcs).write_all()
        metadata = config.metadata_dir

        assert (metadata / "vendor.txt").read_text() == "Eclipse Adoptium"
        assert (metadata / "buildSource.txt").read_text() == "https://github.com/adoptium/temurin-build/commit/abc1234"
        assert (metadata / "openjdkSource.txt").read_text() == "https://github.com/adoptium/jdk17u/commit/def5678"
        assert (metadata / "scmref.txt").read_text() == "jdk-17.0.2+8_adopt"
        assert not (metadata / "variant_version").exists()

    def test_unknown_build_repo(self, make_config, fake_vcs):
        config = make_config()
        MetadataWriter(config, "Undefined", fake_vcs(sha="abc1234"), fake_vcs()).write_all()

        assert (config.metadata_dir / "buildSource.txt").read_text() == f"{UNKNOWN_REPO}/commit/abc1234"
        assert not (config.metadata_dir / "openjdkSource.txt").exists()

    def test_scmref_always_written(self, make_config, fake_vcs):
        config = make_config()
        MetadataWriter(config, "Undefined", fake_vcs(), fake_vcs()).write_all()

        assert (config.metadata_dir / "scmref.txt").read_text() == ""

    def test_openj9_variant_version(self, make_config, fake_vcs):
        config = make_config(variant="openj9")
        MetadataWriter(config, "Undefined", fake_vcs(), fake_vcs()).write_all("openj9-0.22.0-m2")
        variant_dir = config.metadata_dir / "variant_version"

        assert (variant_dir / "major.txt").read_text() == "0"
        assert (variant_dir / "minor.txt").read_text() == "22"
        assert (variant_dir / "security.txt").read_text() == "0"
        assert (variant_dir / "tags.txt").read_text() == "m2"

    def test_version_output(self, make_config, fake_vcs):
        config = make_config()
        path = MetadataWriter(config, "Undefined", fake_vcs(), fake_vcs()).write_version_output('openjdk version "17.0.2"')

        assert path == config.metadata_dir / "version.txt"


class TestVariantVersionParts:
    """Tests for OpenJ9 tag splitting."""

    def test_missing_parts_default(self):
        assert variant_version_parts("openj9-0.30") == {
            "major": "0",
            "minor": "30",
            "security": "0",
            "tags": "",
        }

"""Unit tests for release file metadata."""

import pytest

from jdkpack.packaging import JavaRuntimeProbe, PackagingError, ReleaseFileWriter, ReleaseMetadata
from jdkpack.packaging.release_file import jvm_variant_name
from jdkpack.config import BuildVariant


@pytest.fixture
def jdk_home(tmp_path):
    home = tmp_path / "jdk-17.0.2+8"
    (home / "bin").mkdir(parents=True)
    (home / "bin" / "java").write_text("#!/bin/sh\n")
    (home / "release").write_text('JAVA_VERSION="17.0.2"\n')
    return home


@pytest.fixture
def writer_for(fake_vcs, java_runner, jdk_home):
    def _writer(config, version="jdk-17.0.2+8", vendor="Eclipse Adoptium", build_vcs=None, source_vcs=None, **kwargs):
        build_vcs = build_vcs or fake_vcs(sha="abc1234", remote="https://github.com/adoptium/temurin-build.git")
        source_vcs = source_vcs or fake_vcs(sha="def5678", remote="https://github.com/adoptium/jdk17u.git")
        probe = JavaRuntimeProbe(jdk_home, config.cross_compile, run=java_runner())
        return ReleaseFileWriter(config, version, vendor, build_vcs, source_vcs, probe, **kwargs)

    return _writer


class TestJavaRuntimeProbe:
    """Tests for querying the built launcher."""

    def test_properties(self, jdk_home, java_runner):
        probe = JavaRuntimeProbe(jdk_home, run=java_runner())

        assert probe.property("java.runtime.version") == "17.0.2+8"
        assert probe.property("os.name") == "Linux"
        assert probe.property("missing") == ""

    def test_properties_are_cached(self, jdk_home, java_runner):
        run = java_runner()
        probe = JavaRuntimeProbe(jdk_home, run=run)
        probe.property("java.vm.version")
        probe.property("os.name")

        assert run.call_count == 1

    def test_cross_compiled_answers_empty(self, jdk_home, java_runner):
        run = java_runner()
        probe = JavaRuntimeProbe(jdk_home, cross_compile=True, run=run)

        assert probe.version_output() == ""
        assert probe.property("java.runtime.version") == ""
        run.assert_not_called()

    def test_check_missing_launcher(self, tmp_path):
        with pytest.raises(PackagingError, match="'java' does not exist"):
            JavaRuntimeProbe(tmp_path).check()


class TestReleaseMetadata:
    """Tests for the append-only record."""

    def test_render(self):
        record = ReleaseMetadata()
        record.append("A", "1")
        record.append("B", "two words")

        assert record.render() == 'A="1"\nB="two words"\n'
        assert record.keys() == ["A", "B"]


class TestReleaseFileWriter:
    """Tests for the release file contents and order."""

    def test_field_order(self, make_config, writer_for):
        record = writer_for(make_config()).collect()

        assert record.keys() == [
            "BUILD_SOURCE",
            "BUILD_SOURCE_REPO",
            "SOURCE_REPO",
            "FULL_VERSION",
            "SEMANTIC_VERSION",
            "BUILD_INFO",
            "JVM_VARIANT",
            "JVM_VERSION",
        ]
        fields = dict(record.fields)
        assert fields["BUILD_SOURCE"] == "git:abc1234"
        assert fields["SEMANTIC_VERSION"] == "17.0.2+8"
        assert fields["JVM_VARIANT"] == "Hotspot"
        assert fields["BUILD_INFO"].startswith("OS: ")

    def test_implementor_first_for_8(self, make_config, writer_for):
        record = writer_for(make_config(feature_version=8), version="jdk8u292-b10").collect()

        assert record.fields[0] == ("IMPLEMENTOR", "Eclipse Adoptium")
        assert dict(record.fields)["SEMANTIC_VERSION"] == "8.0.292+10"

    def test_openj9_tag_last_for_non_release(self, make_config, writer_for):
        record = writer_for(make_config(variant="openj9"), openj9_tag="openj9-0.30.0").collect()

        assert record.fields[-1] == ("OPENJ9_TAG", "openj9-0.30.0")
        assert dict(record.fields)["JVM_VARIANT"] == "Openj9"

    def test_no_openj9_tag_for_release(self, make_config, writer_for):
        record = writer_for(make_config(variant="openj9", release=True), openj9_tag="openj9-0.30.0").collect()
        assert "OPENJ9_TAG" not in record.keys()

    def test_missing_repository_fields_are_skipped(self, make_config, writer_for, fake_vcs):
        record = writer_for(make_config(), build_vcs=fake_vcs(), source_vcs=fake_vcs()).collect()
        assert record.keys()[0] == "FULL_VERSION"

    def test_write_mirrors_to_jre(self, make_config, writer_for, jdk_home, tmp_path):
        jre_home = tmp_path / "jdk-17.0.2+8-jre"
        jre_home.mkdir()
        writer = writer_for(make_config(create_jre_image=True))

        writer.write(jdk_home, jre_home)

        jdk_lines = (jdk_home / "release").read_text().splitlines()
        jre_lines = (jre_home / "release").read_text().splitlines()
        assert jdk_lines[0] == 'JAVA_VERSION="17.0.2"'
        assert jdk_lines[-1] == 'IMAGE_TYPE="JDK"'
        assert jre_lines[-1] == 'IMAGE_TYPE="JRE"'
        assert jdk_lines[:-1] == jre_lines[:-1]

    def test_write_twice_appends_once(self, make_config, writer_for, jdk_home):
        writer = writer_for(make_config())
        assert writer.write(jdk_home) is not None
        content = (jdk_home / "release").read_text()

        assert writer.write(jdk_home) is None
        assert (jdk_home / "release").read_text() == content
        assert content.count("IMAGE_TYPE=") == 1

    @pytest.mark.parametrize(
        "variant,expected",
        [
            (BuildVariant.TEMURIN, "Hotspot"),
            (BuildVariant.CORRETTO, "Hotspot"),
            (BuildVariant.DRAGONWELL, "Dragonwell"),
        ],
    )
    def test_jvm_variant_name(self, variant, expected):
        assert jvm_variant_name(variant) == expected

"""SBOM assembly for a finished build."""

import logging
from pathlib import Path
from typing import Optional

from ..config import BuildConfig
from ..errors import JdkPackError
from .generator import SBOMDocumentGenerator

COMPONENT_NAME = "Eclipse Temurin"
INVOCATION_ARGS_FILE = "makejdk-any-platform.args"

# (tool name, metadata file holding its version)
TOOL_VERSION_FILES = (
    ("ALSA", "dependency_version_alsa.txt"),
    ("FreeType", "dependency_version_freetype.txt"),
    ("FreeMarker", "dependency_version_freemarker.txt"),
    ("Docker image SHA1", "docker.txt"),
)


class SBOMPropertyError(JdkPackError):
    """Raised when a property that must be read from a file has no file."""

    pass


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


class SBOMAssembler:
    """Drives an SBOMDocumentGenerator through the build's SBOM contents.

    Example usage:
        assembler = SBOMAssembler(config, CycloneDXJsonGenerator())
        assembler.assemble(full_version="17.0.2+8", version_output=probe.version_output())
    """

    def __init__(self, config: BuildConfig, generator: SBOMDocumentGenerator):
        self.config = config
        self.generator = generator

    @property
    def sbom_path(self) -> Path:
        return self.config.metadata_dir / "sbom.json"

    def property_from_file(self, name: str, path: Path) -> None:
        """Add a JDK component property whose value is a file's content.

        Raises:
            SBOMPropertyError: If the file does not exist
        """
        if not path.is_file():
            raise SBOMPropertyError(f"Cannot add SBOM property '{name}': {path} does not exist")
        value = path.read_text(encoding="utf-8").strip()
        self.generator.add_component_property(self.sbom_path, COMPONENT_NAME, name, value)

    def tool_version(self, file_name: str) -> str:
        """Version recorded for a build tool, empty when it was not recorded."""
        path = self.config.metadata_dir / file_name
        if not path.is_file():
            return ""
        return path.read_text(encoding="utf-8").strip()

    def assemble(self, full_version: str, version_output: str, build_config_json: Optional[str] = None) -> Path:
        """Generate the SBOM document.

        Args:
            full_version: java.runtime.version of the built JDK
            version_output: Full output of java -version
            build_config_json: Build configuration snapshot (defaults to config.to_json())

        Returns:
            Path to the SBOM document

        Raises:
            SBOMPropertyError: If a file-backed property has no file
        """
        config = self.config
        path = self.sbom_path
        metadata_dir = config.metadata_dir
        generator = self.generator

        if path.exists():
            path.unlink()

        generator.create(path)
        generator.add_default_metadata(path)
        generator.add_metadata_component(
            path, COMPONENT_NAME, "framework", full_version, "Temurin JDK Component"
        )

        generator.add_metadata_property(path, "OS version", _capitalize(config.os_full_version))
        generator.add_metadata_property(path, "OS architecture", _capitalize(config.os_architecture))
        generator.add_metadata_property(path, "Use Docker for build", _capitalize(str(config.use_docker).lower()))

        variant = _capitalize(config.variant.value)
        generator.add_component(path, COMPONENT_NAME, full_version, f"{variant} JDK Component")

        generator.add_component_property(path, COMPONENT_NAME, "JDK Variant", variant)
        self.property_from_file("SCM Ref", metadata_dir / "scmref.txt")
        self.property_from_file("OpenJDK Source Commit", metadata_dir / "openjdkSource.txt")
        self.property_from_file("Temurin Build Ref", metadata_dir / "buildSource.txt")
        generator.add_component_property(
            path, COMPONENT_NAME, "Build Config", build_config_json or config.to_json()
        )
        generator.add_component_property(path, COMPONENT_NAME, "full_version_output", version_output)
        self.property_from_file("makejdk_any_platform_args", config.config_dir / INVOCATION_ARGS_FILE)
        self.property_from_file("make_command_args", metadata_dir / "makeCommandArg.txt")

        for tool, file_name in TOOL_VERSION_FILES:
            generator.add_metadata_tool(path, tool, self.tool_version(file_name))

        logging.info(f"CycloneDX SBOM written to {path}")
        return path

"""Artifact naming convention.

Every artifact of a build is named by substituting the "-jdk" marker in the
canonical JDK archive file name, never by recomputing a name from scratch,
so all siblings share the same version-encoding prefix:

    OpenJDK17U-jdk_x64_linux_hotspot_17.0.2_8.tar.gz
    OpenJDK17U-jre_x64_linux_hotspot_17.0.2_8.tar.gz
    OpenJDK17U-testimage_x64_linux_hotspot_17.0.2_8.tar.gz
    OpenJDK17U-static-libs-glibc_x64_linux_hotspot_17.0.2_8.tar.gz
    OpenJDK17U-sbom_x64_linux_hotspot_17.0.2_8.json
"""

from enum import Enum
from typing import Optional

from ..errors import JdkPackError

JDK_MARKER = "-jdk"
ARCHIVE_EXTENSIONS = (".tar.gz", ".zip")


class ArtifactNamingError(JdkPackError):
    """Raised when a derived artifact name is not what the convention requires."""

    pass


class ArtifactKind(str, Enum):
    JDK = "jdk"
    JRE = "jre"
    TEST_IMAGE = "testimage"
    DEBUG_IMAGE = "debugimage"
    STATIC_LIBS = "static-libs"
    SBOM = "sbom"
    SOURCES = "sources"
    MAKE_FAILURE_LOGS = "makefailurelogs"


def strip_archive_extension(name: str) -> str:
    for extension in ARCHIVE_EXTENSIONS:
        if name.endswith(extension):
            return name[: -len(extension)]
    return name


class ArtifactNamer:
    """Derives sibling artifact names from the canonical JDK file name."""

    def __init__(self, jdk_file_name: str):
        """
        Args:
            jdk_file_name: Canonical JDK archive name, containing "-jdk"
        """
        self.jdk_file_name = jdk_file_name

    def marker(self, kind: ArtifactKind, libc: Optional[str] = None) -> str:
        if kind == ArtifactKind.STATIC_LIBS and libc:
            return f"-{kind.value}-{libc}"
        return f"-{kind.value}"

    def name_for(self, kind: ArtifactKind, libc: Optional[str] = None) -> str:
        """Name of the artifact of the given kind.

        Args:
            kind: Artifact kind
            libc: C library flavour for static libs on Linux ("glibc"/"musl")
        """
        if kind == ArtifactKind.JDK:
            return self.jdk_file_name
        if kind == ArtifactKind.SBOM:
            return self.sbom_name()
        if kind == ArtifactKind.SOURCES:
            return self.sources_name()
        return self.jdk_file_name.replace(JDK_MARKER, self.marker(kind, libc))

    def sbom_name(self) -> str:
        """SBOM is a plain JSON file, so the archive extension is dropped."""
        renamed = self.jdk_file_name.replace(JDK_MARKER, self.marker(ArtifactKind.SBOM))
        return f"{strip_archive_extension(renamed)}.json"

    def sources_name(self) -> str:
        """Source archive name.

        Sources are platform independent, so the x64 Linux platform segment is
        dropped: OpenJDK11U-jdk_x64_linux_hotspot_11.0.12_7.tar.gz becomes
        OpenJDK11U-jdk-sources_11.0.12_7.tar.gz.

        Raises:
            ArtifactNamingError: If the derived name lacks the "-sources" marker
        """
        if "_x64_linux_hotspot_" in self.jdk_file_name:
            name = self.jdk_file_name.replace("_x64_linux_hotspot_", "-sources_")
        else:
            name = self.jdk_file_name.replace(JDK_MARKER, self.marker(ArtifactKind.SOURCES))

        if "-sources" not in name:
            raise ArtifactNamingError(
                f"Unexpected source archive name '{name}', expected '-sources' in name"
            )
        return name

    @staticmethod
    def jdk_name_from(name: str, kind: ArtifactKind, libc: Optional[str] = None) -> str:
        """Reverse the substitution for an archive-type sibling."""
        namer = ArtifactNamer("")
        return name.replace(namer.marker(kind, libc), JDK_MARKER)

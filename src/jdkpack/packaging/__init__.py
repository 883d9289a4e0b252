"""Packaging of build output into named, verified artifacts."""

from .archive import (
    ArchiveCreator,
    ArchiveError,
    Archiver,
    ArchiveVerificationError,
    TarArchiver,
    ZipArchiver,
    archiver_for,
)
from .codesign import CodeSigner, CodeSignError, MacCodeSigner
from .metadata import MetadataWriter
from .naming import ArtifactKind, ArtifactNamer, ArtifactNamingError
from .pipeline import PackagingPipeline, PackagingResult
from .release_file import JavaRuntimeProbe, ReleaseFileWriter, ReleaseMetadata
from .targets import PackagingError, PackagingTargets, product_home

__all__ = [
    "ArchiveCreator",
    "ArchiveError",
    "Archiver",
    "ArchiveVerificationError",
    "TarArchiver",
    "ZipArchiver",
    "archiver_for",
    "CodeSigner",
    "CodeSignError",
    "MacCodeSigner",
    "MetadataWriter",
    "ArtifactKind",
    "ArtifactNamer",
    "ArtifactNamingError",
    "PackagingPipeline",
    "PackagingResult",
    "JavaRuntimeProbe",
    "ReleaseFileWriter",
    "ReleaseMetadata",
    "PackagingError",
    "PackagingTargets",
    "product_home",
]

"""
Packaging pipeline.

Turns the raw OpenJDK build output into named, verified archives. Stages
run strictly in order:

1. Relocate images to per-artifact target paths
2. Strip demos
3. Handle debug symbols
4. Platform post-processing (static-libs layout)
5. Metadata injection (release files, NOTICE)
6. Code signing and archive creation, each bundle signed right before
   it is archived

Targets are re-derived from the resolved version before every stage.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..config import BuildConfig
from ..version.vcs import VersionControlProvider
from . import stages
from .archive import ArchiveCreator
from .codesign import CodeSigner
from .naming import ArtifactKind, ArtifactNamer
from .platform import GLIBC, detect_libc
from .release_file import JavaRuntimeProbe, ReleaseFileWriter, ReleaseMetadata
from .targets import PackagingTargets, home_dir


@dataclass
class PackagingResult:
    """Artifacts produced by a packaging run."""

    artifacts: Dict[ArtifactKind, Path] = field(default_factory=dict)
    release: Optional[ReleaseMetadata] = None


class PackagingPipeline:
    """Runs the packaging stages for one resolved version.

    Example usage:
        pipeline = PackagingPipeline(config, "jdk-17.0.2+8", "Eclipse Adoptium",
                                     archive_creator, build_vcs, source_vcs)
        result = pipeline.run()
        print(result.artifacts[ArtifactKind.JDK])
    """

    def __init__(
        self,
        config: BuildConfig,
        version: str,
        vendor: str,
        archive_creator: ArchiveCreator,
        build_vcs: VersionControlProvider,
        source_vcs: VersionControlProvider,
        signer: Optional[CodeSigner] = None,
        openj9_tag: Optional[str] = None,
        libc_probe: Callable[[], str] = detect_libc,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        show_progress: bool = True,
    ):
        """
        Args:
            config: Build configuration
            version: Resolved OpenJDK version tag
            vendor: Vendor name
            archive_creator: Archive utility wrapper
            build_vcs: Repository of the build scripts
            source_vcs: OpenJDK source repository
            signer: Code signer for macOS images
            openj9_tag: OpenJ9 tag for the release file
            libc_probe: C library detection (Linux static libs)
            run: Subprocess runner used to probe the built java
            show_progress: Whether to print stage progress
        """
        self.config = config
        self.version = version
        self.vendor = vendor
        self.archive_creator = archive_creator
        self.build_vcs = build_vcs
        self.source_vcs = source_vcs
        self.signer = signer
        self.openj9_tag = openj9_tag
        self.libc_probe = libc_probe
        self.run_command = run
        self.show_progress = show_progress
        self.namer = ArtifactNamer(config.target_file_name)
        self._libc: Optional[str] = None

    def targets(self) -> PackagingTargets:
        return PackagingTargets.for_build(self.config, self.version)

    @property
    def libc(self) -> str:
        if self.config.os_kernel_name.lower() != "linux":
            return ""
        if self._libc is None:
            self._libc = self.libc_probe() or GLIBC
        return self._libc

    def _step(self, message: str) -> None:
        logging.info(message)
        if self.show_progress:
            print(message)

    def relocate(self) -> List[Path]:
        self._step("Moving archive content to target archive paths and cleaning unnecessary files...")
        return stages.relocate_images(self.config, self.targets())

    def strip_demos(self) -> None:
        stages.strip_demos(self.config, self.targets())

    def handle_debug_symbols(self) -> None:
        stages.handle_debug_symbols(self.config, self.targets())

    def post_process_platform(self) -> None:
        targets = self.targets()
        stages.layout_static_libs(self.config, targets, self.libc)

    def inject_metadata(self) -> Optional[ReleaseMetadata]:
        self._step("===GENERATING RELEASE FILE===")
        targets = self.targets()
        jdk_home = home_dir(targets.jdk, self.config)
        probe = JavaRuntimeProbe(jdk_home, self.config.cross_compile, run=self.run_command)
        writer = ReleaseFileWriter(
            self.config,
            self.version,
            self.vendor,
            self.build_vcs,
            self.source_vcs,
            probe,
            openj9_tag=self.openj9_tag,
        )
        jre_home = home_dir(targets.jre, self.config) if self.config.create_jre_image else None
        record = writer.write(jdk_home, jre_home)
        stages.add_notice_files(self.config, targets, self.vendor)
        return record

    def create_archives(self) -> Dict[ArtifactKind, Path]:
        """Sign and archive every target that exists; the SBOM is copied as plain JSON.

        Raises:
            ArchiveVerificationError: If any artifact is missing or empty
        """
        targets = self.targets()
        artifacts = {}

        optional = [
            (ArtifactKind.JRE, targets.jre),
            (ArtifactKind.TEST_IMAGE, targets.test_image),
            (ArtifactKind.DEBUG_IMAGE, targets.debug_image),
            (ArtifactKind.STATIC_LIBS, targets.static_libs),
        ]
        for kind, path in optional:
            if path.is_dir():
                if kind == ArtifactKind.JRE:
                    stages.sign_image(self.config, path, self.signer)
                name = self.namer.name_for(kind, libc=self.libc or None)
                self._step(f"OpenJDK {kind.value} archive will be {name}.")
                artifacts[kind] = self.archive_creator.create_archive(path, name)

        sbom_json = targets.sbom / "sbom.json"
        if sbom_json.is_file():
            name = self.namer.sbom_name()
            destination = self.archive_creator.output_dir / name
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(sbom_json.read_bytes())
            self.archive_creator.verify(destination, name)
            artifacts[ArtifactKind.SBOM] = destination

        stages.sign_image(self.config, targets.jdk, self.signer)
        artifacts[ArtifactKind.JDK] = self.archive_creator.create_archive(
            targets.jdk, self.namer.name_for(ArtifactKind.JDK)
        )
        return artifacts

    def run(self) -> PackagingResult:
        result = PackagingResult()
        self.relocate()
        self.strip_demos()
        self.handle_debug_symbols()
        self.post_process_platform()
        result.release = self.inject_metadata()
        result.artifacts = self.create_archives()
        return result

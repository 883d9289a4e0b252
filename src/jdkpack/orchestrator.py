"""
Build orchestration for jdkpack.

This module runs a complete JDK build from a BuildConfig:
- Preparing the workspace (target and metadata directories)
- Resolving the OpenJDK version to build
- Deriving configure arguments
- Driving configure and make
- Writing metadata and the SBOM
- Packaging and archiving the images
"""

import logging
import os
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from .build import (
    BuildDriver,
    BuildTimestamp,
    ConfigureArgumentBuilder,
    ConfigureArgumentSet,
    FailureLogCollector,
    SourceArchiveCreator,
    vendor_for,
)
from .config import BuildConfig, BuildVariant
from .errors import JdkPackError
from .packaging import (
    ArchiveCreator,
    Archiver,
    ArtifactKind,
    CodeSigner,
    JavaRuntimeProbe,
    MacCodeSigner,
    MetadataWriter,
    PackagingPipeline,
    PackagingResult,
    archiver_for,
    product_home,
)
from .packaging.platform import detect_libc
from .sbom import CycloneDXJsonGenerator, SBOMAssembler, SBOMDocumentGenerator
from .sbom.assembler import INVOCATION_ARGS_FILE
from .version import GitProvider, VersionControlProvider, VersionResolver


@dataclass
class BuildResult:
    """Result of a complete build operation."""

    success: bool
    version: Optional[str] = None
    configure_args: str = ""
    artifacts: Dict[ArtifactKind, Path] = field(default_factory=dict)
    build_time: float = 0.0
    message: str = ""
    error: Optional[JdkPackError] = None


def detect_boot_jdk(
    environ: Optional[Mapping[str, str]] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> str:
    """Locate a boot JDK on this host.

    JDK_BOOT_DIR wins, then JAVA_HOME, then the JDK owning javac on PATH.
    """
    environ = os.environ if environ is None else environ
    for variable in ("JDK_BOOT_DIR", "JAVA_HOME"):
        value = environ.get(variable, "")
        if value and Path(value).is_dir():
            return value
    javac = which("javac")
    if javac:
        return str(Path(javac).resolve().parent.parent)
    return ""


class BuildOrchestrator:
    """
    Orchestrates a complete JDK build.

    Phases:
    1. Prepare the configuration (boot JDK re-detection under docker)
    2. Wipe and recreate the target directory
    3. Resolve the OpenJDK version
    4. Derive configure arguments
    5. Archive sources (optional)
    6. Run configure and make
    7. Record version output, metadata and the SBOM
    8. Run the packaging pipeline

    Example usage:
        orchestrator = BuildOrchestrator(config)
        result = orchestrator.build()
        if result.success:
            print(result.artifacts[ArtifactKind.JDK])
    """

    def __init__(
        self,
        config: BuildConfig,
        vcs_factory: Callable[[Path], VersionControlProvider] = GitProvider,
        archiver: Optional[Archiver] = None,
        generator: Optional[SBOMDocumentGenerator] = None,
        signer: Optional[CodeSigner] = None,
        timestamp: Optional[BuildTimestamp] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        libc_probe: Callable[[], str] = detect_libc,
        boot_jdk_probe: Callable[[], str] = detect_boot_jdk,
        invocation_args: Optional[str] = None,
        verbose: bool = False,
    ):
        """
        Initialize build orchestrator.

        Args:
            config: Build configuration
            vcs_factory: Creates a version-control provider for a directory
            archiver: Archive utility (defaults to the platform's format)
            generator: SBOM document generator
            signer: Code signer (defaults to codesign when an identity is set)
            timestamp: Date utility wrapper for reproducible build times
            popen: Process factory for the toolchain
            run: Subprocess runner for probes
            libc_probe: C library detection
            boot_jdk_probe: Boot JDK detection used inside docker
            invocation_args: Command line this build was started with
            verbose: Enable verbose output
        """
        self.config = config
        self.vcs_factory = vcs_factory
        self.archiver = archiver
        self.generator = generator or CycloneDXJsonGenerator()
        self.signer = signer
        self.timestamp = timestamp
        self.popen = popen
        self.run_command = run
        self.libc_probe = libc_probe
        self.boot_jdk_probe = boot_jdk_probe
        self.invocation_args = invocation_args
        self.verbose = verbose

    # Collaborators

    @property
    def vendor(self) -> str:
        return vendor_for(self.config).name

    def source_vcs(self) -> VersionControlProvider:
        return self.vcs_factory(self.config.source_path)

    def build_vcs(self) -> VersionControlProvider:
        return self.vcs_factory(self.config.workspace_dir)

    def archive_creator(self) -> ArchiveCreator:
        archiver = self.archiver or archiver_for(self.config, show_progress=self.verbose)
        return ArchiveCreator(archiver, self.config.target_path, show_progress=self.verbose)

    def code_signer(self) -> Optional[CodeSigner]:
        if self.signer is not None:
            return self.signer
        if self.config.is_darwin and self.config.codesign_identity:
            return MacCodeSigner(self.config.codesign_identity, run=self.run_command)
        return None

    # Phases

    def prepare_config(self) -> BuildConfig:
        """Inside docker the boot JDK detected on the host cannot be trusted."""
        if self.config.use_docker:
            self.config = self.config.with_changes(jdk_boot_dir=self.boot_jdk_probe())
            logging.info(f"Boot JDK re-detected inside docker: {self.config.jdk_boot_dir}")
        return self.config

    def prepare_target_dir(self) -> Path:
        target = self.config.target_path
        if target.exists():
            shutil.rmtree(target)
        self.config.metadata_dir.mkdir(parents=True)
        if self.config.variant == BuildVariant.OPENJ9:
            (self.config.metadata_dir / "variant_version").mkdir()
        return target

    def write_invocation_args(self) -> Optional[Path]:
        if self.invocation_args is None:
            return None
        path = self.config.config_dir / INVOCATION_ARGS_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.invocation_args, encoding="utf-8")
        return path

    def resolve_version(self, fetch: bool = True) -> str:
        version = VersionResolver(self.config, self.source_vcs()).resolve(fetch=fetch)
        logging.info(f"Resolved OpenJDK version {version}")
        return version

    def configure_arguments(self, version: str) -> ConfigureArgumentSet:
        builder = ConfigureArgumentBuilder(self.config, version, timestamp=self.timestamp)
        return builder.build()

    def run_toolchain(self, configure_args: ConfigureArgumentSet) -> None:
        creator = self.archive_creator()
        failure_logs = FailureLogCollector(self.config, creator, show_progress=self.verbose)
        driver = BuildDriver(
            self.config,
            failure_logs=failure_logs,
            show_progress=self.verbose,
            popen=self.popen,
        )
        driver.prepare(configure_args.render())
        driver.run()

    def package(self, version: str) -> PackagingResult:
        """Record metadata and the SBOM, then package the built images.

        Raises:
            PackagingError: If the build output is not where it should be
            SBOMPropertyError: If a file-backed SBOM property has no file
            ArchiveVerificationError: If an artifact fails verification
        """
        config = self.config
        build_vcs = self.build_vcs()
        source_vcs = self.source_vcs()
        metadata = MetadataWriter(config, self.vendor, build_vcs, source_vcs)

        probe = JavaRuntimeProbe(product_home(config, version), config.cross_compile, run=self.run_command)
        probe.check()
        version_output = ""
        if config.cross_compile:
            logging.warning("java can't be run on a cross compiled build system, skipping version output")
        else:
            version_output = probe.version_output()
            metadata.write_version_output(version_output)

        openj9_tag = None
        if config.variant == BuildVariant.OPENJ9:
            openj9_tag = self.vcs_factory(config.source_path / "openj9").describe_tag()
        metadata.write_all(openj9_tag)

        if config.create_sbom:
            SBOMAssembler(config, self.generator).assemble(
                full_version=probe.property("java.runtime.version"),
                version_output=version_output,
            )

        pipeline = PackagingPipeline(
            config,
            version,
            self.vendor,
            self.archive_creator(),
            build_vcs,
            source_vcs,
            signer=self.code_signer(),
            openj9_tag=openj9_tag,
            libc_probe=self.libc_probe,
            run=self.run_command,
            show_progress=self.verbose,
        )
        return pipeline.run()

    def build(self) -> BuildResult:
        """
        Execute the complete build.

        Returns:
            BuildResult with build status and artifacts. Failures are reported
            through success=False and the originating error.
        """
        start_time = time.time()
        result = BuildResult(success=False)

        try:
            self.prepare_config()
            if not self.config.assemble_exploded_image:
                if self.verbose:
                    print("Clearing out target dir ...")
                self.prepare_target_dir()
            self.write_invocation_args()

            result.version = self.resolve_version()
            configure_args = self.configure_arguments(result.version)
            result.configure_args = configure_args.render()

            if self.config.create_source_archive:
                source = SourceArchiveCreator(self.config, self.archive_creator())
                result.artifacts[ArtifactKind.SOURCES] = source.create(result.version)

            if self.verbose:
                print("Initiating build ...")
            self.run_toolchain(configure_args)

            if not self.config.make_exploded:
                packaged = self.package(result.version)
                result.artifacts.update(packaged.artifacts)

            result.success = True
            result.message = "Build successful"
        except JdkPackError as e:
            logging.error(f"Build failed: {e}")
            result.message = str(e)
            result.error = e

        result.build_time = time.time() - start_time
        return result

"""
Make-failure log capture.

When make fails, the logs and crash dumps scattered across the build output
directory are the only evidence of what went wrong. They are gathered into a
single directory, preserving their relative layout, and shipped as a
"-makefailurelogs" archive next to the regular artifacts.
"""

import fnmatch
import logging
import shutil
from pathlib import Path
from typing import List, Optional

from ..config import BuildConfig
from ..packaging.archive import ArchiveCreator
from ..packaging.naming import ArtifactKind, ArtifactNamer

LOGS_ARCHIVE_DIR = "TemurinLogsArchive"
DUMP_PATTERNS = ("core.*", "*.dmp", "javacore.*.txt", "Snap.*.trc", "jitdump.*.dmp")


class FailureLogCollector:
    """Collects build logs and crash dumps after a failed make."""

    def __init__(
        self,
        config: BuildConfig,
        archive_creator: ArchiveCreator,
        show_progress: bool = True,
    ):
        self.config = config
        self.archive_creator = archive_creator
        self.show_progress = show_progress

    def find_build_output_dir(self) -> Optional[Path]:
        """First configuration directory under build/, e.g. build/linux-x86_64-server-release."""
        build_dir = self.config.build_root / "build"
        if not build_dir.is_dir():
            return None
        candidates = sorted(p for p in build_dir.iterdir() if p.is_dir())
        return candidates[0] if candidates else None

    def find_dumps(self, output_dir: Path) -> List[Path]:
        """Crash dumps and core files below output_dir, relative to it."""
        dumps = []
        for path in sorted(output_dir.rglob("*")):
            relative = path.relative_to(output_dir)
            if relative.parts[0] == LOGS_ARCHIVE_DIR or not path.is_file():
                continue
            if any(fnmatch.fnmatch(path.name, pattern) for pattern in DUMP_PATTERNS):
                dumps.append(relative)
        return dumps

    def gather(self, output_dir: Path) -> Path:
        """Copy logs and dumps into a fresh archive directory.

        Returns:
            The populated archive directory
        """
        archive_dir = output_dir / LOGS_ARCHIVE_DIR
        if archive_dir.exists():
            shutil.rmtree(archive_dir)
        archive_dir.mkdir()

        build_log = output_dir / "build.log"
        if build_log.is_file():
            logging.info(f"Copying {build_log} to {archive_dir}")
            shutil.copy2(build_log, archive_dir)

        failure_logs = output_dir / "make-support" / "failure-logs"
        if failure_logs.is_dir():
            logging.info(f"Copying {failure_logs} to {archive_dir}")
            shutil.copytree(failure_logs, archive_dir / "make-support" / "failure-logs")

        for dump in self.find_dumps(output_dir):
            destination = archive_dir / dump
            destination.parent.mkdir(parents=True, exist_ok=True)
            logging.info(f"Copying {dump} to {destination.parent}")
            shutil.copy2(output_dir / dump, destination)

        return archive_dir

    def collect(self) -> Optional[Path]:
        """Gather and archive failure logs.

        Returns:
            Path to the failure-logs artifact, or None if there was no build
            output directory to collect from
        """
        if self.show_progress:
            print("OpenJDK make failed, archiving make failed logs")

        output_dir = self.find_build_output_dir()
        if output_dir is None:
            logging.warning(f"No build output directory under {self.config.build_root / 'build'}")
            return None

        archive_dir = self.gather(output_dir)
        name = ArtifactNamer(self.config.target_file_name).name_for(ArtifactKind.MAKE_FAILURE_LOGS)
        return self.archive_creator.create_archive(archive_dir, name)

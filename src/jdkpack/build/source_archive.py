"""Source archive of the OpenJDK checkout that was built."""

import logging
import shutil
from pathlib import Path

from ..config import BuildConfig
from ..packaging.archive import ArchiveCreator
from ..packaging.naming import ArtifactNamer
from ..packaging.targets import staged_sources_dir


class SourceArchiveCreator:
    """Archives the source tree without its version-control metadata.

    The checkout is renamed to "<version>-src" for the duration of the
    archive so the archive root carries the version, and .git is parked
    outside the tree. Both moves are undone even if archiving fails, and
    leftovers of an interrupted run are recovered before starting.
    """

    PARKED_VCS_NAME = "tmp-openjdk-git"

    def __init__(self, config: BuildConfig, archive_creator: ArchiveCreator):
        self.config = config
        self.archive_creator = archive_creator

    def recover(self, staged_dir: Path, parked_vcs: Path) -> None:
        """Undo the moves of a run that was killed mid-archive."""
        source_dir = self.config.source_path
        if staged_dir.exists():
            if source_dir.exists():
                logging.warning(f"Removing stale source staging directory {staged_dir}")
                shutil.rmtree(staged_dir)
            else:
                logging.warning(f"Restoring checkout from {staged_dir}")
                shutil.move(str(staged_dir), str(source_dir))

        if parked_vcs.exists():
            vcs_dir = source_dir / ".git"
            if vcs_dir.exists():
                logging.warning(f"Removing stale parked repository {parked_vcs}")
                shutil.rmtree(parked_vcs)
            else:
                logging.warning(f"Restoring {vcs_dir} from {parked_vcs}")
                shutil.move(str(parked_vcs), str(vcs_dir))

    def create(self, version: str) -> Path:
        """
        Args:
            version: Resolved OpenJDK version tag

        Returns:
            Path to the source artifact
        """
        name = ArtifactNamer(self.config.target_file_name).sources_name()
        source_dir = self.config.source_path
        parked_vcs = source_dir.parent / self.PARKED_VCS_NAME
        staged_dir = staged_sources_dir(source_dir, version)

        logging.info(f"Source archive name is going to be: {name}")
        self.recover(staged_dir, parked_vcs)

        vcs_dir = source_dir / ".git"
        moved_vcs = False
        staged = False
        try:
            if vcs_dir.exists():
                shutil.move(str(vcs_dir), str(parked_vcs))
                moved_vcs = True
            shutil.move(str(source_dir), str(staged_dir))
            staged = True
            return self.archive_creator.create_archive(staged_dir, name)
        finally:
            if staged:
                shutil.move(str(staged_dir), str(source_dir))
            if moved_vcs:
                shutil.move(str(parked_vcs), str(vcs_dir))

"""Archive creation for packaged JDK images.

An Archiver compresses one directory into a scratch file next to it; the
ArchiveCreator then moves that file to its final, convention-derived name in
the target directory and verifies it before anything downstream trusts it.
"""

import shutil
import tarfile
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from tqdm import tqdm

from ..config import BuildConfig
from ..errors import JdkPackError

SCRATCH_ARCHIVE_NAME = "OpenJDK"


class ArchiveError(JdkPackError):
    """Raised when the archive utility fails to produce an archive."""

    pass


class ArchiveVerificationError(ArchiveError):
    """Raised when a produced archive is missing or empty."""

    pass


def _walk_files(source_dir: Path) -> List[Path]:
    return sorted(p for p in source_dir.rglob("*") if p.is_file())


class Archiver(ABC):
    """Compresses a directory into a single archive file."""

    extension = ""

    def __init__(self, show_progress: bool = True):
        self.show_progress = show_progress

    def scratch_path(self, source_dir: Path) -> Path:
        return source_dir.parent / f"{SCRATCH_ARCHIVE_NAME}{self.extension}"

    @abstractmethod
    def compress(self, source_dir: Path) -> Path:
        """Compress source_dir, keeping its directory name as the archive root.

        Args:
            source_dir: Directory to archive

        Returns:
            Path to the produced archive file

        Raises:
            ArchiveError: If the archive could not be written
        """
        ...

    def _progress(self, files: List[Path], source_dir: Path):
        if self.show_progress and files:
            return tqdm(files, unit="file", desc=f"Archiving {source_dir.name}")
        return files


class TarArchiver(Archiver):
    """Gzip-compressed tarball, used on every platform but Windows."""

    extension = ".tar.gz"

    def compress(self, source_dir: Path) -> Path:
        archive_path = self.scratch_path(source_dir)
        # Directories are added too so empty ones survive
        entries = sorted(source_dir.rglob("*"))
        try:
            with tarfile.open(archive_path, "w:gz") as tar:
                tar.add(source_dir, arcname=source_dir.name, recursive=False)
                for path in self._progress(entries, source_dir):
                    arcname = f"{source_dir.name}/{path.relative_to(source_dir).as_posix()}"
                    tar.add(path, arcname=arcname, recursive=False)
        except (OSError, tarfile.TarError) as e:
            raise ArchiveError(f"Failed to create {archive_path.name} from {source_dir}: {e}") from e
        return archive_path


class ZipArchiver(Archiver):
    """Zip archive, used for Windows builds."""

    extension = ".zip"

    def compress(self, source_dir: Path) -> Path:
        archive_path = self.scratch_path(source_dir)
        files = _walk_files(source_dir)
        try:
            with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for path in self._progress(files, source_dir):
                    arcname = f"{source_dir.name}/{path.relative_to(source_dir).as_posix()}"
                    archive.write(path, arcname)
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Failed to create {archive_path.name} from {source_dir}: {e}") from e
        return archive_path


def archiver_for(config: BuildConfig, show_progress: bool = True) -> Archiver:
    """Pick the archive format for the build platform."""
    if config.is_windows:
        return ZipArchiver(show_progress=show_progress)
    return TarArchiver(show_progress=show_progress)


class ArchiveCreator:
    """Moves archives to their final location and verifies them."""

    def __init__(self, archiver: Archiver, output_dir: Path, show_progress: bool = True):
        """
        Args:
            archiver: Archive utility to compress with
            output_dir: Directory final artifacts are written to
            show_progress: Whether to print progress messages
        """
        self.archiver = archiver
        self.output_dir = Path(output_dir)
        self.show_progress = show_progress

    def create_archive(self, source_dir: Path, target_name: str) -> Path:
        """Archive a directory under the given artifact name.

        Args:
            source_dir: Directory to archive
            target_name: Final artifact file name

        Returns:
            Path to the verified artifact

        Raises:
            ArchiveError: If compression fails
            ArchiveVerificationError: If the artifact is missing or empty
        """
        archive = self.archiver.compress(Path(source_dir))
        target = self.output_dir / target_name

        if self.show_progress:
            print(f"Moving the artifact to location {target}")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        if archive.exists():
            shutil.move(str(archive), str(target))

        self.verify(target, target_name)
        return target

    @staticmethod
    def verify(target: Path, target_name: str) -> None:
        if not target.is_file() or target.stat().st_size == 0:
            raise ArchiveVerificationError(f"{target_name} failed to be archived")

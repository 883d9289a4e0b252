"""
Packaging stages.

Each stage rewrites part of the build output tree and is safe to run again:
everything checks for existence before moving or deleting, so a retried
packaging run after a partial failure picks up where the last one stopped.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from ..config import BuildConfig, BuildVariant
from .codesign import CodeSigner
from .platform import static_libs_layout
from .targets import PackagingError, PackagingTargets, home_dir

NOTICE_TEMPLATE = Path(__file__).parent.parent / "templates" / "NOTICE.template"
ADOPTIUM_VENDOR = "Eclipse Adoptium"


def _replace_dir(source: Path, target: Path) -> None:
    logging.info(f"moving {source} to {target}")
    if target.exists():
        shutil.rmtree(target)
    shutil.move(str(source), str(target))


def relocate_images(config: BuildConfig, targets: PackagingTargets) -> List[Path]:
    """Move raw image directories to their canonical target paths.

    Returns:
        Target paths that were moved on this pass (empty on a re-run)

    Raises:
        PackagingError: If the JDK image is neither at its source nor its target
    """
    sources = targets.image_sources(config)
    moved = []

    if sources["jdk"].is_dir():
        _replace_dir(sources["jdk"], targets.jdk)
        moved.append(targets.jdk)
    elif not targets.jdk.is_dir():
        raise PackagingError(f"JDK image not found at {sources['jdk']} or {targets.jdk}")

    optional = [
        ("jre", targets.jre, config.create_jre_image),
        ("test_image", targets.test_image, True),
        ("debug_image", targets.debug_image, True),
        ("static_libs", targets.static_libs, True),
    ]
    for key, target, wanted in optional:
        if wanted and sources[key].is_dir():
            _replace_dir(sources[key], target)
            moved.append(target)

    sbom_json = config.metadata_dir / "sbom.json"
    if config.create_sbom and sbom_json.is_file():
        if targets.sbom.exists():
            shutil.rmtree(targets.sbom)
        targets.sbom.mkdir(parents=True)
        logging.info(f"moving {sbom_json} to {targets.sbom}/sbom.json")
        shutil.move(str(sbom_json), str(targets.sbom / "sbom.json"))
        moved.append(targets.sbom)

    return moved


def strip_demos(config: BuildConfig, targets: PackagingTargets) -> None:
    """Remove demo content, which is not shipped."""
    for image in (targets.jdk, targets.jre):
        demo = home_dir(image, config) / "demo"
        if demo.is_dir():
            logging.info(f"Removing {demo}")
            shutil.rmtree(demo)


def _debug_symbol_files(config: BuildConfig, root: Path) -> List[Path]:
    """Platform debug-symbol files below root (.diz excluded)."""
    if not root.is_dir():
        return []
    if config.is_windows:
        return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix in (".pdb", ".map"))
    if config.is_darwin:
        files = []
        for bundle in sorted(root.rglob("*.dSYM")):
            if bundle.is_dir():
                files.extend(sorted(p for p in bundle.rglob("*") if p.is_file()))
        return files
    return sorted(p for p in root.rglob("*.debuginfo") if p.is_file())


def delete_debug_symbols(config: BuildConfig, targets: PackagingTargets) -> int:
    """Strip debug-info artifacts from the JDK and JRE trees.

    Returns:
        Number of files or bundles removed
    """
    removed = 0
    for root in (targets.jdk, targets.jre):
        if not root.is_dir():
            continue
        for path in sorted(root.rglob("*.diz")):
            if path.is_file():
                path.unlink()
                removed += 1
        if config.is_darwin:
            for bundle in sorted(root.rglob("*.dSYM"), reverse=True):
                if bundle.is_dir():
                    shutil.rmtree(bundle)
                    removed += 1
        else:
            for path in _debug_symbol_files(config, root):
                path.unlink()
                removed += 1
    return removed


def extract_debug_symbols(config: BuildConfig, targets: PackagingTargets) -> List[Path]:
    """Copy debug symbols from the JDK into the debug image.

    Paths are kept relative to the images directory, so the debug image
    mirrors the layout of the JDK image it belongs to.
    """
    images_dir = targets.jdk.parent
    copied = []
    for path in _debug_symbol_files(config, targets.jdk):
        destination = targets.debug_image / path.relative_to(images_dir)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, destination)
        copied.append(destination)
    if copied:
        logging.info(f"Copied {len(copied)} debug symbol files to {targets.debug_image}")
    return copied


def handle_debug_symbols(config: BuildConfig, targets: PackagingTargets) -> None:
    """OpenJ9 ships symbols only in its debug image; others strip only once extracted."""
    if config.variant == BuildVariant.OPENJ9:
        delete_debug_symbols(config, targets)
        return

    if config.create_debug_image:
        extract_debug_symbols(config, targets)
        delete_debug_symbols(config, targets)


def layout_static_libs(config: BuildConfig, targets: PackagingTargets, libc: str = "") -> Optional[Path]:
    """Nest static libraries under the OS/arch/libc directory scheme.

    Returns:
        The layout directory, or None when there is no static-libs image
    """
    root = targets.static_libs
    if not root.is_dir():
        return None

    layout = root / static_libs_layout(config, libc)
    if layout.is_dir():
        return layout

    entries = list(root.iterdir())
    if not entries:
        return None

    logging.info(f"Creating directory structure for static libs '{layout.relative_to(root)}'")
    staging = root.parent / f"{root.name}-dir-tmp"
    if staging.exists():
        shutil.rmtree(staging)
    staging.mkdir()

    # The build puts the libraries one directory down (e.g. static-libs/lib)
    contents = entries[0] if len(entries) == 1 and entries[0].is_dir() else root
    for item in list(contents.iterdir()):
        shutil.move(str(item), str(staging / item.name))
    if contents is not root:
        contents.rmdir()

    layout.mkdir(parents=True)
    for item in list(staging.iterdir()):
        shutil.move(str(item), str(layout / item.name))
    staging.rmdir()
    return layout


def sign_image(config: BuildConfig, image: Path, signer: Optional[CodeSigner]) -> bool:
    """Re-sign a macOS bundle when an identity is configured.

    Signing seals the bundle, so it must run after the release file and
    NOTICE are in place and right before the bundle is archived.

    Returns:
        True if the bundle was signed
    """
    if signer is None or not config.is_darwin or not config.codesign_identity:
        return False
    if not image.is_dir():
        return False
    signer.sign(image)
    return True


def add_notice_files(config: BuildConfig, targets: PackagingTargets, vendor: str) -> List[Path]:
    """Ship the NOTICE file in Eclipse Adoptium builds."""
    if vendor != ADOPTIUM_VENDOR:
        return []
    written = []
    images = [targets.jdk]
    if config.create_jre_image:
        images.append(targets.jre)
    for image in images:
        home = home_dir(image, config)
        if home.is_dir():
            notice = home / "NOTICE"
            shutil.copyfile(NOTICE_TEMPLATE, notice)
            written.append(notice)
    return written

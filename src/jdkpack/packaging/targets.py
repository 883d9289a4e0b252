"""Where each packaged artifact lives before it is archived.

Target paths are derived from the resolved version on every call instead of
being cached, because the stages move the underlying image directories
around and a cached path could point at something that no longer exists.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..config import BuildConfig
from ..errors import JdkPackError


class PackagingError(JdkPackError):
    """Raised when the build output tree is not in the expected shape."""

    pass


def find_images_dir(config: BuildConfig) -> Optional[Path]:
    """The build/<configuration>/images directory of the OpenJDK build."""
    build_dir = config.build_root / "build"
    if not build_dir.is_dir():
        return None
    for candidate in sorted(build_dir.iterdir()):
        images = candidate / "images"
        if images.is_dir():
            return images
    return None


def require_images_dir(config: BuildConfig) -> Path:
    images = find_images_dir(config)
    if images is None:
        raise PackagingError(
            f"No images directory under {config.build_root / 'build'}, "
            "the build might not have been successful"
        )
    return images


def staged_sources_dir(source_path: Path, version: str) -> Path:
    """Where the checkout is renamed to while its source archive is made."""
    return source_path.parent / f"{version}-src"


def home_dir(image_dir: Path, config: BuildConfig) -> Path:
    """Java home inside an image; macOS images are bundles."""
    if config.is_darwin:
        return image_dir / "Contents" / "Home"
    return image_dir


def product_home(config: BuildConfig, version: Optional[str] = None) -> Path:
    """Java home of the built JDK image.

    Args:
        config: Build configuration
        version: Resolved version; when given, an image already relocated
            by an earlier packaging pass is accepted too

    Raises:
        PackagingError: If the JDK image does not exist
    """
    images = require_images_dir(config)
    home = home_dir(images / config.jdk_image_name, config)
    if not home.is_dir() and version is not None:
        relocated = home_dir(images / version, config)
        if relocated.is_dir():
            return relocated
    if not home.is_dir():
        raise PackagingError(
            f"'{home}' does not exist, build might have not been successful "
            "or not produced the expected JDK image at this location."
        )
    return home


@dataclass(frozen=True)
class PackagingTargets:
    """Canonical per-artifact directories for one resolved version."""

    jdk: Path
    jre: Path
    test_image: Path
    debug_image: Path
    static_libs: Path
    sbom: Path
    sources: Path

    @classmethod
    def derive(cls, images_dir: Path, source_path: Path, version: str) -> "PackagingTargets":
        base = images_dir / version
        return cls(
            jdk=base,
            jre=images_dir / f"{version}-jre",
            test_image=images_dir / f"{version}-test-image",
            debug_image=images_dir / f"{version}-debug-image",
            static_libs=images_dir / f"{version}-static-libs",
            sbom=images_dir / f"{version}-sbom",
            sources=staged_sources_dir(source_path, version),
        )

    @classmethod
    def for_build(cls, config: BuildConfig, version: str) -> "PackagingTargets":
        return cls.derive(require_images_dir(config), config.source_path, version)

    def image_sources(self, config: BuildConfig) -> Dict[str, Path]:
        """Raw build-output directories, keyed by target field name."""
        images_dir = self.jdk.parent
        return {
            "jdk": images_dir / config.jdk_image_name,
            "jre": images_dir / config.jre_image_name,
            "test_image": images_dir / config.test_image_name,
            "debug_image": images_dir / config.debug_image_name,
            "static_libs": images_dir / config.static_libs_image_name,
        }

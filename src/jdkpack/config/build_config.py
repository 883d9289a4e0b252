"""
Build configuration for jdkpack.

BuildConfig is the single configuration value read by every pipeline stage.
It is built once at startup (from an INI file, the environment and CLI
overrides) and then treated as immutable: any late adjustment, such as
re-detecting the boot JDK when re-executing inside a container, goes through
with_changes() and produces a new value before anything downstream sees it.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict

from ..errors import JdkPackError


class BuildConfigError(JdkPackError):
    """Raised when a build configuration is invalid."""

    pass


class BuildVariant(str, Enum):
    """Downstream distribution being built."""

    TEMURIN = "temurin"
    CORRETTO = "corretto"
    DRAGONWELL = "dragonwell"
    BISHENG = "bisheng"
    FAST_STARTUP = "fast_startup"
    OPENJ9 = "openj9"

    @classmethod
    def parse(cls, value: str) -> "BuildVariant":
        """Parse a variant name, accepting the historical aliases.

        Args:
            value: Variant name (e.g. "hotspot", "temurin", "openj9")

        Returns:
            Matching BuildVariant

        Raises:
            BuildConfigError: If the name is not a known variant
        """
        if isinstance(value, BuildVariant):
            return value
        normalized = value.strip().lower().replace("-", "_")
        aliases = {
            "hotspot": cls.TEMURIN,
            "mainline": cls.TEMURIN,
            "faststartup": cls.FAST_STARTUP,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            known = ", ".join(v.value for v in cls)
            raise BuildConfigError(
                f"Unknown build variant '{value}'. Known variants: {known}"
            ) from None


@dataclass(frozen=True)
class BuildConfig:
    """Immutable snapshot of everything a build needs to know.

    Empty strings mean "not set"; derived defaults only apply to unset
    values, so an explicit setting always wins.
    """

    workspace_dir: Path
    variant: BuildVariant
    feature_version: int
    release: bool = False

    # Workspace layout
    working_dir: str = "build"
    source_dir: str = "src"
    target_dir: str = "target"

    # Platform facts
    os_kernel_name: str = "linux"
    os_architecture: str = "x86_64"
    os_full_version: str = ""

    # User overrides, always applied last
    user_configure_args: str = ""
    user_make_args: str = ""
    make_command_name: str = "make"
    make_args_for_any_platform: str = "images"

    # Output flags
    create_jre_image: bool = False
    create_debug_image: bool = False
    create_sbom: bool = False
    create_source_archive: bool = False

    # Toolchain inputs
    jdk_boot_dir: str = ""
    jvm_variant: str = ""
    tag: str = ""
    build_number: str = ""
    update_version: str = ""
    codesign_identity: str = ""
    freetype: bool = True
    freetype_directory: str = ""
    freemarker_version: str = ""
    custom_cacerts: bool = False
    security_dir: str = ""

    # Vendor overrides (empty means use the per-variant default)
    vendor: str = ""
    vendor_version: str = ""
    vendor_url: str = ""
    vendor_bug_url: str = ""
    vendor_vm_bug_url: str = ""

    # Modes
    assemble_exploded_image: bool = False
    make_exploded: bool = False
    disable_branch_safety: bool = False
    use_docker: bool = False
    cross_compile: bool = False

    # Output naming
    target_file_name: str = "OpenJDK.tar.gz"
    scm_ref: str = ""

    # Image directory names under build/*/images (empty means default)
    jdk_path: str = ""
    jre_path: str = ""
    test_image_path: str = ""
    debug_image_path: str = ""
    static_libs_image_path: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "workspace_dir", Path(self.workspace_dir))
        object.__setattr__(self, "variant", BuildVariant.parse(self.variant))
        try:
            object.__setattr__(self, "feature_version", int(self.feature_version))
        except (TypeError, ValueError):
            raise BuildConfigError(
                f"Feature version must be an integer, got '{self.feature_version}'"
            ) from None
        if self.feature_version < 8:
            raise BuildConfigError(
                f"Feature version {self.feature_version} is not supported (minimum is 8)"
            )

    @classmethod
    def field_names(cls) -> set:
        return {f.name for f in fields(cls)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildConfig":
        """Create a BuildConfig from a flat dictionary.

        Raises:
            BuildConfigError: If unknown keys or required keys are missing
        """
        unknown = set(data) - cls.field_names()
        if unknown:
            raise BuildConfigError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )
        missing = {"workspace_dir", "variant", "feature_version"} - set(data)
        if missing:
            raise BuildConfigError(
                f"Missing required configuration keys: {', '.join(sorted(missing))}"
            )
        return cls(**data)

    def with_changes(self, **changes: Any) -> "BuildConfig":
        """Return a copy with the given fields replaced."""
        unknown = set(changes) - self.field_names()
        if unknown:
            raise BuildConfigError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data = asdict(self)
        data["workspace_dir"] = str(self.workspace_dir)
        data["variant"] = self.variant.value
        return data

    def to_json(self) -> str:
        """Serialized snapshot, embedded into the SBOM as "Build Config"."""
        return json.dumps(self.to_dict(), sort_keys=True)

    # Derived values

    @property
    def core_version(self) -> str:
        return f"jdk{self.feature_version}"

    @property
    def is_windows(self) -> bool:
        kernel = self.os_kernel_name.lower()
        return "cygwin" in kernel or "msys" in kernel or kernel == "windows"

    @property
    def is_darwin(self) -> bool:
        return self.os_kernel_name.lower() == "darwin"

    @property
    def source_path(self) -> Path:
        """OpenJDK source checkout."""
        return self.workspace_dir / self.working_dir / self.source_dir

    @property
    def build_root(self) -> Path:
        """Directory configure and make run in.

        Corretto 8 nests its sources under src/.
        """
        if self.variant == BuildVariant.CORRETTO and self.feature_version == 8:
            return self.source_path / "src"
        return self.source_path

    @property
    def target_path(self) -> Path:
        return self.workspace_dir / self.target_dir

    @property
    def metadata_dir(self) -> Path:
        return self.target_path / "metadata"

    @property
    def config_dir(self) -> Path:
        return self.workspace_dir / "config"

    @property
    def jdk_image_name(self) -> str:
        if self.jdk_path:
            return self.jdk_path
        return "j2sdk-image" if self.feature_version == 8 else "jdk"

    @property
    def jre_image_name(self) -> str:
        if self.jre_path:
            return self.jre_path
        return "j2re-image" if self.feature_version == 8 else "jre"

    @property
    def test_image_name(self) -> str:
        return self.test_image_path or "test"

    @property
    def debug_image_name(self) -> str:
        return self.debug_image_path or "debug-image"

    @property
    def static_libs_image_name(self) -> str:
        return self.static_libs_image_path or "static-libs"

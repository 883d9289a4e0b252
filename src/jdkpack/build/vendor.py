"""Vendor identity per build variant.

These values end up in the produced binary (java -version, crash reports),
so every variant must provide bug URLs; unset URLs fall back to
file:///dev/null rather than omitting the configure flag.
"""

from dataclasses import dataclass

from ..config import BuildConfig, BuildVariant

NULL_URL = "file:///dev/null"
DEFAULT_VENDOR = "Undefined"
ADOPTIUM_VENDOR = "Eclipse Adoptium"


@dataclass(frozen=True)
class VendorInfo:
    name: str = DEFAULT_VENDOR
    version: str = ""
    url: str = ""
    bug_url: str = ""
    vm_bug_url: str = ""


def _vendor_table(feature_version: int) -> dict:
    bisheng_issues = f"https://gitee.com/openeuler/bishengjdk-{feature_version}/issues"
    fast_startup_issues = "https://github.com/adoptium/jdk11u-fast-startup-incubator/issues"
    adoptium_support = "https://github.com/adoptium/adoptium-support/issues"
    return {
        BuildVariant.TEMURIN: VendorInfo(
            name=ADOPTIUM_VENDOR,
            url="https://adoptium.net/",
            bug_url=adoptium_support,
            vm_bug_url=adoptium_support,
        ),
        BuildVariant.DRAGONWELL: VendorInfo(
            name="Alibaba",
            version="(Alibaba Dragonwell)",
            url="http://www.alibabagroup.com",
            bug_url="mailto:dragonwell_use@googlegroups.com",
            vm_bug_url="mailto:dragonwell_use@googlegroups.com",
        ),
        BuildVariant.FAST_STARTUP: VendorInfo(
            name="Adoptium",
            version="Fast-Startup",
            bug_url=fast_startup_issues,
            vm_bug_url=fast_startup_issues,
        ),
        BuildVariant.OPENJ9: VendorInfo(
            vm_bug_url="https://github.com/eclipse-openj9/openj9/issues",
        ),
        BuildVariant.BISHENG: VendorInfo(
            name="Huawei",
            version="Bisheng",
            bug_url=bisheng_issues,
            vm_bug_url=bisheng_issues,
        ),
    }


def vendor_for(config: BuildConfig) -> VendorInfo:
    """Vendor identity for a build, with explicit config values taking priority."""
    base = _vendor_table(config.feature_version).get(config.variant, VendorInfo())
    return VendorInfo(
        name=config.vendor or base.name,
        version=config.vendor_version or base.version,
        url=config.vendor_url or base.url,
        bug_url=config.vendor_bug_url or base.bug_url,
        vm_bug_url=config.vendor_vm_bug_url or base.vm_bug_url,
    )

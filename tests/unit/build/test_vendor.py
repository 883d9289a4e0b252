"""Unit tests for vendor identity."""

from jdkpack.build import vendor_for
from jdkpack.build.vendor import DEFAULT_VENDOR


class TestVendorFor:
    """Tests for per-variant vendor defaults."""

    def test_temurin(self, make_config):
        vendor = vendor_for(make_config())

        assert vendor.name == "Eclipse Adoptium"
        assert vendor.url == "https://adoptium.net/"
        assert vendor.bug_url == "https://github.com/adoptium/adoptium-support/issues"

    def test_bisheng_urls_use_feature_version(self, make_config):
        vendor = vendor_for(make_config(variant="bisheng", feature_version=11))
        assert vendor.bug_url == "https://gitee.com/openeuler/bishengjdk-11/issues"

    def test_unlisted_variant(self, make_config):
        vendor = vendor_for(make_config(variant="corretto", feature_version=11))

        assert vendor.name == DEFAULT_VENDOR
        assert vendor.bug_url == ""

    def test_config_overrides(self, make_config):
        vendor = vendor_for(make_config(vendor="Example Corp", vendor_bug_url="https://example.com/bugs"))

        assert vendor.name == "Example Corp"
        assert vendor.bug_url == "https://example.com/bugs"
        assert vendor.url == "https://adoptium.net/"

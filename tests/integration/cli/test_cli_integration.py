"""
Integration test for CLI command invocation.

This test validates that the CLI can be properly invoked and responds correctly.
"""

import os
import unittest

import pytest

COMMAND = "jdkpack"


@pytest.mark.integration
class TestCLIIntegration(unittest.TestCase):
    """CLI integration test class."""

    def test_cli_help_invocation(self) -> None:
        """Test command line interface help flag."""
        # Test that the CLI can be invoked with --help (which returns 0)
        rtn = os.system(f"{COMMAND} --help")
        self.assertEqual(0, rtn)

    def test_subcommand_help_invocation(self) -> None:
        for subcommand in ("build", "package", "resolve-version", "configure-args"):
            rtn = os.system(f"{COMMAND} {subcommand} --help")
            self.assertEqual(0, rtn, subcommand)


if __name__ == "__main__":
    unittest.main()

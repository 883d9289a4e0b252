"""Version resolution for jdkpack.

This module resolves the OpenJDK version being built from version-control
tags or vendor version manifests.
"""

from .resolver import VersionResolutionError, VersionResolver, placeholder_version, tag_strategy
from .tags import (
    TagGrammar,
    VersionTag,
    build_number_from_version,
    parse_tag,
    select_latest_tag,
    semantic_version,
    update_number_from_version,
)
from .vcs import GitProvider, VersionControlError, VersionControlProvider

__all__ = [
    "VersionResolver",
    "VersionResolutionError",
    "placeholder_version",
    "tag_strategy",
    "TagGrammar",
    "VersionTag",
    "parse_tag",
    "select_latest_tag",
    "semantic_version",
    "build_number_from_version",
    "update_number_from_version",
    "VersionControlProvider",
    "VersionControlError",
    "GitProvider",
]

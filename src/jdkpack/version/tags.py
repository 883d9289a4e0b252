"""Version tag parsing and selection.

Two tag grammars are supported:

    jdk8uV-bB                  8-style, e.g. jdk8u292-b10
    jdk-V[.W[.X[.P]]]+B        modern, e.g. jdk-11.0.12+7

Missing modern components default to 0. Tags are compared component-wise
(left to right, build number last). A build number of 0 marks a
branch-creation tag rather than a release, so such tags are never selected.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple


class TagGrammar(str, Enum):
    JDK8 = "jdk8"
    MODERN = "modern"


_JDK8_PATTERN = re.compile(r"^jdk8u([0-9]+)-b([0-9]+)$")
_MODERN_PATTERN = re.compile(
    r"^jdk-([0-9]+)(?:\.([0-9]+))?(?:\.([0-9]+))?(?:\.([0-9]+))?\+([0-9]+)$"
)


@dataclass(frozen=True)
class VersionTag:
    """A parsed version tag.

    Attributes:
        raw: Original tag string
        grammar: Grammar the tag matched
        components: Numeric components, build number last
            (8-style: (update, build); modern: (V, W, X, P, build))
        suffix: Non-numeric metadata following the version, if any
    """

    raw: str
    grammar: TagGrammar
    components: Tuple[int, ...]
    suffix: str = ""

    @property
    def build(self) -> int:
        return self.components[-1]

    @property
    def is_branch_marker(self) -> bool:
        return self.build == 0

    def sort_key(self) -> Tuple[int, ...]:
        return self.components

    def __str__(self) -> str:
        return self.raw


def parse_tag(tag: str, grammar: TagGrammar) -> Optional[VersionTag]:
    """Parse a tag against a single grammar.

    Returns:
        VersionTag, or None if the tag does not match that grammar
    """
    tag = tag.strip()
    if grammar == TagGrammar.JDK8:
        match = _JDK8_PATTERN.match(tag)
        if not match:
            return None
        return VersionTag(
            raw=tag,
            grammar=grammar,
            components=(int(match.group(1)), int(match.group(2))),
        )

    match = _MODERN_PATTERN.match(tag)
    if not match:
        return None
    components = tuple(int(group) if group else 0 for group in match.groups())
    return VersionTag(raw=tag, grammar=grammar, components=components)


def select_latest_tag(tags: Iterable[str], grammar: TagGrammar) -> Optional[VersionTag]:
    """Choose the highest tag matching the grammar.

    Tags that do not match the grammar and branch-creation tags (build 0)
    are ignored. When two tags compare equal the first one listed wins.

    Example:
        >>> select_latest_tag(["jdk-11.0.4+0", "jdk-11.0.3+9"], TagGrammar.MODERN).raw
        'jdk-11.0.3+9'
    """
    best: Optional[VersionTag] = None
    for tag in tags:
        parsed = parse_tag(tag, grammar)
        if parsed is None or parsed.is_branch_marker:
            continue
        if best is None or parsed.sort_key() > best.sort_key():
            best = parsed
    return best


def grammar_for_feature_version(feature_version: int) -> TagGrammar:
    return TagGrammar.JDK8 if feature_version == 8 else TagGrammar.MODERN


def semantic_version(version: str) -> str:
    """Translate a version tag into a semantic version string.

    jdk8u292-b10 -> 8.0.292+10
    jdk8u302-b00 -> 8.0.302+0
    jdk-11.0.2+12 -> 11.0.2+12
    """
    match = re.match(r"^jdk8u([0-9]+)-b([0-9]+)", version)
    if match:
        return f"8.0.{match.group(1)}+{int(match.group(2))}"
    if version.startswith("jdk-"):
        return version[len("jdk-"):]
    return version


def build_number_from_version(version: str, feature_version: int) -> str:
    """Extract the build number string from a resolved version.

    jdk8u292-b10 -> b10 (8 keeps the "b" prefix, as configure expects)
    jdk-11.0.4+10_adopt -> 10
    """
    if feature_version == 8:
        parts = version.split("-", 1)
        return parts[1] if len(parts) > 1 else ""
    head = version.split("_", 1)[0]
    parts = head.split("+", 1)
    return parts[1] if len(parts) > 1 else ""


def update_number_from_version(version: str) -> str:
    """Extract the 8-style update number: jdk8u292-b10 -> 292."""
    head = version.split("-", 1)[0]
    if "u" not in head:
        return ""
    return head.split("u", 1)[1]

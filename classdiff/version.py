"""
Semantic versions (https://semver.org), in the loose form Maven artifacts use.

Accepted text is ``MAJOR.MINOR[.PATCH][separator special]`` where the
separator is one of ``.``, ``-`` or ``+`` (or nothing) and special is a
pre-release/build tag such as ``rc1`` or ``RC-SNAPSHOT``.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Optional

from .errors import InvalidArgument, InvalidVersionFormat

VERSION_FORMAT = r"([0-9]+)\.([0-9]+)(?:\.)?([0-9]*)(\.|-|\+)?([0-9A-Za-z.\-]*)?"
VERSION_PATTERN = re.compile(VERSION_FORMAT)

SNAPSHOT_MARKER = "SNAPSHOT"


class Element(Enum):
    """Version elements, from most to least significant."""
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    SPECIAL = "special"


@total_ordering
@dataclass(frozen=True)
class Version:
    """
    An immutable version number.

    Equality and ordering ignore the separator. A release sorts after all
    of its own pre-releases; two pre-release tags compare as strings.
    """
    major: int
    minor: int
    patch: int
    separator: Optional[str] = field(default=None, compare=False)
    special: Optional[str] = None

    def __post_init__(self):
        for element, value in ((Element.MAJOR, self.major), (Element.MINOR, self.minor),
                               (Element.PATCH, self.patch)):
            if not isinstance(value, int) or value < 0:
                raise InvalidArgument(f"{element.name} must be a non-negative integer, got {value!r}")

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Creates a Version from its text form.

        Raises:
            InvalidArgument: If text is None.
            InvalidVersionFormat: If text does not match VERSION_FORMAT.
        """
        if text is None:
            raise InvalidArgument("null version")
        match = VERSION_PATTERN.fullmatch(text)
        if not match:
            raise InvalidVersionFormat(f"<{text}> does not match format {VERSION_FORMAT}")

        major, minor, patch, separator, special = match.groups()
        return cls(int(major), int(minor), int(patch) if patch else 0,
                   separator, special or None)

    def next(self, element: Element) -> "Version":
        """Returns the next version for the element; lesser elements and special are reset."""
        if element is None:
            raise InvalidArgument("null element")
        if element is Element.MAJOR:
            return Version(self.major + 1, 0, 0)
        if element is Element.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if element is Element.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        raise InvalidArgument(f"Unknown element <{element}>")

    def release(self) -> "Version":
        """This version without its pre-release/build tag."""
        return Version(self.major, self.minor, self.patch)

    def is_in_development(self) -> bool:
        # 0.y.z: anything may change, the public API is not stable.
        return self.major == 0

    def is_stable(self) -> bool:
        return not self.is_in_development()

    def is_snapshot(self) -> bool:
        return self.special is not None and self.special.endswith(SNAPSHOT_MARKER)

    def is_compatible(self, other: Optional["Version"]) -> bool:
        """True if other is a stable, same-major version no older than this one."""
        if other is None or self.is_in_development():
            return False
        return self.major == other.major and other >= self

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        if (self.major, self.minor, self.patch) != (other.major, other.minor, other.patch):
            return (self.major, self.minor, self.patch) < (other.major, other.minor, other.patch)
        if self.special is None:
            return False
        if other.special is None:
            return True
        return self.special < other.special

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}{self.separator or ''}{self.special or ''}"

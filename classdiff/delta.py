"""
Differences between two library versions and what they mean for versioning.
"""
import logging
from dataclasses import dataclass
from functools import total_ordering
from typing import ClassVar, FrozenSet, Iterable, Iterator

from .classifier import ADD, CHANGE, DEPRECATE, REMOVE, CompatibilityClassifier, CompatibilityType
from .errors import InvalidArgument
from .models import Member
from .version import Element, Version

logger = logging.getLogger(__name__)

# Version element to bump for each compatibility type.
NEXT_ELEMENT = {
    CompatibilityType.BACKWARD_COMPATIBLE_IMPLEMENTER: Element.PATCH,
    CompatibilityType.BACKWARD_COMPATIBLE_USER: Element.MINOR,
    CompatibilityType.NON_BACKWARD_COMPATIBLE: Element.MAJOR,
}


@total_ordering
@dataclass(frozen=True)
class Difference:
    """A single difference, attributed to the dotted name of the class it belongs to."""
    action: ClassVar[str] = ""

    class_name: str
    info: Member

    def __post_init__(self):
        if self.class_name is None:
            raise InvalidArgument("null class_name")
        if self.info is None:
            raise InvalidArgument("null info")

    def sort_key(self):
        return (self.class_name, self.info.kind.value, self.info.name, self.action)

    def __lt__(self, other: "Difference") -> bool:
        if not isinstance(other, Difference):
            return NotImplemented
        return self.sort_key() < other.sort_key()


@dataclass(frozen=True, eq=True)
class Add(Difference):
    action: ClassVar[str] = ADD


@dataclass(frozen=True, eq=True)
class Remove(Difference):
    action: ClassVar[str] = REMOVE


@dataclass(frozen=True, eq=True)
class Change(Difference):
    action: ClassVar[str] = CHANGE

    modified_info: Member

    def __post_init__(self):
        super().__post_init__()
        if self.modified_info is None:
            raise InvalidArgument("null modified_info")


@dataclass(frozen=True, eq=True)
class Deprecate(Difference):
    """A change whose only effect is that the element became deprecated."""
    action: ClassVar[str] = DEPRECATE

    modified_info: Member

    def __post_init__(self):
        super().__post_init__()
        if self.modified_info is None:
            raise InvalidArgument("null modified_info")


class Delta:
    """An immutable set of differences between two versions of a library."""

    def __init__(self, differences: Iterable[Difference]):
        if differences is None:
            raise InvalidArgument("null differences")
        self._differences = frozenset(differences)

    @property
    def differences(self) -> FrozenSet[Difference]:
        return self._differences

    def __iter__(self) -> Iterator[Difference]:
        return iter(sorted(self._differences))

    def __len__(self) -> int:
        return len(self._differences)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Delta):
            return NotImplemented
        return self._differences == other._differences

    def __hash__(self) -> int:
        return hash(self._differences)

    def __repr__(self) -> str:
        return f"Delta({sorted(self._differences)!r})"

    def compute_compatibility_type(self) -> CompatibilityType:
        """The least compatible verdict over all differences."""
        return CompatibilityClassifier().classify(self._differences)

    @staticmethod
    def infer_next_version(version: Version, compatibility_type: CompatibilityType) -> Version:
        if version is None:
            raise InvalidArgument("null version")
        if compatibility_type is None:
            raise InvalidArgument("null compatibility_type")
        return version.next(NEXT_ELEMENT[compatibility_type])

    def infer(self, previous: Version) -> Version:
        """
        Infers the next Version from this delta.

        Args:
            previous (Version): Version of the library this delta starts from.

        Returns:
            Version: previous bumped according to compute_compatibility_type().

        Raises:
            InvalidArgument: If previous is None or still in development (0.y.z).
        """
        if previous is None:
            raise InvalidArgument("null previous")
        if previous.is_in_development():
            raise InvalidArgument(f"Cannot infer for in development version <{previous}>")
        compatibility_type = self.compute_compatibility_type()
        inferred = self.infer_next_version(previous, compatibility_type)
        logger.info("%s delta from %s: next version is %s", compatibility_type.name, previous, inferred)
        return inferred

    def validate(self, previous: Version, current: Version) -> bool:
        """
        Checks that current is a valid successor of previous given this delta.

        current must be newer than previous. Any newer version is valid while
        current is in development; otherwise current, ignoring its pre-release
        tag, must be at least the inferred version.

        Raises:
            InvalidArgument: If either version is None.
        """
        if previous is None:
            raise InvalidArgument("null previous")
        if current is None:
            raise InvalidArgument("null current")
        if current <= previous:
            raise InvalidArgument(f"Current version <{current}> must be more recent than previous version <{previous}>.")
        if current.is_in_development():
            return True

        inferred = self.infer_next_version(previous, self.compute_compatibility_type())
        return current.release() >= inferred

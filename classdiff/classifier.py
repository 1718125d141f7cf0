import logging
from enum import IntEnum
from typing import Iterable, List, Tuple

from .models import ClassInfo, MemberKind

logger = logging.getLogger(__name__)

ADD = "add"
REMOVE = "remove"
CHANGE = "change"
DEPRECATE = "deprecate"


class CompatibilityType(IntEnum):
    """Library compatibility type, from most to least compatible."""
    BACKWARD_COMPATIBLE_IMPLEMENTER = 0
    BACKWARD_COMPATIBLE_USER = 1
    NON_BACKWARD_COMPATIBLE = 2


def _supername_changed(old: ClassInfo, new: ClassInfo) -> bool:
    return old.supername != new.supername


def _interface_removed(old: ClassInfo, new: ClassInfo) -> bool:
    return not set(new.interfaces) >= set(old.interfaces)


def _interface_added(old: ClassInfo, new: ClassInfo) -> bool:
    return set(new.interfaces) > set(old.interfaces)


def _public_lost(old: ClassInfo, new: ClassInfo) -> bool:
    return old.access.is_public() and not new.access.is_public()


def _version_increased(old: ClassInfo, new: ClassInfo) -> bool:
    return new.version > old.version


def _became_final(old: ClassInfo, new: ClassInfo) -> bool:
    return not old.access.is_final() and new.access.is_final()


def _became_abstract(old: ClassInfo, new: ClassInfo) -> bool:
    return not old.access.is_abstract() and new.access.is_abstract()


def _kind_flipped(old: ClassInfo, new: ClassInfo) -> bool:
    return old.access.is_interface() != new.access.is_interface()


class CompatibilityClassifier:
    """
    Reduces a set of differences to a CompatibilityType.

    Removals always break users. Class-level changes go through CLASS_RULES;
    a change is innocent until a rule says otherwise. Field and method changes
    are not analysed further and are treated as breaking.
    """

    CLASS_RULES = [
        (_supername_changed, "superclass changed", CompatibilityType.NON_BACKWARD_COMPATIBLE),
        (_interface_removed, "interface removed", CompatibilityType.NON_BACKWARD_COMPATIBLE),
        (_interface_added, "interface added", CompatibilityType.BACKWARD_COMPATIBLE_USER),
        (_public_lost, "no longer public", CompatibilityType.NON_BACKWARD_COMPATIBLE),
        (_version_increased, "class file version increased", CompatibilityType.NON_BACKWARD_COMPATIBLE),
        # Subclasses and implementers stop compiling; see DESIGN.md, decision 5.
        (_became_final, "became final", CompatibilityType.NON_BACKWARD_COMPATIBLE),
        (_became_abstract, "became abstract", CompatibilityType.NON_BACKWARD_COMPATIBLE),
        (_kind_flipped, "class/interface kind changed", CompatibilityType.NON_BACKWARD_COMPATIBLE),
    ]

    def findings(self, change) -> List[Tuple[str, CompatibilityType]]:
        """
        Lists the rules a single Change trips.

        Args:
            change (Change): A change difference (class, method or field).

        Returns:
            List[Tuple[str, CompatibilityType]]: (label, verdict) per tripped rule.
        """
        old, new = change.info, change.modified_info
        if old.kind is not MemberKind.CLASS or new.kind is not MemberKind.CLASS:
            return [(f"{old.kind.value} changed", CompatibilityType.NON_BACKWARD_COMPATIBLE)]
        return [(label, verdict) for rule, label, verdict in self.CLASS_RULES if rule(old, new)]

    def estimate(self, change) -> CompatibilityType:
        verdict = CompatibilityType.BACKWARD_COMPATIBLE_IMPLEMENTER
        for label, found in self.findings(change):
            logger.debug("%s: %s -> %s", change.class_name, label, found.name)
            verdict = max(verdict, found)
        return verdict

    def classify(self, differences: Iterable) -> CompatibilityType:
        differences = list(differences)
        actions = {d.action for d in differences}

        # Nothing can outweigh a removal.
        if REMOVE in actions:
            return CompatibilityType.NON_BACKWARD_COMPATIBLE

        verdict = CompatibilityType.BACKWARD_COMPATIBLE_IMPLEMENTER
        for difference in differences:
            if difference.action == CHANGE:
                verdict = max(verdict, self.estimate(difference))
                if verdict is CompatibilityType.NON_BACKWARD_COMPATIBLE:
                    return verdict

        if ADD in actions or DEPRECATE in actions:
            verdict = max(verdict, CompatibilityType.BACKWARD_COMPATIBLE_USER)
        return verdict

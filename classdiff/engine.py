import logging
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .criteria import SelectionPolicy, SimpleSelectionPolicy
from .handler import DiffHandler
from .models import ACC_DEPRECATED, ClassInfo

logger = logging.getLogger(__name__)

MemberMap = Mapping[str, object]


class DiffEngine:
    """
    Structural diff between two class collections.

    Inherited members are resolved through the superclass chain on each
    side, so a member that moves between a class and one of its ancestors
    is not reported as removed or added.
    """

    def __init__(self, previous: Mapping[str, ClassInfo], current: Mapping[str, ClassInfo],
                 previous_name: str = "previous", current_name: str = "current"):
        """
        Args:
            previous (Mapping[str, ClassInfo]): Old classes keyed by internal name.
            current (Mapping[str, ClassInfo]): New classes keyed by internal name.
            previous_name (str): Label for the old side (usually its version).
            current_name (str): Label for the new side.
        """
        self.previous = previous
        self.current = current
        self.previous_name = previous_name
        self.current_name = current_name

    def run(self, handler: DiffHandler, policy: Optional[SelectionPolicy] = None):
        """
        Walks both collections and reports every difference to the handler.

        Classes are visited in internal-name order and members in key order,
        so identical inputs always produce the same event sequence.
        """
        policy = policy or SimpleSelectionPolicy()
        handler.start_diff(self.previous_name, self.current_name)

        handler.start_old_contents()
        for name in sorted(self.previous):
            if policy.is_interesting_class(self.previous[name]):
                handler.contains(self.previous[name])
        handler.end_old_contents()

        handler.start_new_contents()
        for name in sorted(self.current):
            if policy.is_interesting_class(self.current[name]):
                handler.contains(self.current[name])
        handler.end_new_contents()

        only_previous = sorted(self.previous.keys() - self.current.keys())
        only_current = sorted(self.current.keys() - self.previous.keys())
        both = sorted(self.previous.keys() & self.current.keys())
        logger.debug("%d removed, %d added, %d shared classes",
                     len(only_previous), len(only_current), len(both))

        handler.start_removed()
        for name in only_previous:
            if policy.is_interesting_class(self.previous[name]):
                handler.class_removed(self.previous[name])
        handler.end_removed()

        handler.start_added()
        for name in only_current:
            if policy.is_interesting_class(self.current[name]):
                handler.class_added(self.current[name])
        handler.end_added()

        handler.start_changed()
        for name in both:
            old, new = self.previous[name], self.current[name]
            if policy.is_interesting_class(old) or policy.is_interesting_class(new):
                self._diff_class(handler, policy, name, old, new)
        handler.end_changed()

        handler.end_diff()

    def _diff_class(self, handler: DiffHandler, policy: SelectionPolicy,
                    name: str, old: ClassInfo, new: ClassInfo):
        removed_fields, added_fields, changed_fields = self._partition(
            old.fields, new.fields,
            inherited_members(old, self.previous, "fields"),
            inherited_members(new, self.current, "fields"),
            policy.is_interesting_field, policy.differs_field)
        removed_methods, added_methods, changed_methods = self._partition(
            old.methods, new.methods,
            inherited_members(old, self.previous, "methods"),
            inherited_members(new, self.current, "methods"),
            policy.is_interesting_method, policy.differs_method)
        class_changed = policy.differs_class(old, new)

        if not (class_changed or removed_fields or removed_methods or added_fields
                or added_methods or changed_fields or changed_methods):
            return

        handler.start_class_changed(name)

        handler.start_removed()
        for key in removed_fields:
            handler.field_removed(old.fields[key])
        for key in removed_methods:
            handler.method_removed(old.methods[key])
        handler.end_removed()

        handler.start_added()
        for key in added_fields:
            handler.field_added(new.fields[key])
        for key in added_methods:
            handler.method_added(new.methods[key])
        handler.end_added()

        handler.start_changed()
        if class_changed:
            if is_deprecation(old, new, policy.differs_class):
                handler.class_deprecated(old, new)
            else:
                handler.class_changed(old, new)
        for key in changed_fields:
            before, after = old.fields[key], new.fields[key]
            if is_deprecation(before, after, policy.differs_field):
                handler.field_deprecated(before, after)
            else:
                handler.field_changed(before, after)
        for key in changed_methods:
            before, after = old.methods[key], new.methods[key]
            if is_deprecation(before, after, policy.differs_method):
                handler.method_deprecated(before, after)
            else:
                handler.method_changed(before, after)
        handler.end_changed()

        handler.end_class_changed()

    @staticmethod
    def _partition(old_members: MemberMap, new_members: MemberMap,
                   old_inherited: MemberMap, new_inherited: MemberMap,
                   is_interesting: Callable, differs: Callable) -> Tuple[List[str], List[str], List[str]]:
        """
        Splits member keys into (removed, added, changed), each sorted.

        Only interesting members count on either side, whether declared or
        inherited. An interesting old member is removed unless the new class
        declares or inherits an interesting member with the same key; added
        is the mirror image. Keys interesting on both sides are changed when
        the policy says they differ, so a member going from private to public
        is an addition and the reverse is a removal.
        """
        old_visible = {key for key, info in old_members.items() if is_interesting(info)}
        new_visible = {key for key, info in new_members.items() if is_interesting(info)}
        old_reachable = old_visible | {key for key, info in old_inherited.items() if is_interesting(info)}
        new_reachable = new_visible | {key for key, info in new_inherited.items() if is_interesting(info)}

        removed = sorted(old_visible - new_reachable)
        added = sorted(new_visible - old_reachable)
        changed = sorted(
            key for key in old_visible & new_visible
            if differs(old_members[key], new_members[key]))
        return removed, added, changed


def inherited_members(info: ClassInfo, classes: Mapping[str, ClassInfo], attr: str) -> Dict[str, object]:
    """
    Collects the non-private members a class inherits from its superclasses.

    The chain is followed through ``supername`` while each ancestor is part
    of the same collection. A key declared closer to the class (including by
    the class itself) shadows the same key further up. Constructors are
    skipped.

    Args:
        info (ClassInfo): The class whose ancestors are walked.
        classes (Mapping[str, ClassInfo]): The collection the class belongs to.
        attr (str): "methods" or "fields".

    Returns:
        Dict[str, object]: Inherited members keyed like ``getattr(info, attr)``.
    """
    inherited = {}
    shadowed = set(getattr(info, attr))
    visited = {info.name}
    supername = info.supername
    while supername is not None and supername in classes and supername not in visited:
        visited.add(supername)
        ancestor = classes[supername]
        for key, member in getattr(ancestor, attr).items():
            if key in shadowed:
                continue
            shadowed.add(key)
            # Constructors and static initializers are never inherited.
            if not member.access.is_private() and not member.name.startswith("<"):
                inherited[key] = member
        supername = ancestor.supername
    return inherited


def is_deprecation(old, new, differs: Callable) -> bool:
    """
    True when the only difference between old and new is that new became
    deprecated: forcing the deprecated bit onto old makes them equal.
    """
    if old.access.is_deprecated() or not new.access.is_deprecated():
        return False
    return not differs(old.with_access(old.access.with_bits(ACC_DEPRECATED)), new)


def diff(handler: DiffHandler, policy: Optional[SelectionPolicy], previous_name: str, current_name: str,
         previous: Mapping[str, ClassInfo], current: Mapping[str, ClassInfo]):
    """Convenience wrapper: DiffEngine(previous, current, ...).run(handler, policy)."""
    DiffEngine(previous, current, previous_name, current_name).run(handler, policy)

import math
from abc import ABC, abstractmethod

from .models import ClassInfo, FieldInfo, Member, MemberKind, MethodInfo


class SelectionPolicy(ABC):
    """
    Decides which classes and members the diff looks at ("interesting")
    and when two versions of the same one count as different.
    """

    @abstractmethod
    def is_interesting_class(self, info: ClassInfo) -> bool: pass

    @abstractmethod
    def is_interesting_method(self, info: MethodInfo) -> bool: pass

    @abstractmethod
    def is_interesting_field(self, info: FieldInfo) -> bool: pass

    @abstractmethod
    def differs_class(self, old: ClassInfo, new: ClassInfo) -> bool: pass

    @abstractmethod
    def differs_method(self, old: MethodInfo, new: MethodInfo) -> bool: pass

    @abstractmethod
    def differs_field(self, old: FieldInfo, new: FieldInfo) -> bool: pass

    def is_interesting(self, info: Member) -> bool:
        if info.kind is MemberKind.CLASS: return self.is_interesting_class(info)
        if info.kind is MemberKind.METHOD: return self.is_interesting_method(info)
        return self.is_interesting_field(info)

    def differs(self, old: Member, new: Member) -> bool:
        if old.kind is not new.kind:
            return True
        if old.kind is MemberKind.CLASS: return self.differs_class(old, new)
        if old.kind is MemberKind.METHOD: return self.differs_method(old, new)
        return self.differs_field(old, new)


def _same_value(old, new) -> bool:
    if old is None or new is None:
        return old is new
    if type(old) is not type(new):
        return False
    if isinstance(old, float) and math.isnan(old) and math.isnan(new):
        return True
    return old == new


class SimpleSelectionPolicy(SelectionPolicy):
    """
    Only non-synthetic public or protected classes, methods and fields are
    interesting.

    Classes differ on access flags, superclass, interface set or class-file
    version; methods on access flags or declared exceptions; fields on access
    flags or constant value.
    """

    @staticmethod
    def _visible(info: Member) -> bool:
        access = info.access
        return not access.is_synthetic() and (access.is_public() or access.is_protected())

    def is_interesting_class(self, info: ClassInfo) -> bool:
        return self._visible(info)

    def is_interesting_method(self, info: MethodInfo) -> bool:
        return self._visible(info)

    def is_interesting_field(self, info: FieldInfo) -> bool:
        return self._visible(info)

    def differs_class(self, old: ClassInfo, new: ClassInfo) -> bool:
        if old.access != new.access:
            return True
        # supername is None for java/lang/Object.
        if old.supername != new.supername:
            return True
        if set(old.interfaces) != set(new.interfaces):
            return True
        return old.version != new.version

    def differs_method(self, old: MethodInfo, new: MethodInfo) -> bool:
        if old.access != new.access:
            return True
        if old.exceptions is None or new.exceptions is None:
            return old.exceptions is not new.exceptions
        return set(old.exceptions) != set(new.exceptions)

    def differs_field(self, old: FieldInfo, new: FieldInfo) -> bool:
        if old.access != new.access:
            return True
        return not _same_value(old.value, new.value)

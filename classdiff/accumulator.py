import logging
from typing import Iterable, Optional

from .delta import Add, Change, Delta, Deprecate, Difference, Remove
from .errors import InvalidArgument
from .handler import DiffHandler
from .models import ClassInfo, FieldInfo, MethodInfo, get_class_name
from .utils import compile_filter, to_slash_name

logger = logging.getLogger(__name__)


class DifferenceAccumulatingHandler(DiffHandler):
    """
    Collects diff events into a Delta.

    Container events are ignored. Every leaf event becomes a Difference
    tagged with the dotted name of the class it belongs to, unless the
    include/exclude filters rule that class out.
    """

    def __init__(self, includes: Iterable[str] = (), excludes: Iterable[str] = ()):
        """
        Args:
            includes (Iterable[str]): Glob filters, see compile_filter. When
                given, only classes matching at least one are kept.
            excludes (Iterable[str]): Glob filters; matching classes are dropped.
        """
        self.includes = [compile_filter(p) for p in includes]
        self.excludes = [compile_filter(p) for p in excludes]
        self.current_class_name: Optional[str] = None
        self._differences = set()

    def is_class_considered(self, class_name: str) -> bool:
        """
        Checks a class name (internal or dotted) against the filters.

        Returns:
            bool: False if any exclude matches, or if includes exist and none
            of them matches.
        """
        name = to_slash_name(class_name)
        for pattern in self.excludes:
            if pattern.search(name):
                return False
        if not self.includes: return True
        return any(pattern.search(name) for pattern in self.includes)

    def get_delta(self) -> Delta:
        return Delta(self._differences)

    def _record(self, difference: Difference):
        if not self.is_class_considered(difference.class_name):
            logger.debug("Filtered out %s", difference.class_name)
            return
        self._differences.add(difference)

    def _context(self) -> str:
        if self.current_class_name is None:
            raise InvalidArgument("member event outside of a changed class")
        return self.current_class_name

    def start_class_changed(self, internal_name: str):
        self.current_class_name = get_class_name(internal_name)

    def end_class_changed(self):
        self.current_class_name = None

    def class_removed(self, info: ClassInfo):
        self._record(Remove(get_class_name(info.name), info))

    def class_added(self, info: ClassInfo):
        self._record(Add(get_class_name(info.name), info))

    def class_changed(self, old: ClassInfo, new: ClassInfo):
        self._record(Change(get_class_name(old.name), old, new))

    def class_deprecated(self, old: ClassInfo, new: ClassInfo):
        self._record(Deprecate(get_class_name(old.name), old, new))

    def field_removed(self, info: FieldInfo):
        self._record(Remove(self._context(), info))

    def field_added(self, info: FieldInfo):
        self._record(Add(self._context(), info))

    def field_changed(self, old: FieldInfo, new: FieldInfo):
        self._record(Change(self._context(), old, new))

    def field_deprecated(self, old: FieldInfo, new: FieldInfo):
        self._record(Deprecate(self._context(), old, new))

    def method_removed(self, info: MethodInfo):
        self._record(Remove(self._context(), info))

    def method_added(self, info: MethodInfo):
        self._record(Add(self._context(), info))

    def method_changed(self, old: MethodInfo, new: MethodInfo):
        self._record(Change(self._context(), old, new))

    def method_deprecated(self, old: MethodInfo, new: MethodInfo):
        self._record(Deprecate(self._context(), old, new))

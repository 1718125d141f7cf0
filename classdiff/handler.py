"""
The DiffHandler protocol.

DiffEngine reports what it finds as a well-nested sequence of calls::

    start_diff
      start_old_contents  contains*  end_old_contents
      start_new_contents  contains*  end_new_contents
      start_removed  class_removed*  end_removed
      start_added    class_added*    end_added
      start_changed
        ( start_class_changed
            start_removed  (field_removed | method_removed)*  end_removed
            start_added    (field_added | method_added)*      end_added
            start_changed  [class_changed | class_deprecated]
                           (field_changed | field_deprecated |
                            method_changed | method_deprecated)*
            end_changed
          end_class_changed )*
      end_changed
    end_diff

Handlers keep per-run state (e.g. the class in context), so use a fresh
instance for every diff. Implementations that write somewhere should raise
SinkError when that fails.
"""
from .models import ClassInfo, FieldInfo, MethodInfo


class DiffHandler:
    """Receives diff events. Every event is a no-op here; override what you need."""

    def start_diff(self, previous: str, current: str): pass
    def end_diff(self): pass

    def start_old_contents(self): pass
    def end_old_contents(self): pass
    def start_new_contents(self): pass
    def end_new_contents(self): pass
    def contains(self, info: ClassInfo): pass

    def start_removed(self): pass
    def end_removed(self): pass
    def start_added(self): pass
    def end_added(self): pass
    def start_changed(self): pass
    def end_changed(self): pass

    def start_class_changed(self, internal_name: str): pass
    def end_class_changed(self): pass

    def class_removed(self, info: ClassInfo): pass
    def class_added(self, info: ClassInfo): pass
    def class_changed(self, old: ClassInfo, new: ClassInfo): pass
    def class_deprecated(self, old: ClassInfo, new: ClassInfo): pass

    def field_removed(self, info: FieldInfo): pass
    def field_added(self, info: FieldInfo): pass
    def field_changed(self, old: FieldInfo, new: FieldInfo): pass
    def field_deprecated(self, old: FieldInfo, new: FieldInfo): pass

    def method_removed(self, info: MethodInfo): pass
    def method_added(self, info: MethodInfo): pass
    def method_changed(self, old: MethodInfo, new: MethodInfo): pass
    def method_deprecated(self, old: MethodInfo, new: MethodInfo): pass

import unittest
from classdiff.accumulator import DifferenceAccumulatingHandler
from classdiff.classifier import CompatibilityType
from classdiff.criteria import SimpleSelectionPolicy
from classdiff.delta import Add, Change, Deprecate, Remove
from classdiff.engine import DiffEngine, diff, inherited_members
from classdiff.handler import DiffHandler
from classdiff.input_controller import ClassInfoBuilder
from classdiff.models import ACC_DEPRECATED
from classdiff.utils import compile_filter, split_filters

PUBLIC = 0x0001
PRIVATE = 0x0002
PROTECTED = 0x0004
PUBLIC_CLASS = 0x0021
SYNTHETIC = 0x1000


def make_class(name, supername="java/lang/Object", access=PUBLIC_CLASS, interfaces=(),
               methods=(), fields=(), version=52):
    """methods: (access, name, descriptor[, exceptions]); fields: (access, name, descriptor[, value])."""
    builder = ClassInfoBuilder()
    builder.on_class(version, access, name, None, supername, interfaces)
    for method in methods:
        builder.on_method(method[0], method[1], method[2], None, method[3] if len(method) > 3 else None)
    for field in fields:
        builder.on_field(field[0], field[1], field[2], None, field[3] if len(field) > 3 else None)
    return builder.build()


def collection(*classes):
    return {info.name: info for info in classes}


def run_diff(previous, current, **filters):
    handler = DifferenceAccumulatingHandler(**filters)
    diff(handler, SimpleSelectionPolicy(), "1.0.0", "1.1.0", previous, current)
    return handler.get_delta()


class RecordingHandler(DiffHandler):
    def __init__(self):
        self.events = []

    def __getattribute__(self, name):
        attr = object.__getattribute__(self, name)
        if name.startswith("_") or name == "events" or not callable(attr):
            return attr
        def record(*args):
            self.events.append(name)
            return attr(*args)
        return record


class TestDiffEngine(unittest.TestCase):
    def setUp(self):
        self.base = make_class("org/Base", methods=[(PUBLIC, "shared", "()V"), (PUBLIC, "<init>", "()V")])
        self.foo = make_class("org/Foo", supername="org/Base",
                              methods=[(PUBLIC, "run", "()V"), (PRIVATE, "secret", "()V")],
                              fields=[(PUBLIC, "size", "I")])

    def test_self_diff_is_empty(self):
        classes = collection(self.base, self.foo)
        delta = run_diff(classes, classes)
        self.assertEqual(len(delta), 0)

    def test_event_nesting(self):
        previous = collection(self.foo)
        current = collection(make_class("org/Foo", supername="org/Base",
                                        methods=[(PUBLIC, "run", "()V"), (PUBLIC, "stop", "()V")]))
        handler = RecordingHandler()
        DiffEngine(previous, current).run(handler)
        self.assertEqual(handler.events, [
            "start_diff",
            "start_old_contents", "contains", "end_old_contents",
            "start_new_contents", "contains", "end_new_contents",
            "start_removed", "end_removed",
            "start_added", "end_added",
            "start_changed",
            "start_class_changed",
            "start_removed", "field_removed", "end_removed",
            "start_added", "method_added", "end_added",
            "start_changed", "end_changed",
            "end_class_changed",
            "end_changed",
            "end_diff",
        ])

    def test_unchanged_class_emits_no_block(self):
        handler = RecordingHandler()
        classes = collection(self.foo)
        DiffEngine(classes, classes).run(handler)
        self.assertNotIn("start_class_changed", handler.events)

    def test_whole_class_added_and_removed(self):
        gone = make_class("org/Gone")
        new = make_class("org/New")
        hidden = make_class("org/Hidden", access=0x0020)
        delta = run_diff(collection(gone, hidden), collection(new))
        self.assertEqual(sorted(delta.differences), [Remove("org.Gone", gone), Add("org.New", new)])

    def test_private_and_synthetic_members_ignored(self):
        previous = collection(self.foo)
        current = collection(make_class("org/Foo", supername="org/Base",
                                        methods=[(PUBLIC, "run", "()V"), (PUBLIC | SYNTHETIC, "lambda$0", "()V")],
                                        fields=[(PUBLIC, "size", "I")]))
        self.assertEqual(len(run_diff(previous, current)), 0)

    def test_member_moved_to_superclass(self):
        old_base = make_class("org/Base")
        old_foo = make_class("org/Foo", supername="org/Base", methods=[(PUBLIC, "run", "()V")])
        new_base = make_class("org/Base", methods=[(PUBLIC, "run", "()V")])
        new_foo = make_class("org/Foo", supername="org/Base")
        delta = run_diff(collection(old_base, old_foo), collection(new_base, new_foo))
        # Base gains a method; Foo loses nothing since it inherits it.
        self.assertEqual(list(delta), [Add("org.Base", new_base.methods["run()V"])])

    def test_inherited_member_moved_down(self):
        old_base = make_class("org/Base", methods=[(PUBLIC, "run", "()V")])
        old_foo = make_class("org/Foo", supername="org/Base")
        new_base = make_class("org/Base")
        new_foo = make_class("org/Foo", supername="org/Base", methods=[(PUBLIC, "run", "()V")])
        delta = run_diff(collection(old_base, old_foo), collection(new_base, new_foo))
        self.assertEqual(list(delta), [Remove("org.Base", old_base.methods["run()V"])])

    def test_changed_member(self):
        previous = collection(make_class("org/Foo", methods=[(PUBLIC, "run", "()V", ["java/io/IOException"])]))
        current = collection(make_class("org/Foo", methods=[(PUBLIC, "run", "()V", ["java/lang/Exception"])]))
        delta = run_diff(previous, current)
        self.assertEqual(len(delta), 1)
        difference = next(iter(delta))
        self.assertIsInstance(difference, Change)
        self.assertEqual(difference.class_name, "org.Foo")
        self.assertEqual(difference.modified_info.exceptions, ("java/lang/Exception",))

    def test_member_made_public_is_an_addition(self):
        previous = collection(make_class("org/Foo", methods=[(PRIVATE, "run", "()V")]))
        current = collection(make_class("org/Foo", methods=[(PUBLIC, "run", "()V")]))
        delta = run_diff(previous, current)
        self.assertEqual(list(delta), [Add("org.Foo", current["org/Foo"].methods["run()V"])])
        self.assertEqual(delta.compute_compatibility_type(), CompatibilityType.BACKWARD_COMPATIBLE_USER)

    def test_member_made_private_is_a_removal(self):
        previous = collection(make_class("org/Foo", methods=[(PUBLIC, "run", "()V")]))
        current = collection(make_class("org/Foo", methods=[(PRIVATE, "run", "()V")]))
        delta = run_diff(previous, current)
        self.assertEqual(list(delta), [Remove("org.Foo", previous["org/Foo"].methods["run()V"])])
        self.assertEqual(delta.compute_compatibility_type(), CompatibilityType.NON_BACKWARD_COMPATIBLE)

    def test_field_package_to_protected_and_back(self):
        package = collection(make_class("org/Foo", fields=[(0, "size", "I")]))
        protected = collection(make_class("org/Foo", fields=[(PROTECTED, "size", "I")]))

        opened = run_diff(package, protected)
        self.assertEqual(list(opened), [Add("org.Foo", protected["org/Foo"].fields["size"])])
        self.assertEqual(opened.compute_compatibility_type(), CompatibilityType.BACKWARD_COMPATIBLE_USER)

        closed = run_diff(protected, package)
        self.assertEqual(list(closed), [Remove("org.Foo", protected["org/Foo"].fields["size"])])
        self.assertEqual(closed.compute_compatibility_type(), CompatibilityType.NON_BACKWARD_COMPATIBLE)

    def test_protected_to_public_is_a_change(self):
        previous = collection(make_class("org/Foo", fields=[(PROTECTED, "size", "I")]))
        current = collection(make_class("org/Foo", fields=[(PUBLIC, "size", "I")]))
        difference = next(iter(run_diff(previous, current)))
        self.assertIsInstance(difference, Change)

    def test_dropped_override_still_inherited(self):
        base = make_class("org/Base", methods=[(PUBLIC, "run", "()V")])
        previous = collection(base, make_class("org/Foo", supername="org/Base", methods=[(PUBLIC, "run", "()V")]))
        current = collection(base, make_class("org/Foo", supername="org/Base"))
        self.assertEqual(len(run_diff(previous, current)), 0)

    def test_field_deprecation(self):
        previous = collection(make_class("org/Foo", fields=[(PUBLIC, "size", "I")]))
        current = collection(make_class("org/Foo", fields=[(PUBLIC | ACC_DEPRECATED, "size", "I")]))
        self.assertEqual(list(run_diff(previous, current)), [
            Deprecate("org.Foo", previous["org/Foo"].fields["size"], current["org/Foo"].fields["size"])])

    def test_deprecation_with_other_change_is_a_change(self):
        previous = collection(make_class("org/Foo", fields=[(PUBLIC, "size", "I")]))
        current = collection(make_class("org/Foo", fields=[(PUBLIC | 0x0010 | ACC_DEPRECATED, "size", "I")]))
        difference = next(iter(run_diff(previous, current)))
        self.assertIsInstance(difference, Change)

    def test_class_deprecation(self):
        previous = collection(make_class("org/Foo"))
        current = collection(make_class("org/Foo", access=PUBLIC_CLASS | ACC_DEPRECATED))
        self.assertEqual(list(run_diff(previous, current)), [
            Deprecate("org.Foo", previous["org/Foo"], current["org/Foo"])])

    def test_constructors_are_not_inherited(self):
        inherited = inherited_members(self.foo, collection(self.base, self.foo), "methods")
        self.assertEqual(list(inherited), ["shared()V"])

    def test_inheritance_cycle_terminates(self):
        a = make_class("org/A", supername="org/B", methods=[(PUBLIC, "a", "()V")])
        b = make_class("org/B", supername="org/A", methods=[(PUBLIC, "b", "()V")])
        self.assertEqual(list(inherited_members(a, collection(a, b), "methods")), ["b()V"])


class TestFilters(unittest.TestCase):
    NAME = "de/test/java/regex/classImpl"

    def considered(self, exclude, name=NAME):
        return DifferenceAccumulatingHandler(excludes=[exclude]).is_class_considered(name)

    def test_double_star_spans_segments(self):
        self.assertFalse(self.considered("**/java/**"))
        self.assertFalse(self.considered("java/**"))
        self.assertFalse(self.considered("de/**/java/**"))
        self.assertTrue(self.considered("**/java"))
        self.assertTrue(self.considered("java/**/Impl"))

    def test_single_star_stays_in_segment(self):
        self.assertTrue(self.considered("*/java/*"))
        self.assertTrue(self.considered("java/*"))
        self.assertTrue(self.considered("*/java"))
        self.assertTrue(self.considered("de/*/classImpl"))
        self.assertFalse(self.considered("de/*/java/**"))

    def test_specific_ends(self):
        self.assertFalse(self.considered("java/*/*Impl"))
        self.assertTrue(self.considered("test/*/*Impl"))
        self.assertFalse(self.considered("java/*/*Impl*", "de/test/java/regex/classImpl2"))
        self.assertFalse(self.considered("java/*/*Impl/*", "de/test/java/regex/classImpl/code"))
        self.assertTrue(self.considered("test/*/*Impl/*", "de/test/java/regex/Impl2/code"))
        self.assertTrue(self.considered("test/*/*Impl/*", "de/test/java/regex/classImpl/code/Implem"))

    def test_optional_segment(self):
        self.assertFalse(self.considered("java/**/Impl*", "de/test/java/regex/Impl"))
        self.assertFalse(self.considered("regex/**/Impl*", "de/test/java/regex/Impl"))
        self.assertTrue(self.considered("regex/**/Impl*", "de/test/java/regex/test"))
        self.assertFalse(self.considered("test/**/Impl*", "de/test/java/regex/Impl"))

    def test_question_mark_and_literals(self):
        pattern = compile_filter("org/Fo?")
        self.assertTrue(pattern.search("org/Foo"))
        self.assertFalse(pattern.search("org/Fooo/Bar"))
        self.assertFalse(compile_filter("a.b").search("axb"))

    def test_dotted_names_and_includes(self):
        handler = DifferenceAccumulatingHandler(includes=["org/api/**"], excludes=["**/internal/**"])
        self.assertTrue(handler.is_class_considered("org.api.Foo"))
        self.assertFalse(handler.is_class_considered("org.api.internal.Foo"))
        self.assertFalse(handler.is_class_considered("org.impl.Foo"))

    def test_filtered_diff(self):
        previous = collection(make_class("org/api/Foo"), make_class("org/impl/Bar"))
        delta = run_diff(previous, {}, excludes=["org/impl/**"])
        self.assertEqual([d.class_name for d in delta], ["org.api.Foo"])

    def test_split_filters(self):
        self.assertEqual(split_filters("a/**; b/* ;;"), ["a/**", "b/*"])
        self.assertEqual(split_filters(""), [])

if __name__ == '__main__':
    unittest.main()

import unittest
from classdiff.accumulator import DifferenceAccumulatingHandler
from classdiff.classifier import CompatibilityType
from classdiff.delta import Change, Deprecate, Remove
from classdiff.engine import DiffEngine
from classdiff.input_controller import ClassInfoBuilder
from classdiff.models import ACC_DEPRECATED
from classdiff.version import Version

# Versions used by every scenario.
PREVIOUS = Version.parse("1.1.0")
MINOR_BUMP = Version.parse("1.2.0")
PATCH_BUMP = Version.parse("1.1.1")
MAJOR_BUMP = Version.parse("2.0.0")


def build(name, access=0x0021, supername="java/lang/Object", interfaces=(), version=52,
          methods=(), fields=()):
    builder = ClassInfoBuilder()
    builder.on_class(version, access, name, None, supername, interfaces)
    for m_access, m_name, m_desc in methods:
        builder.on_method(m_access, m_name, m_desc)
    for f_access, f_name, f_desc in fields:
        builder.on_field(f_access, f_name, f_desc)
    return builder.build()


def delta_between(previous, current):
    handler = DifferenceAccumulatingHandler()
    DiffEngine({c.name: c for c in previous}, {c.name: c for c in current},
               str(PREVIOUS), "next").run(handler)
    return handler.get_delta()


class TestScenarios(unittest.TestCase):
    """End-to-end: structural collections in, compatibility verdict and version checks out."""

    def test_interface_added(self):
        delta = delta_between([build("org/Foo", interfaces=["org/I1"])],
                              [build("org/Foo", interfaces=["org/I1", "org/I2"])])
        self.assertEqual(len(delta), 1)
        self.assertIsInstance(next(iter(delta)), Change)
        self.assertEqual(delta.compute_compatibility_type(), CompatibilityType.BACKWARD_COMPATIBLE_USER)
        self.assertTrue(delta.validate(PREVIOUS, MINOR_BUMP))
        self.assertFalse(delta.validate(PREVIOUS, PATCH_BUMP))

    def test_interface_removed(self):
        delta = delta_between([build("org/Foo", interfaces=["org/I1", "org/I2"])],
                              [build("org/Foo", interfaces=["org/I1"])])
        self.assertEqual(delta.compute_compatibility_type(), CompatibilityType.NON_BACKWARD_COMPATIBLE)
        self.assertFalse(delta.validate(PREVIOUS, MINOR_BUMP))
        self.assertTrue(delta.validate(PREVIOUS, MAJOR_BUMP))

    def test_class_made_private(self):
        delta = delta_between([build("org/Foo")], [build("org/Foo", access=0x0022)])
        self.assertEqual(delta.compute_compatibility_type(), CompatibilityType.NON_BACKWARD_COMPATIBLE)

    def test_class_file_version_increased(self):
        delta = delta_between([build("org/Foo", version=50)], [build("org/Foo", version=52)])
        self.assertEqual(delta.compute_compatibility_type(), CompatibilityType.NON_BACKWARD_COMPATIBLE)

    def test_field_deprecated(self):
        delta = delta_between([build("org/Foo", fields=[(0x1, "size", "I")])],
                              [build("org/Foo", fields=[(0x1 | ACC_DEPRECATED, "size", "I")])])
        self.assertEqual(len(delta), 1)
        self.assertIsInstance(next(iter(delta)), Deprecate)
        self.assertEqual(delta.compute_compatibility_type(), CompatibilityType.BACKWARD_COMPATIBLE_USER)
        self.assertTrue(delta.validate(PREVIOUS, MINOR_BUMP))

    def test_removal_outweighs_additions(self):
        delta = delta_between(
            [build("org/Foo", methods=[(0x1, "a", "()V")])],
            [build("org/Foo", methods=[(0x1, "b", "()V"), (0x1, "c", "()V")]), build("org/Bar")])
        self.assertEqual(sum(isinstance(d, Remove) for d in delta), 1)
        self.assertEqual(delta.compute_compatibility_type(), CompatibilityType.NON_BACKWARD_COMPATIBLE)
        self.assertEqual(delta.infer(PREVIOUS), MAJOR_BUMP)

    def test_method_moved_to_new_superclass(self):
        base = build("org/Base", methods=[(0x1, "run", "()V")])
        delta = delta_between([base, build("org/Foo", methods=[(0x1, "run", "()V")])],
                              [base, build("org/Foo", supername="org/Base")])
        self.assertFalse(any(isinstance(d, Remove) for d in delta))
        # The superclass change itself is still reported.
        self.assertEqual(delta.compute_compatibility_type(), CompatibilityType.NON_BACKWARD_COMPATIBLE)

if __name__ == '__main__':
    unittest.main()

"""
classdiff Package
=================

Compares two compiled builds of a JVM library (jars, class directories or
single class files), classifies the API differences by how they affect
users and implementers, and infers or validates the semantic version the
new build deserves.

Modules:
    - models: Structural records (ClassInfo, MethodInfo, FieldInfo, AccessFlags).
    - signature: Generic class signature parsing.
    - input_controller: Class-file decoding and jar/directory loading.
    - handler: The DiffHandler event protocol.
    - criteria: Selection policies (what is interesting, what differs).
    - engine: Hierarchy-aware structural diff.
    - accumulator: Collects diff events into a Delta, with class filters.
    - classifier: Compatibility rules.
    - delta: Differences, Delta and version inference/validation.
    - version: Semantic version parsing and ordering.
    - comparer: Load-and-diff convenience entry point.
    - dumper: Plain-text rendering of a Delta.
    - utils: Class filter compilation.
"""
from .accumulator import DifferenceAccumulatingHandler
from .classifier import CompatibilityType
from .comparer import Comparer
from .criteria import SelectionPolicy, SimpleSelectionPolicy
from .delta import Add, Change, Delta, Deprecate, Difference, Remove
from .engine import DiffEngine, diff
from .errors import ClassDiffError, InvalidArgument, InvalidVersionFormat, LoadError, SinkError
from .handler import DiffHandler
from .models import AccessFlags, ClassInfo, FieldInfo, MemberKind, MethodInfo
from .utils import compile_filter
from .version import Element, Version

__version__ = "0.1.0"

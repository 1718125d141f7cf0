"""
Error types raised by classdiff.

Every failure surfaces as a subclass of ClassDiffError so callers can catch
the whole family at once, or a single kind when they care.
"""


class ClassDiffError(Exception):
    """Base class for all classdiff failures."""


class LoadError(ClassDiffError):
    """A class file (or archive) could not be read or is malformed."""


class InvalidVersionFormat(ClassDiffError, ValueError):
    """Version text does not match the supported grammar."""


class InvalidArgument(ClassDiffError, ValueError):
    """A required value is missing or inconsistent with another one."""


class SinkError(ClassDiffError):
    """A DiffHandler failed while consuming diff events."""

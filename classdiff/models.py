from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import ClassVar, List, Mapping, Optional, Tuple, Union

# Access flag bits, as stored in the class-file format.
ACC_PUBLIC = 0x0001
ACC_PRIVATE = 0x0002
ACC_PROTECTED = 0x0004
ACC_STATIC = 0x0008
ACC_FINAL = 0x0010
ACC_SUPER = 0x0020
ACC_SYNCHRONIZED = 0x0020
ACC_VOLATILE = 0x0040
ACC_BRIDGE = 0x0040
ACC_TRANSIENT = 0x0080
ACC_VARARGS = 0x0080
ACC_NATIVE = 0x0100
ACC_INTERFACE = 0x0200
ACC_ABSTRACT = 0x0400
ACC_STRICT = 0x0800
ACC_SYNTHETIC = 0x1000
ACC_ANNOTATION = 0x2000
ACC_ENUM = 0x4000
# Not a real class-file bit: set by the loader when a Deprecated attribute is present.
ACC_DEPRECATED = 0x20000

ACCESS_PUBLIC = "public"
ACCESS_PROTECTED = "protected"
ACCESS_PACKAGE = "package"
ACCESS_PRIVATE = "private"

FieldValue = Union[int, float, str, None]


class MemberKind(Enum):
    """The closed set of structural records a member can be."""
    CLASS = "class"
    METHOD = "method"
    FIELD = "field"


@dataclass(frozen=True)
class AccessFlags:
    """
    Bitset of declared modifiers.

    A few bits mean different things depending on what owns them
    (0x0080 is transient on a field and varargs on a method), so those
    accessors take the owner's MemberKind explicitly.
    """
    value: int = 0

    def has(self, bit: int) -> bool:
        return (self.value & bit) != 0

    def with_bits(self, bits: int) -> "AccessFlags":
        return AccessFlags(self.value | bits)

    def without_bits(self, bits: int) -> "AccessFlags":
        return AccessFlags(self.value & ~bits)

    def is_public(self) -> bool: return self.has(ACC_PUBLIC)
    def is_protected(self) -> bool: return self.has(ACC_PROTECTED)
    def is_private(self) -> bool: return self.has(ACC_PRIVATE)

    def is_package_private(self) -> bool:
        return not self.has(ACC_PUBLIC | ACC_PROTECTED | ACC_PRIVATE)

    def is_abstract(self) -> bool: return self.has(ACC_ABSTRACT)
    def is_annotation(self) -> bool: return self.has(ACC_ANNOTATION)
    def is_deprecated(self) -> bool: return self.has(ACC_DEPRECATED)
    def is_enum(self) -> bool: return self.has(ACC_ENUM)
    def is_final(self) -> bool: return self.has(ACC_FINAL)
    def is_interface(self) -> bool: return self.has(ACC_INTERFACE)
    def is_native(self) -> bool: return self.has(ACC_NATIVE)
    def is_static(self) -> bool: return self.has(ACC_STATIC)
    def is_strict(self) -> bool: return self.has(ACC_STRICT)
    def is_synthetic(self) -> bool: return self.has(ACC_SYNTHETIC)

    def is_super(self, kind: MemberKind) -> bool:
        return kind is MemberKind.CLASS and self.has(ACC_SUPER)

    def is_synchronized(self, kind: MemberKind) -> bool:
        return kind is MemberKind.METHOD and self.has(ACC_SYNCHRONIZED)

    def is_bridge(self, kind: MemberKind) -> bool:
        return kind is MemberKind.METHOD and self.has(ACC_BRIDGE)

    def is_volatile(self, kind: MemberKind) -> bool:
        return kind is MemberKind.FIELD and self.has(ACC_VOLATILE)

    def is_transient(self, kind: MemberKind) -> bool:
        return kind is not MemberKind.METHOD and self.has(ACC_TRANSIENT)

    def is_varargs(self, kind: MemberKind) -> bool:
        return kind is MemberKind.METHOD and self.has(ACC_VARARGS)

    def access_type(self) -> str:
        if self.is_public(): return ACCESS_PUBLIC
        if self.is_protected(): return ACCESS_PROTECTED
        if self.is_private(): return ACCESS_PRIVATE
        return ACCESS_PACKAGE

    def flag_names(self, kind: MemberKind) -> List[str]:
        """
        Lists the modifiers that hold for an owner of the given kind.

        Args:
            kind (MemberKind): What owns these flags.

        Returns:
            List[str]: Modifier names in alphabetical order.
        """
        checks = [
            ("abstract", self.is_abstract()),
            ("annotation", self.is_annotation()),
            ("bridge", self.is_bridge(kind)),
            ("deprecated", self.is_deprecated()),
            ("enum", self.is_enum()),
            ("final", self.is_final()),
            ("interface", self.is_interface()),
            ("native", self.is_native()),
            ("package-private", self.is_package_private()),
            ("private", self.is_private()),
            ("protected", self.is_protected()),
            ("public", self.is_public()),
            ("static", self.is_static()),
            ("strict", self.is_strict()),
            ("super", self.is_super(kind)),
            ("synchronized", self.is_synchronized(kind)),
            ("synthetic", self.is_synthetic()),
            ("transient", self.is_transient(kind)),
            ("varargs", self.is_varargs(kind)),
            ("volatile", self.is_volatile(kind)),
        ]
        return [name for name, present in checks if present]


@dataclass(frozen=True)
class MethodInfo:
    """
    A method declared by a class.

    Attributes:
        access (AccessFlags): Declared modifiers.
        name (str): Method name (``<init>`` for constructors).
        descriptor (str): Parameter/return encoding, e.g. ``(I)V``.
        signature (Optional[str]): Generic signature, if any.
        exceptions (Optional[Tuple[str, ...]]): Declared thrown types (internal names).
    """
    kind: ClassVar[MemberKind] = MemberKind.METHOD

    access: AccessFlags
    name: str
    descriptor: str
    signature: Optional[str] = None
    exceptions: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if self.exceptions is not None and not isinstance(self.exceptions, tuple):
            object.__setattr__(self, "exceptions", tuple(self.exceptions))

    @property
    def key(self) -> str:
        return self.name + self.descriptor

    def with_access(self, access: AccessFlags) -> "MethodInfo":
        return MethodInfo(access, self.name, self.descriptor, self.signature, self.exceptions)


@dataclass(frozen=True)
class FieldInfo:
    """A field declared by a class, with its compile-time constant if any."""
    kind: ClassVar[MemberKind] = MemberKind.FIELD

    access: AccessFlags
    name: str
    descriptor: str
    signature: Optional[str] = None
    value: FieldValue = None

    @property
    def key(self) -> str:
        return self.name

    def with_access(self, access: AccessFlags) -> "FieldInfo":
        return FieldInfo(access, self.name, self.descriptor, self.signature, self.value)


@dataclass(frozen=True)
class ClassInfo:
    """
    Structural view of one compiled class.

    ``interfaces`` maps each implemented interface (internal name) to its
    generic signature, or "" when the class has no generic signature for it.
    Methods are keyed by name + descriptor, fields by name.
    """
    kind: ClassVar[MemberKind] = MemberKind.CLASS

    version: int
    access: AccessFlags
    name: str
    signature: Optional[str] = None
    supername: Optional[str] = None
    interfaces: Mapping[str, str] = field(default_factory=dict, hash=False)
    methods: Mapping[str, MethodInfo] = field(default_factory=dict, hash=False)
    fields: Mapping[str, FieldInfo] = field(default_factory=dict, hash=False)
    formal_type_params: str = ""
    super_signature: str = ""

    def __post_init__(self):
        # Freeze the mappings so a ClassInfo can't be mutated through them.
        for attr in ("interfaces", "methods", "fields"):
            object.__setattr__(self, attr, MappingProxyType(dict(getattr(self, attr))))

    @property
    def key(self) -> str:
        return self.name

    def with_access(self, access: AccessFlags) -> "ClassInfo":
        return ClassInfo(
            version=self.version,
            access=access,
            name=self.name,
            signature=self.signature,
            supername=self.supername,
            interfaces=self.interfaces,
            methods=self.methods,
            fields=self.fields,
            formal_type_params=self.formal_type_params,
            super_signature=self.super_signature,
        )


Member = Union[ClassInfo, MethodInfo, FieldInfo]


def get_class_name(internal_name: str) -> str:
    """
    Converts an internal class name to its dotted display form.

    Both '/' and '$' become '.', so inner classes render like packages.
    """
    return internal_name.replace("/", ".").replace("$", ".")

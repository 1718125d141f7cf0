import logging
import os
import struct
import zipfile
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .errors import LoadError
from .models import (
    ACC_DEPRECATED,
    ACC_SYNTHETIC,
    AccessFlags,
    ClassInfo,
    FieldInfo,
    FieldValue,
    MethodInfo,
)
from .signature import parse_class_signature

logger = logging.getLogger(__name__)

CLASS_FILE_MAGIC = 0xCAFEBABE
CLASS_SUFFIX = ".class"
ARCHIVE_SUFFIXES = (".jar", ".zip", ".war", ".ear")

# Constant pool tags.
CONSTANT_UTF8 = 1
CONSTANT_INTEGER = 3
CONSTANT_FLOAT = 4
CONSTANT_LONG = 5
CONSTANT_DOUBLE = 6
CONSTANT_CLASS = 7
CONSTANT_STRING = 8
# Tags whose payload is skipped, mapped to the payload size in bytes.
SKIPPED_CONSTANTS = {
    9: 4,   # Fieldref
    10: 4,  # Methodref
    11: 4,  # InterfaceMethodref
    12: 4,  # NameAndType
    15: 3,  # MethodHandle
    16: 2,  # MethodType
    17: 4,  # Dynamic
    18: 4,  # InvokeDynamic
    19: 2,  # Module
    20: 2,  # Package
}


def _flags(access: Union[int, AccessFlags]) -> AccessFlags:
    return access if isinstance(access, AccessFlags) else AccessFlags(access)


class ClassInfoBuilder:
    """
    One-shot builder for a single ClassInfo.

    The class-file reader (or a test) calls on_class once, on_method/on_field
    for every member, then build() exactly once. A builder is never reused:
    make a fresh one per class.
    """

    def __init__(self):
        self._header = None
        self._methods: Dict[str, MethodInfo] = {}
        self._fields: Dict[str, FieldInfo] = {}
        self._consumed = False

    def _check_open(self):
        if self._consumed:
            raise LoadError("ClassInfoBuilder has already been consumed")

    def on_class(self, version: int, access, name: str, signature: Optional[str],
                 supername: Optional[str], interfaces: Iterable[str]):
        self._check_open()
        if self._header is not None:
            raise LoadError(f"Class header for {name} reported twice")
        self._header = (version, _flags(access), name, signature, supername, list(interfaces or ()))

    def on_method(self, access, name: str, descriptor: str, signature: Optional[str] = None,
                  exceptions: Optional[Iterable[str]] = None):
        """Records a method. Returns None: method bodies are not visited."""
        self._check_open()
        info = MethodInfo(_flags(access), name, descriptor, signature,
                          tuple(exceptions) if exceptions is not None else None)
        self._methods[info.key] = info
        return None

    def on_field(self, access, name: str, descriptor: str, signature: Optional[str] = None,
                 value: FieldValue = None):
        self._check_open()
        info = FieldInfo(_flags(access), name, descriptor, signature, value)
        self._fields[info.key] = info
        return None

    def build(self) -> ClassInfo:
        self._check_open()
        if self._header is None:
            raise LoadError("No class header was reported")
        self._consumed = True

        version, access, name, signature, supername, interfaces = self._header
        formal_type_params, super_signature, interface_signatures = parse_class_signature(signature)
        return ClassInfo(
            version=version,
            access=access,
            name=name,
            signature=signature,
            supername=supername,
            interfaces={i: interface_signatures.get(i, "") for i in interfaces},
            methods=self._methods,
            fields=self._fields,
            formal_type_params=formal_type_params,
            super_signature=super_signature,
        )


class _ByteStream:
    """Big-endian cursor over class-file bytes."""

    def __init__(self, data: bytes, origin: str):
        self.data = data
        self.origin = origin
        self.pos = 0

    def _unpack(self, fmt: str, size: int):
        try:
            value = struct.unpack_from(fmt, self.data, self.pos)[0]
        except struct.error:
            raise LoadError(f"{self.origin}: truncated class file at offset {self.pos}")
        self.pos += size
        return value

    def u1(self) -> int: return self._unpack(">B", 1)
    def u2(self) -> int: return self._unpack(">H", 2)
    def u4(self) -> int: return self._unpack(">I", 4)
    def s4(self) -> int: return self._unpack(">i", 4)
    def s8(self) -> int: return self._unpack(">q", 8)
    def f4(self) -> float: return self._unpack(">f", 4)
    def f8(self) -> float: return self._unpack(">d", 8)

    def read(self, size: int) -> bytes:
        if self.pos + size > len(self.data):
            raise LoadError(f"{self.origin}: truncated class file at offset {self.pos}")
        chunk = self.data[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def skip(self, size: int):
        self.read(size)


def _decode_modified_utf8(raw: bytes) -> str:
    # Modified UTF-8 encodes NUL as C0 80 and supplementary chars as surrogate pairs.
    return raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", errors="surrogatepass")


class ClassFileReader:
    """
    Decodes the class-file binary format and reports it to a ClassInfoBuilder.

    Only what the structural model needs is decoded: the constant pool,
    access flags, this/super/interfaces, and the Signature, Deprecated,
    Synthetic, ConstantValue and Exceptions attributes. Code is skipped.
    """

    def __init__(self, data: bytes, origin: str = "<bytes>"):
        self.stream = _ByteStream(data, origin)
        self.origin = origin
        self.pool: List[Tuple[int, object]] = []

    def accept(self, builder: ClassInfoBuilder):
        s = self.stream
        if s.u4() != CLASS_FILE_MAGIC:
            raise LoadError(f"{self.origin}: not a class file (bad magic)")
        minor = s.u2()
        major = s.u2()
        self._read_constant_pool()

        access = s.u2()
        name = self._class_name(s.u2())
        super_index = s.u2()
        supername = self._class_name(super_index) if super_index else None
        interfaces = [self._class_name(s.u2()) for _ in range(s.u2())]

        members = []
        for kind in ("field", "method"):
            for _ in range(s.u2()):
                members.append((kind, self._read_member()))

        signature, extra = self._read_class_attributes()
        # Same packing as ASM: minor version in the high 16 bits.
        builder.on_class(major | (minor << 16), access | extra, name, signature, supername, interfaces)
        for kind, (m_access, m_name, m_desc, m_sig, value, exceptions) in members:
            if kind == "field":
                builder.on_field(m_access, m_name, m_desc, m_sig, value)
            else:
                builder.on_method(m_access, m_name, m_desc, m_sig, exceptions)

    def _read_constant_pool(self):
        s = self.stream
        count = s.u2()
        self.pool = [(0, None)] * count
        index = 1
        while index < count:
            tag = s.u1()
            if tag == CONSTANT_UTF8:
                self.pool[index] = (tag, _decode_modified_utf8(s.read(s.u2())))
            elif tag == CONSTANT_INTEGER:
                self.pool[index] = (tag, s.s4())
            elif tag == CONSTANT_FLOAT:
                self.pool[index] = (tag, s.f4())
            elif tag == CONSTANT_LONG:
                self.pool[index] = (tag, s.s8())
                index += 1
            elif tag == CONSTANT_DOUBLE:
                self.pool[index] = (tag, s.f8())
                index += 1
            elif tag in (CONSTANT_CLASS, CONSTANT_STRING):
                self.pool[index] = (tag, s.u2())
            elif tag in SKIPPED_CONSTANTS:
                s.skip(SKIPPED_CONSTANTS[tag])
            else:
                raise LoadError(f"{self.origin}: unknown constant pool tag {tag} at entry {index}")
            index += 1

    def _entry(self, index: int, *tags: int):
        if not 0 < index < len(self.pool) or self.pool[index][0] not in tags:
            raise LoadError(f"{self.origin}: bad constant pool reference #{index}")
        return self.pool[index][1]

    def _utf8(self, index: int) -> str:
        return self._entry(index, CONSTANT_UTF8)

    def _class_name(self, index: int) -> str:
        return self._utf8(self._entry(index, CONSTANT_CLASS))

    def _constant_value(self, index: int) -> FieldValue:
        tag, value = self.pool[index] if 0 < index < len(self.pool) else (0, None)
        if tag == CONSTANT_STRING:
            return self._utf8(value)
        if tag in (CONSTANT_INTEGER, CONSTANT_FLOAT, CONSTANT_LONG, CONSTANT_DOUBLE):
            return value
        raise LoadError(f"{self.origin}: bad ConstantValue reference #{index}")

    def _read_member(self):
        s = self.stream
        access = s.u2()
        name = self._utf8(s.u2())
        descriptor = self._utf8(s.u2())
        signature = None
        value = None
        exceptions = None
        for _ in range(s.u2()):
            attr = self._utf8(s.u2())
            length = s.u4()
            if attr == "Signature":
                signature = self._utf8(s.u2())
            elif attr == "Deprecated":
                access |= ACC_DEPRECATED
            elif attr == "Synthetic":
                access |= ACC_SYNTHETIC
            elif attr == "ConstantValue":
                value = self._constant_value(s.u2())
            elif attr == "Exceptions":
                exceptions = [self._class_name(s.u2()) for _ in range(s.u2())]
            else:
                s.skip(length)
        return access, name, descriptor, signature, value, exceptions

    def _read_class_attributes(self):
        s = self.stream
        signature = None
        extra = 0
        for _ in range(s.u2()):
            attr = self._utf8(s.u2())
            length = s.u4()
            if attr == "Signature":
                signature = self._utf8(s.u2())
            elif attr == "Deprecated":
                extra |= ACC_DEPRECATED
            elif attr == "Synthetic":
                extra |= ACC_SYNTHETIC
            else:
                s.skip(length)
        return signature, extra


def load_class_info(data: bytes, origin: str = "<bytes>") -> ClassInfo:
    """Reads one class file into a fresh, immutable ClassInfo."""
    builder = ClassInfoBuilder()
    ClassFileReader(data, origin).accept(builder)
    return builder.build()


class InputParser(ABC):
    """Abstract base class for class-collection loaders."""

    @abstractmethod
    def parse(self, source: str) -> Dict[str, ClassInfo]:
        """
        Loads every class found in the source.

        Args:
            source (str): Path to the archive, directory or class file.

        Returns:
            Dict[str, ClassInfo]: Classes keyed by internal name.
        """
        pass

    def _add(self, classes: Dict[str, ClassInfo], data: bytes, origin: str):
        info = load_class_info(data, origin)
        if info.name in classes:
            logger.debug("Duplicate class %s in %s, keeping the last one", info.name, origin)
        classes[info.name] = info


class JarParser(InputParser):
    """Loads all .class entries of a jar (or any zip) archive."""

    def parse(self, source: str) -> Dict[str, ClassInfo]:
        classes: Dict[str, ClassInfo] = {}
        try:
            with zipfile.ZipFile(source) as archive:
                for entry in archive.infolist():
                    if entry.is_dir() or not entry.filename.endswith(CLASS_SUFFIX):
                        continue
                    self._add(classes, archive.read(entry), f"{source}!{entry.filename}")
        except (OSError, zipfile.BadZipFile) as e:
            raise LoadError(f"Cannot read archive {source}: {e}") from e
        return classes


class DirectoryParser(InputParser):
    """Loads all .class files below a directory."""

    def parse(self, source: str) -> Dict[str, ClassInfo]:
        classes: Dict[str, ClassInfo] = {}
        for root, dirs, files in os.walk(source):
            dirs.sort()
            for filename in sorted(files):
                if not filename.endswith(CLASS_SUFFIX):
                    continue
                path = os.path.join(root, filename)
                try:
                    with open(path, "rb") as f:
                        data = f.read()
                except OSError as e:
                    raise LoadError(f"Cannot read {path}: {e}") from e
                self._add(classes, data, path)
        return classes


class ClassFileParser(InputParser):
    """Loads a single .class file."""

    def parse(self, source: str) -> Dict[str, ClassInfo]:
        try:
            with open(source, "rb") as f:
                data = f.read()
        except OSError as e:
            raise LoadError(f"Cannot read {source}: {e}") from e
        classes: Dict[str, ClassInfo] = {}
        self._add(classes, data, source)
        return classes


class InputController:
    """
    Picks a loader for a path and returns its classes.
    """

    def load(self, source: str) -> Dict[str, ClassInfo]:
        if not os.path.exists(source):
            raise LoadError(f"File not found: {source}")
        parser = self._get_parser(source)
        classes = parser.parse(source)
        logger.info("Loaded %d classes from %s", len(classes), source)
        return classes

    def _get_parser(self, source: str) -> InputParser:
        if os.path.isdir(source): return DirectoryParser()
        if source.endswith(CLASS_SUFFIX): return ClassFileParser()
        if source.endswith(ARCHIVE_SUFFIXES) or zipfile.is_zipfile(source): return JarParser()
        raise LoadError(f"Unsupported input (expected a jar, directory or .class file): {source}")

"""
Generic class signature decoding.

A class signature (JVMS 4.7.9.1) looks like::

    <T:Ljava/lang/Object;>Ljava/util/AbstractList<TT;>;Ljava/util/RandomAccess;

i.e. optional formal type parameters, the superclass type, then one class
type per implemented interface. Only the split into those three parts is
needed here; each part is kept as raw signature text.
"""
from typing import Dict, Tuple

from .errors import LoadError

BASE_TYPES = "BCDFIJSZ"


class _SignatureReader:
    """Recursive-descent walker over one signature string."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _expect(self, ch: str):
        if self._peek() != ch:
            raise LoadError(
                f"Malformed signature {self.text!r}: expected {ch!r} at offset {self.pos}")
        self.pos += 1

    def _identifier(self, stops: str) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in stops:
            self.pos += 1
        if self.pos >= len(self.text):
            raise LoadError(f"Malformed signature {self.text!r}: unterminated identifier")
        return self.text[start:self.pos]

    def read_class_signature(self) -> Tuple[str, str, Dict[str, str]]:
        start = self.pos
        if self._peek() == "<":
            self.read_type_parameters()
        formal_type_params = self.text[start:self.pos]

        start = self.pos
        self.read_class_type()
        super_signature = self.text[start:self.pos]

        interfaces = {}
        while self.pos < len(self.text):
            start = self.pos
            # Keyed by the outermost class type only; type arguments don't re-key.
            name = self.read_class_type()
            interfaces[name] = self.text[start:self.pos]
        return formal_type_params, super_signature, interfaces

    def read_type_parameters(self):
        self._expect("<")
        while self._peek() != ">":
            if not self._peek():
                raise LoadError(f"Malformed signature {self.text!r}: unterminated type parameters")
            self._identifier(":")
            self._expect(":")
            # Class bound may be empty (interface-only bounds).
            if self._peek() not in (":", ">"):
                self.read_reference_type()
            while self._peek() == ":":
                self.pos += 1
                self.read_reference_type()
        self._expect(">")

    def read_reference_type(self):
        ch = self._peek()
        if ch == "L":
            self.read_class_type()
        elif ch == "T":
            self.pos += 1
            self._identifier(";")
            self._expect(";")
        elif ch == "[":
            self.pos += 1
            self.read_java_type()
        else:
            raise LoadError(
                f"Malformed signature {self.text!r}: unexpected {ch!r} at offset {self.pos}")

    def read_java_type(self):
        if self._peek() and self._peek() in BASE_TYPES:
            self.pos += 1
        else:
            self.read_reference_type()

    def read_class_type(self) -> str:
        """Consumes one ``L...;`` production and returns its outer class name."""
        self._expect("L")
        name = self._identifier("<.;")
        if self._peek() == "<":
            self.read_type_arguments()
        while self._peek() == ".":
            self.pos += 1
            self._identifier("<.;")
            if self._peek() == "<":
                self.read_type_arguments()
        self._expect(";")
        return name

    def read_type_arguments(self):
        self._expect("<")
        while self._peek() != ">":
            ch = self._peek()
            if not ch:
                raise LoadError(f"Malformed signature {self.text!r}: unterminated type arguments")
            if ch == "*":
                self.pos += 1
                continue
            if ch in "+-":
                self.pos += 1
            self.read_reference_type()
        self._expect(">")


def parse_class_signature(signature) -> Tuple[str, str, Dict[str, str]]:
    """
    Splits a class signature into its three parts.

    Args:
        signature (Optional[str]): Raw class signature, or None.

    Returns:
        Tuple[str, str, Dict[str, str]]: (formal type parameters, superclass
        signature, {interface internal name: interface signature}). All parts
        are empty when there is no signature.

    Raises:
        LoadError: If the signature is malformed.
    """
    if not signature:
        return "", "", {}
    return _SignatureReader(signature).read_class_signature()

"""D-Bus wire type signatures

A signature is scanned once, left to right. Every open ``(`` or ``{`` pushes
a frame; the matching close reduces the frame to a single composite type and
hands it to the parent frame. Array markers (``a``) wait in the frame where
they appear until the next complete type is produced, which they then wrap.
"""

from dataclasses import dataclass, field
from enum import Enum

from .errors import DictEntryPlacementError, SignatureError

MAX_SIGNATURE_LENGTH = 255
MAX_ARRAY_DEPTH = 32
MAX_STRUCT_DEPTH = 32


class TypeCode(Enum):
    BYTE = "y"
    BOOLEAN = "b"
    INT16 = "n"
    UINT16 = "q"
    INT32 = "i"
    UINT32 = "u"
    INT64 = "x"
    UINT64 = "t"
    DOUBLE = "d"
    STRING = "s"
    OBJECT_PATH = "o"
    SIGNATURE = "g"
    UNIX_FD = "h"
    VARIANT = "v"
    ARRAY = "a"
    STRUCT = "("
    DICT_ENTRY = "{"


BASIC_CODES = frozenset(c for c in TypeCode if c.value in "ybnqiuxtdsogh")
_BASIC_CHARS = frozenset(c.value for c in BASIC_CODES)
_CODES = {c.value: c for c in BASIC_CODES | {TypeCode.VARIANT}}


@dataclass(frozen=True)
class SignatureType:
    """One complete type in the signature grammar"""
    code: TypeCode
    children: tuple["SignatureType", ...] = ()

    @property
    def is_basic(self) -> bool:
        return self.code in BASIC_CODES

    @property
    def element(self) -> "SignatureType":
        """Element type of an array"""
        return self.children[0]

    @property
    def key(self) -> "SignatureType":
        return self.children[0]

    @property
    def value(self) -> "SignatureType":
        return self.children[1]

    @property
    def fields(self) -> tuple["SignatureType", ...]:
        return self.children

    @property
    def is_dict(self) -> bool:
        """Array of dict entries, i.e. an associative mapping"""
        return self.code is TypeCode.ARRAY and self.element.code is TypeCode.DICT_ENTRY

    @property
    def signature(self) -> str:
        """Canonical signature string for this type"""
        if self.code is TypeCode.ARRAY:
            return "a" + self.element.signature
        if self.code is TypeCode.STRUCT:
            return "(" + "".join(f.signature for f in self.fields) + ")"
        if self.code is TypeCode.DICT_ENTRY:
            return "{" + self.key.signature + self.value.signature + "}"
        return self.code.value

    def __str__(self) -> str:
        return self.signature


@dataclass
class _Frame:
    opener: str
    offset: int
    items: list[SignatureType] = field(default_factory=list)
    arrays: list[int] = field(default_factory=list)


class _Scanner:

    def __init__(self, signature: str):
        self.signature = signature
        self.stack = [_Frame(opener="", offset=0)]

    def fail(self, message: str, offset: int):
        raise SignatureError(message, self.signature, offset)

    def scan(self) -> list[SignatureType]:
        sig = self.signature
        if len(sig) > MAX_SIGNATURE_LENGTH:
            self.fail(f"longer than {MAX_SIGNATURE_LENGTH} characters", MAX_SIGNATURE_LENGTH)

        for offset, char in enumerate(sig):
            frame = self.stack[-1]
            if frame.opener == "{" and not frame.arrays and char not in ")}":
                # char starts a new member of the dict entry
                if len(frame.items) >= 2:
                    self.fail("dict entry takes exactly a key and a value", offset)
                if not frame.items and char not in _BASIC_CHARS:
                    self.fail("dict entry key must be a basic type", offset)
            if char == "a":
                frame.arrays.append(offset)
                if sum(len(f.arrays) for f in self.stack) > MAX_ARRAY_DEPTH:
                    self.fail(f"arrays nested deeper than {MAX_ARRAY_DEPTH}", offset)
            elif char == "(" or char == "{":
                if char == "{" and not (frame.arrays and frame.arrays[-1] == offset - 1):
                    raise DictEntryPlacementError(sig, offset)
                if len(self.stack) > MAX_STRUCT_DEPTH:
                    self.fail(f"structures nested deeper than {MAX_STRUCT_DEPTH}", offset)
                self.stack.append(_Frame(opener=char, offset=offset))
            elif char == ")" or char == "}":
                self._close(char, offset)
            elif char in _CODES:
                self._push(SignatureType(_CODES[char]))
            else:
                self.fail(f"unknown type code {char!r}", offset)

        frame = self.stack[-1]
        if len(self.stack) > 1:
            self.fail(f"unterminated {frame.opener!r} opened at offset {frame.offset}", len(sig))
        if frame.arrays:
            self.fail("array is missing its element type", len(sig))
        return frame.items

    def _push(self, item: SignatureType):
        frame = self.stack[-1]
        while frame.arrays:
            frame.arrays.pop()
            item = SignatureType(TypeCode.ARRAY, (item,))
        frame.items.append(item)

    def _close(self, char: str, offset: int):
        frame = self.stack[-1]
        expected = {"(": ")", "{": "}"}.get(frame.opener)
        if expected != char:
            self.fail(f"unbalanced {char!r}", offset)
        if frame.arrays:
            self.fail("array is missing its element type", offset)
        self.stack.pop()
        if char == ")":
            if not frame.items:
                self.fail("empty structure", offset)
            self._push(SignatureType(TypeCode.STRUCT, tuple(frame.items)))
        else:
            if len(frame.items) != 2:
                self.fail("dict entry takes exactly a key and a value", offset)
            self._push(SignatureType(TypeCode.DICT_ENTRY, tuple(frame.items)))


def parse_signature_list(signature: str) -> list[SignatureType]:
    """Parse a signature holding zero or more complete types"""
    return _Scanner(signature).scan()


def parse_signature(signature: str) -> SignatureType:
    """Parse a signature holding exactly one complete type"""
    if not signature:
        raise SignatureError("empty signature", signature, 0)
    types = parse_signature_list(signature)
    if len(types) > 1:
        raise SignatureError("expected a single complete type", signature,
                             len(types[0].signature))
    return types[0]



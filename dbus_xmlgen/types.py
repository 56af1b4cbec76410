"""Data types for D-Bus introspection documents"""

from dataclasses import dataclass, field
from typing import Optional

DEPRECATED = "org.freedesktop.DBus.Deprecated"
NO_REPLY = "org.freedesktop.DBus.Method.NoReply"
EMITS_CHANGED_SIGNAL = "org.freedesktop.DBus.Property.EmitsChangedSignal"

RECOGNIZED_ANNOTATIONS = (DEPRECATED, NO_REPLY, EMITS_CHANGED_SIGNAL)

# Interfaces every D-Bus object implements through the bus library itself
STANDARD_INTERFACES = (
    "org.freedesktop.DBus.Introspectable",
    "org.freedesktop.DBus.Peer",
    "org.freedesktop.DBus.Properties",
    "org.freedesktop.DBus.ObjectManager",
)

ACCESS_MODES = ("read", "write", "readwrite")
DIRECTIONS = ("in", "out")


@dataclass
class Annotation:
    """Key/value annotation, or an unknown XML extension kept verbatim"""
    name: str
    value: str
    opaque: bool = False


@dataclass
class Annotated:
    """Mixin for items that carry annotations and documentation"""
    annotations: list[Annotation] = field(default_factory=list)
    doc: Optional[str] = None

    def annotation(self, name: str) -> Optional[str]:
        for a in self.annotations:
            if a.name == name and not a.opaque:
                return a.value
        return None

    @property
    def is_deprecated(self) -> bool:
        return self.annotation(DEPRECATED) == "true"

    @property
    def extra_annotations(self) -> list[Annotation]:
        """Annotations that only end up in documentation"""
        return [a for a in self.annotations
                if a.opaque or a.name not in RECOGNIZED_ANNOTATIONS]


@dataclass
class Arg(Annotated):
    """Method or signal argument"""
    type: str = ""
    name: Optional[str] = None
    direction: str = "in"


@dataclass
class Method(Annotated):
    """Interface method"""
    name: str = ""
    args: list[Arg] = field(default_factory=list)

    @property
    def in_args(self) -> list[Arg]:
        return [a for a in self.args if a.direction == "in"]

    @property
    def out_args(self) -> list[Arg]:
        return [a for a in self.args if a.direction == "out"]

    @property
    def no_reply(self) -> bool:
        return self.annotation(NO_REPLY) == "true"


@dataclass
class Signal(Annotated):
    """Interface signal"""
    name: str = ""
    args: list[Arg] = field(default_factory=list)


@dataclass
class Property(Annotated):
    """Interface property"""
    name: str = ""
    type: str = ""
    access: str = "read"

    @property
    def readable(self) -> bool:
        return "read" in self.access

    @property
    def writable(self) -> bool:
        return "write" in self.access

    @property
    def emits_changed_signal(self) -> str:
        # "true" is the default per the D-Bus specification
        return self.annotation(EMITS_CHANGED_SIGNAL) or "true"


@dataclass
class Interface(Annotated):
    """D-Bus interface definition"""
    name: str = ""
    methods: list[Method] = field(default_factory=list)
    signals: list[Signal] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)


@dataclass
class Node(Annotated):
    """Root (or child) object of an introspection document"""
    name: Optional[str] = None
    interfaces: list[Interface] = field(default_factory=list)
    nodes: list["Node"] = field(default_factory=list)

    def interface(self, name: str) -> Optional[Interface]:
        return next((i for i in self.interfaces if i.name == name), None)

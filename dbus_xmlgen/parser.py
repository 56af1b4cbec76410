"""D-Bus introspection XML parser"""

import io
import re
import textwrap
import xml.sax
from typing import Optional, Union
from xml.sax import handler

from .errors import ModelError, StructuralError
from .logging import get_logger
from .types import (
    ACCESS_MODES, DIRECTIONS, Annotated, Annotation, Arg, Interface, Method,
    Node, Property, Signal,
)

logger = get_logger(__name__)

_NAME_ELEMENT_RE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')
MAX_NAME_LENGTH = 255

# Attributes each element understands; anything else becomes an opaque
# annotation on the element.
_KNOWN_ATTRIBUTES = {
    "node": ("name",),
    "interface": ("name",),
    "method": ("name",),
    "signal": ("name",),
    "property": ("name", "type", "access"),
    "arg": ("name", "type", "direction"),
    "annotation": ("name", "value"),
}

_MEMBER_ELEMENTS = ("method", "signal", "property")

_CHILDREN = {
    None: ("node",),
    "node": ("node", "interface"),
    "interface": ("method", "signal", "property", "annotation"),
    "method": ("arg", "annotation"),
    "signal": ("arg", "annotation"),
    "property": ("annotation",),
    "arg": ("annotation",),
    "annotation": (),
}


def _is_doc_element(name: str) -> bool:
    local = name.rsplit(":", 1)[-1]
    return local == "doc" or (local == "docstring" and ":" in name)


def validate_interface_name(name: str):
    """Check an interface name against the D-Bus naming rules"""
    elements = name.split(".")
    if (len(name) > MAX_NAME_LENGTH or len(elements) < 2
            or not all(_NAME_ELEMENT_RE.fullmatch(e) for e in elements)):
        raise ModelError(f"invalid interface name {name!r}", name)


def validate_member_name(name: str, element: str):
    """Check a method, signal, property or argument name"""
    if len(name) > MAX_NAME_LENGTH or not _NAME_ELEMENT_RE.fullmatch(name):
        raise ModelError(f"<{element}> name {name!r} is not a valid member name", name)


class _Capture:
    """Text collected from a doc or unknown element and its descendants"""

    def __init__(self, name: str, attrs: dict[str, str]):
        self.name = name
        self.attrs = attrs
        self.depth = 0
        self.text: list[str] = []


class IntrospectionHandler(handler.ContentHandler):
    """Builds the Node tree from SAX events"""

    def __init__(self):
        super().__init__()
        self.root: Optional[Node] = None
        self._stack: list[tuple[str, Annotated]] = []
        self._capture: Optional[_Capture] = None
        self._locator = None

    def setDocumentLocator(self, locator):
        self._locator = locator

    def _position(self) -> tuple[Optional[int], Optional[int]]:
        if self._locator is None:
            return None, None
        return self._locator.getLineNumber(), self._locator.getColumnNumber()

    def _error(self, message: str, element: str) -> StructuralError:
        line, column = self._position()
        return StructuralError(message, element, line, column)

    def _require(self, name: str, attrs, attribute: str) -> str:
        value = attrs.get(attribute)
        if not value:
            raise self._error(f"missing required attribute {attribute!r}", name)
        if attribute == "name" and name in _MEMBER_ELEMENTS:
            validate_member_name(value, name)
        return value

    # Element handling

    def startElement(self, name, attrs):
        attrs = dict(attrs)
        if self._capture is not None:
            self._capture.depth += 1
            return

        parent_tag, parent = self._stack[-1] if self._stack else (None, None)

        if parent is not None and (_is_doc_element(name) or name not in _CHILDREN[parent_tag]):
            if name in _KNOWN_ATTRIBUTES:
                raise self._error(f"unexpected element inside <{parent_tag}>", name)
            self._capture = _Capture(name, attrs)
            return
        if parent is None and name != "node":
            raise self._error("root element must be <node>", name)

        item = self._create(name, attrs, parent_tag, parent)
        for key in attrs:
            if key not in _KNOWN_ATTRIBUTES[name]:
                item.annotations.append(Annotation(name=key, value=attrs[key], opaque=True))
        self._stack.append((name, item))

    def endElement(self, name):
        if self._capture is not None:
            if self._capture.depth:
                self._capture.depth -= 1
                return
            self._finish_capture()
            return

        tag, item = self._stack.pop()
        if tag in ("method", "signal"):
            self._check_arg_names(tag, item)
        if tag == "node" and not self._stack:
            self.root = item

    def characters(self, content):
        if self._capture is not None:
            self._capture.text.append(content)

    def _finish_capture(self):
        capture, self._capture = self._capture, None
        _, owner = self._stack[-1]
        text = textwrap.dedent("".join(capture.text)).strip()
        if _is_doc_element(capture.name):
            if text:
                owner.doc = f"{owner.doc}\n\n{text}" if owner.doc else text
            return
        value = text or " ".join(f'{k}="{v}"' for k, v in capture.attrs.items())
        owner.annotations.append(Annotation(name=capture.name, value=value, opaque=True))

    def _create(self, name: str, attrs: dict[str, str], parent_tag: Optional[str],
                parent: Optional[Annotated]) -> Annotated:
        if name == "node":
            node = Node(name=attrs.get("name") or None)
            if parent is not None:
                node.name = self._require(name, attrs, "name")
                parent.nodes.append(node)
            return node

        if name == "interface":
            iface_name = self._require(name, attrs, "name")
            validate_interface_name(iface_name)
            if parent.interface(iface_name) is not None:
                raise ModelError(f"duplicate interface {iface_name!r}", iface_name)
            iface = Interface(name=iface_name)
            parent.interfaces.append(iface)
            return iface

        if name == "method":
            method = Method(name=self._require(name, attrs, "name"))
            parent.methods.append(method)
            return method

        if name == "signal":
            signal = Signal(name=self._require(name, attrs, "name"))
            parent.signals.append(signal)
            return signal

        if name == "property":
            prop = Property(
                name=self._require(name, attrs, "name"),
                type=self._require(name, attrs, "type"),
                access=self._require(name, attrs, "access"),
            )
            if prop.access not in ACCESS_MODES:
                raise self._error(f"invalid access {prop.access!r}", name)
            parent.properties.append(prop)
            return prop

        if name == "arg":
            default = "out" if parent_tag == "signal" else "in"
            arg = Arg(
                type=self._require(name, attrs, "type"),
                name=attrs.get("name") or None,
                direction=attrs.get("direction") or default,
            )
            if arg.name is not None:
                validate_member_name(arg.name, name)
            if arg.direction not in DIRECTIONS:
                raise self._error(f"invalid direction {arg.direction!r}", name)
            if parent_tag == "signal" and arg.direction != "out":
                raise self._error("signal arguments must have direction 'out'", name)
            parent.args.append(arg)
            return arg

        # annotation: anything nested inside it belongs to the annotated item
        key = self._require(name, attrs, "name")
        if "value" not in attrs:
            raise self._error("missing required attribute 'value'", name)
        parent.annotations.append(Annotation(name=key, value=attrs["value"]))
        return parent

    def _check_arg_names(self, tag: str, member: Union[Method, Signal]):
        seen = set()
        for arg in member.args:
            if arg.name is None:
                continue
            if arg.name in seen:
                raise ModelError(
                    f"{tag} {member.name!r} has more than one argument named {arg.name!r}",
                    member.name)
            seen.add(arg.name)


class IntrospectionParser:
    """Parses D-Bus introspection XML into a Node tree"""

    def __init__(self, content: str):
        self.content = content

    def parse(self) -> Node:
        content_handler = IntrospectionHandler()
        reader = xml.sax.make_parser()
        reader.setContentHandler(content_handler)
        reader.setFeature(handler.feature_namespaces, False)
        reader.setFeature(handler.feature_external_ges, False)
        reader.setFeature(handler.feature_external_pes, False)

        try:
            # parse() rather than feed() so the handler receives a locator
            reader.parse(io.StringIO(self.content))
        except xml.sax.SAXParseException as exc:
            raise StructuralError(
                exc.getMessage(), None, exc.getLineNumber(), exc.getColumnNumber()) from exc

        if content_handler.root is None:
            raise StructuralError("document has no <node> element")

        root = content_handler.root
        logger.debug("Parsed %d interface(s) and %d child node(s)",
                     len(root.interfaces), len(root.nodes))
        return root

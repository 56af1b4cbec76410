"""Tests for dbus_xmlgen.parser."""

from __future__ import annotations

import pytest

from dbus_xmlgen.errors import ModelError, StructuralError
from dbus_xmlgen.parser import IntrospectionParser, validate_interface_name


def _parse(xml: str):
    return IntrospectionParser(xml).parse()


def _interface(body: str, name: str = "org.example.Foo") -> str:
    return f'<node>\n  <interface name="{name}">\n{body}\n  </interface>\n</node>\n'


def test_parses_calc_document(calc_xml: str) -> None:
    root = _parse(calc_xml)

    assert root.name == "/com/example/Calc"
    assert [i.name for i in root.interfaces] == ["com.example.Calc", "org.freedesktop.DBus.Introspectable"]
    assert [n.name for n in root.nodes] == ["history"]

    calc = root.interface("com.example.Calc")
    assert [m.name for m in calc.methods] == ["Add", "DivMod", "Reset", "Clear"]
    assert [s.name for s in calc.signals] == ["ResultReady"]
    assert [(p.name, p.type, p.access) for p in calc.properties] == [
        ("Precision", "u", "readwrite"),
        ("Version", "s", "read"),
    ]


def test_argument_order_and_direction_are_preserved(calc_xml: str) -> None:
    div_mod = _parse(calc_xml).interface("com.example.Calc").methods[1]

    assert [(a.name, a.direction) for a in div_mod.args] == [
        ("dividend", "in"),
        ("quotient", "out"),
        ("divisor", "in"),
        ("remainder", "out"),
    ]
    assert [a.name for a in div_mod.in_args] == ["dividend", "divisor"]
    assert [a.name for a in div_mod.out_args] == ["quotient", "remainder"]


def test_default_directions() -> None:
    root = _parse(_interface(
        '    <method name="M"><arg type="s"/></method>\n'
        '    <signal name="S"><arg type="s"/></signal>'
    ))
    iface = root.interfaces[0]

    assert iface.methods[0].args[0].direction == "in"
    assert iface.signals[0].args[0].direction == "out"
    assert iface.methods[0].args[0].name is None


def test_recognized_annotations(calc_xml: str, player_xml: str) -> None:
    calc = _parse(calc_xml).interface("com.example.Calc")
    player = _parse(player_xml).interface("org.example.MediaPlayer")

    assert calc.methods[2].no_reply
    assert not calc.methods[0].no_reply
    assert player.methods[2].is_deprecated
    assert player.properties[0].emits_changed_signal == "invalidates"
    assert player.properties[1].emits_changed_signal == "true"


def test_doc_elements_become_documentation(player_xml: str) -> None:
    player = _parse(player_xml).interface("org.example.MediaPlayer")

    assert player.doc == "Controls a media player."
    assert player.methods[0].args[0].doc == "Location of the media to open."
    assert player.methods[1].doc is None


def test_unknown_content_is_kept_as_opaque_annotations(player_xml: str) -> None:
    shuffle = _parse(player_xml).interface("org.example.MediaPlayer").properties[2]

    assert [(a.name, a.value, a.opaque) for a in shuffle.annotations] == [
        ("vendor:scope", "session", True),
        ("org.example.Hint", "rarely used", False),
        ("vendor:note", "Ignored by older players.", True),
    ]
    assert shuffle.annotation("vendor:scope") is None
    assert shuffle.annotation("org.example.Hint") == "rarely used"


def test_unknown_empty_element_keeps_its_attributes() -> None:
    root = _parse(_interface('    <vendor:flag level="2" mode="fast"/>'))

    annotation = root.interfaces[0].annotations[0]
    assert annotation.name == "vendor:flag"
    assert annotation.value == 'level="2" mode="fast"'
    assert annotation.opaque


def test_annotation_children_attach_to_annotated_item() -> None:
    root = _parse(_interface(
        '    <method name="M">\n'
        '      <annotation name="org.example.A" value="1"><doc>Inner text</doc></annotation>\n'
        '    </method>'
    ))
    method = root.interfaces[0].methods[0]

    assert method.annotation("org.example.A") == "1"
    assert method.doc == "Inner text"


def test_root_with_only_child_nodes() -> None:
    root = _parse('<node><node name="a"/><node name="b"/></node>')

    assert root.name is None
    assert root.interfaces == []
    assert [n.name for n in root.nodes] == ["a", "b"]


def test_missing_attribute_reports_position() -> None:
    with pytest.raises(StructuralError) as excinfo:
        _parse(_interface("    <method/>"))

    error = excinfo.value
    assert error.element == "method"
    assert error.line == 3
    assert error.column == 4
    assert "'name'" in str(error)


def test_malformed_xml_reports_position() -> None:
    with pytest.raises(StructuralError) as excinfo:
        _parse('<node>\n  <interface name="org.example.Foo">\n</node>\n')

    assert excinfo.value.line == 3


@pytest.mark.parametrize("xml", ["", "   ", "<?xml version='1.0'?>"])
def test_empty_document_is_structural_error(xml: str) -> None:
    with pytest.raises(StructuralError):
        _parse(xml)


def test_root_must_be_node() -> None:
    with pytest.raises(StructuralError) as excinfo:
        _parse('<interface name="org.example.Foo"/>')

    assert excinfo.value.element == "interface"


@pytest.mark.parametrize(
    "body",
    [
        '    <property name="P" type="s"/>',
        '    <property name="P" access="read"/>',
        '    <property name="P" type="s" access="sometimes"/>',
        '    <method name="M"><arg name="a"/></method>',
        '    <method name="M"><arg name="a" type="s" direction="sideways"/></method>',
        '    <signal name="S"><arg name="a" type="s" direction="in"/></signal>',
        '    <method name="M"><annotation name="org.example.A"/></method>',
        '    <method name="M"><annotation value="1"/></method>',
    ],
)
def test_structural_errors(body: str) -> None:
    with pytest.raises(StructuralError):
        _parse(_interface(body))


def test_child_node_requires_name() -> None:
    with pytest.raises(StructuralError):
        _parse("<node><node/></node>")


def test_duplicate_interface_is_model_error() -> None:
    xml = '<node><interface name="org.example.Foo"/><interface name="org.example.Foo"/></node>'

    with pytest.raises(ModelError) as excinfo:
        _parse(xml)

    assert excinfo.value.subject == "org.example.Foo"


def test_duplicate_argument_names_are_model_error() -> None:
    with pytest.raises(ModelError):
        _parse(_interface('    <method name="M"><arg name="a" type="s"/><arg name="a" type="i"/></method>'))


def test_member_name_with_slash_is_model_error() -> None:
    with pytest.raises(ModelError):
        _parse(_interface('    <method name="Get/All"/>'))


@pytest.mark.parametrize("name", ["Calc", "org..Calc", "org.3com.Calc", "org.example.Calc-2", "a." + "b" * 255])
def test_invalid_interface_names(name: str) -> None:
    with pytest.raises(ModelError):
        validate_interface_name(name)

    with pytest.raises(ModelError):
        _parse(f'<node><interface name="{name}"/></node>')


@pytest.mark.parametrize("name", ["org.example.Calc", "_a._b", "com.example.V2.Thing"])
def test_valid_interface_names(name: str) -> None:
    validate_interface_name(name)


@pytest.mark.parametrize(
    "body",
    [
        '    <method name="Get&quot;"/>',
        '    <method name="Get&#10;"/>',
        '    <signal name="Changed-2"/>',
        '    <property name="2Fast" type="b" access="read"/>',
        '    <method name="M"><arg name="a b" type="s"/></method>',
        '    <method name="' + "M" * 256 + '"/>',
    ],
)
def test_invalid_member_names(body: str) -> None:
    with pytest.raises(ModelError):
        _parse(_interface(body))


@pytest.mark.parametrize(
    ("xml", "element"),
    [
        ('<node><method name="Stray"/></node>', "method"),
        ('<node><interface name="org.example.A"><arg type="s"/></interface></node>', "arg"),
        ('<node><interface name="org.example.A"><method name="M">'
         '<property name="P" type="s" access="read"/></method></interface></node>', "property"),
        ('<node><interface name="org.example.A"><node name="child"/></interface></node>', "node"),
        ('<node><interface name="org.example.A"><annotation name="a.b" value="1">'
         '<annotation name="c.d" value="2"/></annotation></interface></node>', "annotation"),
    ],
)
def test_known_element_out_of_place(xml: str, element: str) -> None:
    with pytest.raises(StructuralError) as excinfo:
        _parse(xml)

    assert excinfo.value.element == element
    assert "unexpected element" in str(excinfo.value)
    assert excinfo.value.line == 1


def test_interface_name_with_trailing_newline() -> None:
    with pytest.raises(ModelError):
        validate_interface_name("org.example\n")

    with pytest.raises(ModelError):
        _parse('<node><interface name="org.example&#10;"/></node>')
